from rest_framework import serializers
from .models import EmailTemplate, EmailHistory


class EmailTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailTemplate
        fields = ['id', 'workflow_type', 'name', 'subject', 'html_content', 'plain_text_content',
                  'variables', 'is_active', 'description', 'version', 'created_by', 'updated_by',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'version', 'created_by', 'updated_by', 'created_at', 'updated_at']


class EmailHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailHistory
        fields = ['id', 'recipient', 'subject', 'workflow_type', 'template', 'template_version',
                  'status', 'sent_at', 'user', 'metadata', 'failure_reason', 'retry_count',
                  'max_retries', 'related_type', 'related_id', 'created_at']

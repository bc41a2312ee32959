from rest_framework import serializers
from .models import Submission, ReportIssue, Feedback, ContactMessage


class SubmissionSerializer(serializers.ModelSerializer):
    submitted_by = serializers.CharField(source='user.display_name', read_only=True)

    class Meta:
        model = Submission
        fields = ['id', 'user', 'submitted_by', 'type', 'title', 'description', 'category', 'data',
                  'resource_id', 'location', 'contact', 'attachments', 'status', 'priority',
                  'admin_notes', 'assigned_to', 'reviewed_by', 'reviewed_at', 'published_id',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'user', 'status', 'priority', 'admin_notes', 'assigned_to',
                            'reviewed_by', 'reviewed_at', 'published_id', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required.')
        return value

    def validate_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Submission data must be an object.')
        return value

    def validate(self, data):
        submission_type = data.get('type', getattr(self.instance, 'type', None))
        if data.get('resource_id') and submission_type == 'promotion':
            raise serializers.ValidationError({'resource_id': 'Promotion submissions cannot update records.'})
        return data


class ReportIssueSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReportIssue
        fields = ['id', 'user', 'item_type', 'item_id', 'reason', 'description', 'severity', 'status',
                  'action_taken', 'resolved_at', 'admin', 'attachments', 'view_count', 'viewed_at',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'user', 'status', 'action_taken', 'resolved_at', 'admin',
                            'view_count', 'viewed_at', 'created_at', 'updated_at']
        extra_kwargs = {'severity': {'required': False}}

    def to_internal_value(self, data):
        data = data.copy() if hasattr(data, 'copy') else dict(data)
        if data.get('severity') not in dict(ReportIssue.SEVERITY_CHOICES):
            data['severity'] = 'medium'
        return super().to_internal_value(data)


class FeedbackSerializer(serializers.ModelSerializer):
    class Meta:
        model = Feedback
        fields = ['id', 'type', 'subject', 'message', 'email', 'rating', 'likes', 'dislikes', 'status',
                  'priority', 'category', 'user', 'reviewed_by', 'reviewed_at', 'notes', 'view_count',
                  'viewed_at', 'created_at', 'updated_at']
        read_only_fields = ['id', 'status', 'priority', 'user', 'reviewed_by', 'reviewed_at', 'notes',
                            'view_count', 'viewed_at', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        data = data.copy() if hasattr(data, 'copy') else dict(data)
        if isinstance(data.get('type'), str):
            data['type'] = data['type'].strip().lower()
        return super().to_internal_value(data)

    def validate_message(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Message is required.')
        return value

    def validate_rating(self, value):
        if value is not None and not 1 <= value <= 5:
            raise serializers.ValidationError('Rating must be between 1 and 5.')
        return value


class ContactMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ['id', 'first_name', 'last_name', 'email', 'subject', 'message', 'status', 'priority',
                  'category', 'response', 'responded_by', 'responded_at', 'view_count', 'created_at']
        read_only_fields = ['id', 'status', 'priority', 'response', 'responded_by', 'responded_at',
                            'view_count', 'created_at']

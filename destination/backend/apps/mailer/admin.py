from django.contrib import admin
from .models import EmailTemplate, EmailTemplateVersion, EmailHistory


class EmailTemplateVersionInline(admin.TabularInline):
    model = EmailTemplateVersion
    extra = 0
    readonly_fields = ['version', 'subject', 'updated_by', 'created_at']
    fields = readonly_fields


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'workflow_type', 'version', 'is_active', 'updated_at']
    list_filter = ['workflow_type', 'is_active']
    search_fields = ['name', 'subject']
    readonly_fields = ['version']
    inlines = [EmailTemplateVersionInline]


@admin.register(EmailHistory)
class EmailHistoryAdmin(admin.ModelAdmin):
    list_display = ['recipient', 'workflow_type', 'status', 'retry_count', 'sent_at', 'created_at']
    list_filter = ['status', 'workflow_type']
    search_fields = ['recipient', 'subject']

from django.contrib import admin
from .models import Submission, ReportIssue, Feedback, ContactMessage


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'user', 'status', 'priority', 'assigned_to', 'created_at']
    list_filter = ['status', 'type', 'priority']
    search_fields = ['title', 'description', 'user__email']


@admin.register(ReportIssue)
class ReportIssueAdmin(admin.ModelAdmin):
    list_display = ['item_type', 'item_id', 'reason', 'severity', 'status', 'user', 'created_at']
    list_filter = ['status', 'severity', 'item_type']
    search_fields = ['reason', 'description', 'user__email']


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ['type', 'subject', 'rating', 'status', 'priority', 'category', 'created_at']
    list_filter = ['type', 'status', 'priority', 'category']
    search_fields = ['subject', 'message', 'email']


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ['email', 'subject', 'category', 'status', 'priority', 'created_at']
    list_filter = ['status', 'category', 'priority']
    search_fields = ['email', 'subject', 'message']

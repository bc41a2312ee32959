from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, AuditLog, Notification


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'status', 'email_verified', 'created_at']
    list_filter = ['role', 'status', 'email_verified']
    search_fields = ['email', 'first_name', 'last_name', 'business_name']
    ordering = ['-created_at']
    fieldsets = UserAdmin.fieldsets + (
        ('Destination Kolkata', {'fields': ('role', 'status', 'phone', 'city', 'business_name',
                                            'business_type', 'email_verified', 'preferences')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'ip_address', 'created_at']
    list_filter = ['action']
    search_fields = ['user__email', 'action']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'title', 'notif_type', 'is_read', 'created_at']
    list_filter = ['notif_type', 'is_read']

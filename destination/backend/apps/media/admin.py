from django.contrib import admin
from .models import UploadedImage


@admin.register(UploadedImage)
class UploadedImageAdmin(admin.ModelAdmin):
    list_display = ['public_id', 'user', 'folder', 'format', 'bytes', 'created_at']
    list_filter = ['folder', 'format']
    search_fields = ['public_id', 'user__email']

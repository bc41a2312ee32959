from django.contrib import admin
from .models import DataIngestionHistory


@admin.register(DataIngestionHistory)
class DataIngestionHistoryAdmin(admin.ModelAdmin):
    list_display = ['data_type', 'operation', 'status', 'records_processed', 'records_successful',
                    'records_failed', 'duration_ms', 'created_at']
    list_filter = ['data_type', 'operation', 'status']
    readonly_fields = ['errors', 'metadata', 'start_time', 'end_time', 'duration_ms']

from django.db import models


class DataIngestionHistory(models.Model):
    DATA_TYPES = [
        ('hotels', 'Hotels'), ('restaurants', 'Restaurants'), ('attractions', 'Attractions'),
        ('events', 'Events'), ('sports', 'Sports'), ('promotions', 'Promotions'),
        ('travel', 'Travel'), ('other', 'Other'),
    ]
    OPERATIONS = [
        ('seed', 'Seed'), ('ingest', 'Ingest'), ('update', 'Update'),
        ('delete', 'Delete'), ('import', 'Import'), ('export', 'Export'),
    ]
    STATUS_CHOICES = [('success', 'Success'), ('partial', 'Partial'), ('failed', 'Failed')]

    data_type = models.CharField(max_length=20, choices=DATA_TYPES)
    operation = models.CharField(max_length=10, choices=OPERATIONS, default='ingest')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    records_processed = models.PositiveIntegerField(default=0)
    records_successful = models.PositiveIntegerField(default=0)
    records_failed = models.PositiveIntegerField(default=0)
    records_skipped = models.PositiveIntegerField(default=0)
    errors = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    duration_ms = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'data ingestion history'

    def __str__(self):
        return f'{self.operation} {self.data_type} ({self.status})'

    @classmethod
    def status_for(cls, stats):
        if stats['total'] and stats['failed'] >= stats['total']:
            return 'failed'
        if stats['failed']:
            return 'partial'
        return 'success'

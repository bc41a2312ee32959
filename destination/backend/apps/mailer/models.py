from django.db import models, transaction
from django.conf import settings

WORKFLOW_TYPES = [
    ('booking_confirmation', 'Booking confirmation'),
    ('booking_status_update', 'Booking status update'),
    ('admin_alert', 'Admin alert'),
    ('registration_welcome', 'Registration welcome'),
    ('registration_admin_notification', 'Registration admin notification'),
    ('submission_admin_notification', 'Submission admin notification'),
    ('submission_approval', 'Submission approval'),
    ('submission_rejection', 'Submission rejection'),
    ('resource_assignment', 'Resource assignment'),
    ('listing_invitation', 'Listing invitation'),
    ('password_reset', 'Password reset'),
    ('contact_response', 'Contact response'),
    ('verification_test', 'Verification test'),
]


class EmailTemplate(models.Model):
    workflow_type = models.CharField(max_length=50, choices=WORKFLOW_TYPES)
    name = models.CharField(max_length=200)
    subject = models.CharField(max_length=300)
    html_content = models.TextField()
    plain_text_content = models.TextField(blank=True)
    variables = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    description = models.TextField(blank=True)
    version = models.PositiveIntegerField(default=1)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['workflow_type', '-updated_at']

    def __str__(self):
        return f'{self.workflow_type} v{self.version}'

    @classmethod
    def active_for(cls, workflow_type):
        return cls.objects.filter(workflow_type=workflow_type, is_active=True).order_by('-updated_at').first()

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if self.pk:
                previous = EmailTemplate.objects.filter(pk=self.pk).first()
                if previous and (previous.subject, previous.html_content, previous.plain_text_content) != \
                        (self.subject, self.html_content, self.plain_text_content):
                    EmailTemplateVersion.objects.create(
                        template=self, version=previous.version, subject=previous.subject,
                        html_content=previous.html_content,
                        plain_text_content=previous.plain_text_content,
                        updated_by=self.updated_by,
                    )
                    self.version = previous.version + 1
            super().save(*args, **kwargs)
            if self.is_active:
                EmailTemplate.objects.filter(workflow_type=self.workflow_type, is_active=True) \
                    .exclude(pk=self.pk).update(is_active=False)


class EmailTemplateVersion(models.Model):
    template = models.ForeignKey(EmailTemplate, on_delete=models.CASCADE, related_name='versions')
    version = models.PositiveIntegerField()
    subject = models.CharField(max_length=300)
    html_content = models.TextField()
    plain_text_content = models.TextField(blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-version']


class EmailHistory(models.Model):
    STATUS_CHOICES = [('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed')]

    recipient = models.EmailField()
    subject = models.CharField(max_length=300)
    template = models.ForeignKey(EmailTemplate, on_delete=models.SET_NULL, null=True, blank=True)
    template_version = models.PositiveIntegerField(null=True, blank=True)
    workflow_type = models.CharField(max_length=50, choices=WORKFLOW_TYPES)
    context = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')
    sent_at = models.DateTimeField(null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    metadata = models.JSONField(default=dict, blank=True)
    failure_reason = models.TextField(blank=True)
    retry_count = models.PositiveIntegerField(default=0)
    max_retries = models.PositiveIntegerField(default=3)
    related_type = models.CharField(max_length=100, blank=True)
    related_id = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'email history'

    def __str__(self):
        return f'{self.workflow_type} -> {self.recipient} ({self.status})'

    @property
    def can_retry(self):
        return self.status == 'failed' and self.retry_count < self.max_retries

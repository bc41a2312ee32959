from django.db import models
from django.conf import settings
from django.db.models import F
from django.utils import timezone

PRIORITY_CHOICES = [('low', 'Low'), ('medium', 'Medium'), ('high', 'High')]


class ViewTrackingMixin(models.Model):
    viewed_at = models.DateTimeField(null=True, blank=True)
    viewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    view_count = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True

    def mark_viewed(self, user):
        type(self).objects.filter(pk=self.pk).update(
            view_count=F('view_count') + 1, viewed_at=timezone.now(), viewed_by=user
        )
        self.refresh_from_db(fields=['view_count', 'viewed_at', 'viewed_by'])


class Submission(models.Model):
    TYPE_CHOICES = [
        ('hotel', 'Hotel'), ('restaurant', 'Restaurant'), ('attraction', 'Attraction'),
        ('event', 'Event'), ('sports', 'Sports'), ('travel', 'Travel'), ('promotion', 'Promotion'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'), ('in_review', 'In review'),
        ('approved', 'Approved'), ('rejected', 'Rejected'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='submissions'
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    data = models.JSONField(default=dict)
    resource_id = models.PositiveIntegerField(null=True, blank=True)
    location = models.JSONField(default=dict, blank=True)
    contact = models.JSONField(default=dict, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    admin_notes = models.TextField(blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    published_id = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.type}: {self.title} ({self.status})'

    @property
    def is_update(self):
        return self.resource_id is not None


class ReportIssue(ViewTrackingMixin):
    ITEM_TYPES = [
        ('review', 'Review'), ('listing', 'Listing'), ('comment', 'Comment'),
        ('user', 'User'), ('content', 'Content'),
    ]
    SEVERITY_CHOICES = [('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')]
    STATUS_CHOICES = [
        ('open', 'Open'), ('investigating', 'Investigating'),
        ('resolved', 'Resolved'), ('dismissed', 'Dismissed'),
    ]
    OPEN_STATUSES = ('open', 'investigating')
    CLOSED_STATUSES = ('resolved', 'dismissed')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='issue_reports'
    )
    item_type = models.CharField(max_length=20, choices=ITEM_TYPES)
    item_id = models.CharField(max_length=50)
    reason = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='medium')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='open')
    action_taken = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.item_type}#{self.item_id}: {self.reason}'

    @classmethod
    def has_open_report(cls, user, item_type, item_id):
        return cls.objects.filter(user=user, item_type=item_type, item_id=str(item_id),
                                  status__in=cls.OPEN_STATUSES).exists()


class Feedback(ViewTrackingMixin):
    TYPE_CHOICES = [
        ('general', 'General'), ('bug', 'Bug'), ('feature', 'Feature'),
        ('content', 'Content'), ('design', 'Design'), ('other', 'Other'),
    ]
    STATUS_CHOICES = [
        ('new', 'New'), ('reviewed', 'Reviewed'),
        ('implemented', 'Implemented'), ('declined', 'Declined'),
    ]
    CATEGORY_CHOICES = [
        ('website', 'Website'), ('mobile', 'Mobile'), ('content', 'Content'),
        ('features', 'Features'), ('performance', 'Performance'), ('other', 'Other'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general')
    subject = models.CharField(max_length=200, blank=True)
    message = models.TextField()
    email = models.EmailField(blank=True)
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    likes = models.TextField(blank=True)
    dislikes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='website')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'feedback'

    def __str__(self):
        return f'{self.type}: {self.subject or self.message[:40]}'


class ContactMessage(ViewTrackingMixin):
    STATUS_CHOICES = [
        ('new', 'New'), ('in_progress', 'In progress'),
        ('resolved', 'Resolved'), ('closed', 'Closed'),
    ]
    CATEGORY_CHOICES = [
        ('general', 'General'), ('business', 'Business'), ('advertising', 'Advertising'),
        ('partnership', 'Partnership'), ('technical', 'Technical'), ('feedback', 'Feedback'),
        ('other', 'Other'),
    ]

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField()
    subject = models.CharField(max_length=200)
    message = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='general')
    response = models.TextField(blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.email}: {self.subject}'

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

from decimal import Decimal, ROUND_HALF_UP

from django.db import models
from django.db.models import Avg, Count
from django.conf import settings

from apps.listings.registry import get_model


class Review(models.Model):
    ENTITY_TYPES = [
        ('hotel', 'Hotel'), ('restaurant', 'Restaurant'), ('attraction', 'Attraction'),
        ('event', 'Event'), ('sports', 'Sports'), ('travel', 'Travel'),
    ]
    STATUS_CHOICES = [('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True,
        related_name='reviews'
    )
    author_name = models.CharField(max_length=150, blank=True)
    author_email = models.EmailField(blank=True)
    entity_type = models.CharField(max_length=20, choices=ENTITY_TYPES)
    entity_id = models.PositiveIntegerField()
    rating = models.PositiveSmallIntegerField(choices=[(i, i) for i in range(1, 6)])
    title = models.CharField(max_length=200, blank=True)
    comment = models.TextField(max_length=2000)
    images = models.JSONField(default=list, blank=True)
    helpful_count = models.PositiveIntegerField(default=0)
    verified = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    moderated_at = models.DateTimeField(null=True, blank=True)
    moderation_notes = models.TextField(blank=True)
    is_edited = models.BooleanField(default=False)
    last_edited_at = models.DateTimeField(null=True, blank=True)
    visit_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'entity_type', 'entity_id'], name='one_review_per_user_entity'),
        ]
        indexes = [models.Index(fields=['entity_type', 'entity_id', 'status'])]

    def __str__(self):
        return f'{self.author_display} → {self.entity_type}#{self.entity_id} ({self.rating}★)'

    @property
    def author_display(self):
        if self.user_id:
            return self.user.display_name
        return self.author_name or 'Anonymous'

    @classmethod
    def stats_for(cls, entity_type, entity_id, statuses=('approved',)):
        qs = cls.objects.filter(entity_type=entity_type, entity_id=entity_id, status__in=statuses)
        agg = qs.aggregate(avg=Avg('rating'), total=Count('id'))
        distribution = {str(i): 0 for i in range(1, 6)}
        for rating, n in qs.values_list('rating').annotate(n=Count('id')).order_by():
            distribution[str(rating)] = n
        avg = agg['avg'] or 0
        return {
            'average_rating': round(float(avg), 1),
            'total_reviews': agg['total'],
            'rating_distribution': distribution,
        }

    @classmethod
    def refresh_listing_rating(cls, entity_type, entity_id):
        """Recompute a listing's rating from its approved reviews."""
        model = get_model(entity_type)
        if model is None:
            return
        agg = cls.objects.filter(entity_type=entity_type, entity_id=entity_id, status='approved') \
            .aggregate(avg=Avg('rating'), total=Count('id'))
        average = Decimal(str(agg['avg'] or 0)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
        model.objects.filter(pk=entity_id).update(rating_average=average, rating_count=agg['total'])


class HelpfulVote(models.Model):
    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name='helpful_votes')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='+')
    helpful = models.BooleanField(default=True)
    voted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('review', 'user')


class ReviewReport(models.Model):
    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name='reports')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='+')
    reason = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('review', 'user')

from django.db import models
from django.conf import settings
import random
import string


class Booking(models.Model):
    ITEM_TYPES = [
        ('hotel', 'Hotel'), ('restaurant', 'Restaurant'), ('event', 'Event'),
        ('attraction', 'Attraction'), ('sports', 'Sports'),
    ]
    PAYMENT_STATUS_CHOICES = [
        ('pending', 'Pending'), ('completed', 'Completed'),
        ('failed', 'Failed'), ('refunded', 'Refunded'),
    ]
    STATUS_CHOICES = [
        ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled'),
        ('completed', 'Completed'), ('no_show', 'No show'),
    ]
    DATED_TYPES = ('event', 'sports')

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bookings'
    )
    item_type = models.CharField(max_length=20, choices=ITEM_TYPES)
    item_id = models.PositiveIntegerField()
    item_name = models.CharField(max_length=200)
    item_location = models.CharField(max_length=300, blank=True)
    guest_name = models.CharField(max_length=150)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=20)
    booking_date = models.DateTimeField(auto_now_add=True)
    check_in_date = models.DateField(null=True, blank=True)
    check_out_date = models.DateField(null=True, blank=True)
    event_date = models.DateField(null=True, blank=True)
    number_of_guests = models.PositiveIntegerField(default=1)
    number_of_rooms = models.PositiveIntegerField(default=1)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    promo_code = models.CharField(max_length=30, blank=True)
    currency = models.CharField(max_length=3, default='INR')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='pending')
    booking_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='confirmed')
    special_requests = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    cancellation_date = models.DateTimeField(null=True, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    confirmation_number = models.CharField(max_length=12, unique=True, editable=False)
    confirmation_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.confirmation_number} {self.customer.email} → {self.item_name}"

    def save(self, *args, **kwargs):
        if not self.confirmation_number:
            self.confirmation_number = self.generate_confirmation_number()
        super().save(*args, **kwargs)

    @classmethod
    def generate_confirmation_number(cls):
        while True:
            code = "DK" + "".join(random.choices(string.ascii_uppercase + string.digits, k=8))
            if not cls.objects.filter(confirmation_number=code).exists():
                return code

    @property
    def nights(self):
        if self.check_in_date and self.check_out_date:
            return (self.check_out_date - self.check_in_date).days
        return None

    def email_context(self):
        return {
            "guest_name": self.guest_name, "item_name": self.item_name,
            "confirmation_number": self.confirmation_number,
            "check_in_date": self.check_in_date, "check_out_date": self.check_out_date,
            "event_date": self.event_date, "number_of_guests": self.number_of_guests,
            "total_amount": self.total_amount, "discount_amount": self.discount_amount or None,
            "currency": self.currency, "booking_status": self.get_booking_status_display(),
            "special_requests": self.special_requests,
            "cancellation_reason": self.cancellation_reason, "refund_amount": self.refund_amount,
        }


class Favorite(models.Model):
    ITEM_TYPES = [
        ('hotel', 'Hotel'), ('restaurant', 'Restaurant'), ('attraction', 'Attraction'),
        ('event', 'Event'), ('sports', 'Sports'), ('travel', 'Travel'),
    ]
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='favorites'
    )
    item_type = models.CharField(max_length=20, choices=ITEM_TYPES)
    item_id = models.PositiveIntegerField()
    item_name = models.CharField(max_length=200)
    notes = models.TextField(blank=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'item_type', 'item_id')
        ordering = ['-added_at']

    def __str__(self):
        return f"{self.user.email} ♥ {self.item_name}"

from decimal import Decimal, ROUND_HALF_UP

from django.db import models
from django.conf import settings
from django.utils import timezone


class PromotionError(Exception):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


class Promotion(models.Model):
    BUSINESS_TYPES = [
        ('hotel', 'Hotel'), ('restaurant', 'Restaurant'),
        ('attraction', 'Attraction'), ('event', 'Event'),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField()
    business_type = models.CharField(max_length=20, choices=BUSINESS_TYPES)
    business_id = models.PositiveIntegerField(null=True, blank=True)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    code = models.CharField(max_length=30, unique=True, blank=True)
    min_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_discount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    terms = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='promotions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['valid_until']

    def __str__(self):
        return f'{self.code} - {self.title}'

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = self.generate_code()
        self.code = self.code.upper().strip()
        super().save(*args, **kwargs)

    @classmethod
    def generate_code(cls):
        stamp = str(int(timezone.now().timestamp() * 1000))
        code = 'PROMO' + stamp[-6:]
        n = 0
        while cls.objects.filter(code=code).exists():
            n += 1
            code = 'PROMO' + str(int(stamp[-6:]) + n).zfill(6)[-6:]
        return code

    @property
    def is_current(self):
        now = timezone.now()
        return self.is_active and self.valid_from <= now <= self.valid_until

    @property
    def limit_reached(self):
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def compute_discount(self, amount):
        amount = Decimal(str(amount))
        if self.discount_percent:
            discount = amount * self.discount_percent / Decimal('100')
            if self.max_discount is not None:
                discount = min(discount, self.max_discount)
        elif self.discount_amount:
            discount = self.discount_amount
        else:
            discount = Decimal('0')
        discount = min(discount, amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        return discount

    @classmethod
    def validate_code(cls, code, amount, business_type=None):
        """Return (promotion, discount) or raise PromotionError."""
        code = str(code or '').upper().strip()
        now = timezone.now()
        promo = cls.objects.filter(code=code, is_active=True,
                                   valid_from__lte=now, valid_until__gte=now).first()
        if promo is None:
            raise PromotionError('Invalid or expired promotion code', status=404)
        if business_type and promo.business_type != business_type:
            raise PromotionError(f'Promotion code is only valid for {promo.business_type} bookings')
        if promo.limit_reached:
            raise PromotionError('Promotion code usage limit reached')
        amount = Decimal(str(amount or 0))
        if promo.min_amount is not None and amount < promo.min_amount:
            raise PromotionError(f'Minimum amount of {promo.min_amount} required')
        return promo, promo.compute_discount(amount)

    def redeem(self):
        """Atomically consume one use. Returns False when the limit is reached."""
        qs = Promotion.objects.filter(pk=self.pk)
        if self.usage_limit is not None:
            qs = qs.filter(used_count__lt=models.F('usage_limit'))
        updated = qs.update(used_count=models.F('used_count') + 1)
        if updated:
            self.refresh_from_db(fields=['used_count'])
        return bool(updated)

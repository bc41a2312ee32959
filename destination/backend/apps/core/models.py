from django.db import models
from django.contrib.auth.models import AbstractUser
from django.conf import settings


def default_preferences():
    return {
        'email_notifications': True,
        'sms_notifications': False,
        'language': 'en',
        'currency': 'INR',
    }


class User(AbstractUser):
    ROLE_CUSTOMER = 'customer'
    ROLE_USER = 'user'
    ROLE_BUSINESS = 'business'
    ROLE_MODERATOR = 'moderator'
    ROLE_ADMIN = 'admin'
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_CHOICES = [
        (ROLE_CUSTOMER, 'Customer'), (ROLE_USER, 'User'), (ROLE_BUSINESS, 'Business'),
        (ROLE_MODERATOR, 'Moderator'), (ROLE_ADMIN, 'Admin'), (ROLE_SUPER_ADMIN, 'Super Admin'),
    ]
    ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)
    MODERATOR_ROLES = (ROLE_MODERATOR, ROLE_ADMIN, ROLE_SUPER_ADMIN)
    CUSTOMER_ROLES = (ROLE_CUSTOMER, ROLE_USER, ROLE_BUSINESS, ROLE_ADMIN, ROLE_SUPER_ADMIN)

    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = [('active', 'Active'), ('inactive', 'Inactive'), ('suspended', 'Suspended')]

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    phone = models.CharField(max_length=20, blank=True)
    city = models.CharField(max_length=100, blank=True, default='Kolkata')
    business_name = models.CharField(max_length=200, blank=True)
    business_type = models.CharField(max_length=50, blank=True)
    email_verified = models.BooleanField(default=False)
    preferences = models.JSONField(default=default_preferences)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.get_full_name().strip() or self.username or self.email

    @property
    def is_admin_role(self):
        return self.role in self.ADMIN_ROLES or self.is_superuser

    @property
    def is_moderator_role(self):
        return self.role in self.MODERATOR_ROLES or self.is_superuser

    @property
    def is_active_status(self):
        return self.status == self.STATUS_ACTIVE

    def save(self, *args, **kwargs):
        if not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    @classmethod
    def staff_recipients(cls, roles=None):
        return cls.objects.filter(role__in=roles or cls.ADMIN_ROLES, status=cls.STATUS_ACTIVE)


class AuditLog(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True)
    action = models.CharField(max_length=200)
    details = models.JSONField(default=dict)
    ip_address = models.GenericIPAddressField(null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.action} by {self.user_id}'

    @classmethod
    def log(cls, user, action, details=None, request=None):
        ip = None
        if request:
            forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
            ip = forwarded.split(',')[0].strip() if forwarded else request.META.get('REMOTE_ADDR')
        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None
        return cls.objects.create(user=user, action=action, details=details or {}, ip_address=ip)


class Notification(models.Model):
    TYPES = [
        ('booking', 'Booking'),
        ('cancellation', 'Cancellation'),
        ('review', 'Review'),
        ('submission', 'Submission'),
        ('report', 'Report'),
        ('system', 'System'),
    ]
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    notif_type = models.CharField(max_length=20, choices=TYPES, default='system')
    link = models.CharField(max_length=200, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.user.email}: {self.title}'

    @classmethod
    def notify(cls, user, title, message, notif_type='system', link=''):
        if user is None:
            return None
        return cls.objects.create(user=user, title=title, message=message,
                                  notif_type=notif_type, link=link)

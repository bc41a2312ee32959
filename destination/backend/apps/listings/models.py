from django.db import models
from django.conf import settings
from django.utils.text import slugify


def default_entry_fee():
    return {'adult': 0, 'child': 0, 'senior': 0, 'currency': 'INR', 'is_free': True}


class Listing(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_PENDING = 'pending'
    STATUS_CHOICES = [
        ('active', 'Active'), ('inactive', 'Inactive'),
        ('pending', 'Pending'), ('rejected', 'Rejected'),
    ]

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=200, blank=True)
    images = models.JSONField(default=list, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    street = models.CharField(max_length=255, blank=True)
    area = models.CharField(max_length=150, blank=True)
    city = models.CharField(max_length=100, default='Kolkata')
    state = models.CharField(max_length=100, default='West Bengal')
    pincode = models.CharField(max_length=10, blank=True)
    landmark = models.CharField(max_length=200, blank=True)
    phones = models.JSONField(default=list, blank=True)
    email = models.EmailField(blank=True)
    website = models.URLField(max_length=500, blank=True)
    social_media = models.JSONField(default=dict, blank=True)
    rating_average = models.DecimalField(max_digits=2, decimal_places=1, default=0)
    rating_count = models.PositiveIntegerField(default=0)
    amenities = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    featured = models.BooleanField(default=False)
    promoted = models.BooleanField(default=False)
    views = models.PositiveIntegerField(default=0)
    osm_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    source = models.CharField(max_length=50, default='manual')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='+'
    )
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='+'
    )
    verification_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    item_type = None

    class Meta:
        abstract = True
        ordering = ['-featured', '-promoted', '-rating_average', '-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug or self._name_changed():
            self.slug = self.unique_slug(self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    def _name_changed(self):
        if not self.pk:
            return False
        old = type(self).objects.filter(pk=self.pk).values_list('name', flat=True).first()
        return old is not None and old != self.name

    @classmethod
    def unique_slug(cls, name, exclude_pk=None):
        base = slugify(name)[:240] or cls.item_type or 'listing'
        slug, n = base, 2
        while cls.objects.filter(slug=slug).exclude(pk=exclude_pk).exists():
            slug = f'{base}-{n}'
            n += 1
        return slug

    @property
    def primary_image(self):
        for img in self.images or []:
            if img.get('is_primary'):
                return img.get('url')
        return self.images[0].get('url') if self.images else None

    @property
    def location_label(self):
        return ', '.join(p for p in [self.area, self.city] if p)

    @property
    def is_bookable(self):
        return self.status == self.STATUS_ACTIVE


class Hotel(Listing):
    CATEGORY_CHOICES = [
        ('Luxury', 'Luxury'), ('Business', 'Business'), ('Budget', 'Budget'),
        ('Boutique', 'Boutique'), ('Resort', 'Resort'), ('Heritage', 'Heritage'),
    ]
    item_type = 'hotel'

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    price_min = models.DecimalField(max_digits=10, decimal_places=2)
    price_max = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='INR')
    room_types = models.JSONField(default=list, blank=True)
    check_in_time = models.CharField(max_length=5, default='14:00')
    check_out_time = models.CharField(max_length=5, default='12:00')
    cancellation_policy = models.TextField(blank=True)
    policies = models.JSONField(default=list, blank=True)

    class Meta(Listing.Meta):
        pass


class Restaurant(Listing):
    PRICE_RANGE_CHOICES = [
        ('Budget', 'Budget'), ('Mid-range', 'Mid-range'),
        ('Fine Dining', 'Fine Dining'), ('Luxury', 'Luxury'),
    ]
    item_type = 'restaurant'

    cuisine = models.JSONField(default=list)
    price_range = models.CharField(max_length=20, choices=PRICE_RANGE_CHOICES)
    opening_hours = models.JSONField(default=dict, blank=True)
    menu = models.JSONField(default=list, blank=True)
    delivery_partners = models.JSONField(default=list, blank=True)
    reservation_required = models.BooleanField(default=False)
    avg_meal_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    class Meta(Listing.Meta):
        pass


class Attraction(Listing):
    CATEGORY_CHOICES = [
        ('Historical', 'Historical'), ('Religious', 'Religious'), ('Museums', 'Museums'),
        ('Parks', 'Parks'), ('Architecture', 'Architecture'), ('Cultural', 'Cultural'),
        ('Educational', 'Educational'), ('Entertainment', 'Entertainment'),
    ]
    item_type = 'attraction'

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    entry_fee = models.JSONField(default=default_entry_fee, blank=True)
    timings = models.JSONField(default=dict, blank=True)
    best_time_to_visit = models.CharField(max_length=200, blank=True)
    duration = models.CharField(max_length=100, blank=True)
    guided_tours = models.JSONField(default=dict, blank=True)
    accessibility = models.JSONField(default=dict, blank=True)

    class Meta(Listing.Meta):
        pass


class Event(Listing):
    CATEGORY_CHOICES = [
        ('Concerts', 'Concerts'), ('Festivals', 'Festivals'), ('Theater', 'Theater'),
        ('Sports', 'Sports'), ('Workshops', 'Workshops'), ('Exhibitions', 'Exhibitions'),
        ('Cultural', 'Cultural'), ('Religious', 'Religious'), ('Food', 'Food'),
    ]
    item_type = 'event'

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    start_date = models.DateField()
    end_date = models.DateField()
    start_time = models.CharField(max_length=5, blank=True)
    end_time = models.CharField(max_length=5, blank=True)
    ticket_price_min = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    ticket_price_max = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_free = models.BooleanField(default=False)
    organizer = models.JSONField(default=dict)
    venue = models.JSONField(default=dict, blank=True)
    ticketing = models.JSONField(default=dict, blank=True)
    is_recurring = models.BooleanField(default=False)
    recurrence_pattern = models.CharField(max_length=100, blank=True)
    age_restriction = models.CharField(max_length=50, blank=True)
    dress_code = models.CharField(max_length=100, blank=True)

    class Meta(Listing.Meta):
        pass


class Sports(Listing):
    CATEGORY_CHOICES = [
        ('Stadium', 'Stadium'), ('Sports Grounds', 'Sports Grounds'),
        ('Coaching Centers', 'Coaching Centers'), ('Sports Clubs', 'Sports Clubs'),
        ('Sports Facilities', 'Sports Facilities'),
    ]
    item_type = 'sports'

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    sport = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    facilities = models.JSONField(default=list, blank=True)
    entry_fee = models.JSONField(default=default_entry_fee, blank=True)
    timings = models.JSONField(default=dict, blank=True)
    best_time_to_visit = models.CharField(max_length=200, blank=True)
    duration = models.CharField(max_length=100, blank=True)

    class Meta(Listing.Meta):
        verbose_name_plural = 'sports'


class Travel(Listing):
    CATEGORY_CHOICES = [
        ('Transport', 'Transport'), ('TravelTip', 'Travel Tip'),
        ('Emergency', 'Emergency'), ('General', 'General'),
    ]
    TRANSPORT_CHOICES = [
        ('air', 'Air'), ('train', 'Train'), ('bus', 'Bus'),
        ('taxi', 'Taxi'), ('metro', 'Metro'), ('tram', 'Tram'),
    ]
    item_type = 'travel'

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='Transport')
    transport_type = models.CharField(max_length=10, choices=TRANSPORT_CHOICES, blank=True)
    origin = models.CharField(max_length=200, blank=True)
    destination = models.CharField(max_length=200, blank=True)
    duration = models.CharField(max_length=100, blank=True)
    frequency = models.CharField(max_length=100, blank=True)
    price_min = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    price_max = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    features = models.JSONField(default=list, blank=True)
    operating_hours = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta(Listing.Meta):
        verbose_name_plural = 'travel'


class TravelTip(models.Model):
    CATEGORY_CHOICES = [
        ('general', 'General'), ('transport', 'Transport'), ('safety', 'Safety'),
        ('culture', 'Culture'), ('food', 'Food'), ('shopping', 'Shopping'),
    ]
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='general')
    icon = models.CharField(max_length=50, blank=True)
    priority = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-priority', '-created_at']

    def __str__(self):
        return self.title


class EmergencyContact(models.Model):
    CATEGORY_CHOICES = [
        ('police', 'Police'), ('medical', 'Medical'), ('fire', 'Fire'),
        ('tourist', 'Tourist'), ('other', 'Other'),
    ]
    service = models.CharField(max_length=200)
    number = models.CharField(max_length=30)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='other')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['category', 'service']

    def __str__(self):
        return f'{self.service} ({self.number})'

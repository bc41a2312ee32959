from rest_framework import serializers
from apps.core.permissions import is_admin
from .models import Hotel, Restaurant, Attraction, Event, Sports, Travel, TravelTip, EmergencyContact

BASE_FIELDS = [
    'id', 'name', 'slug', 'description', 'short_description', 'images', 'latitude', 'longitude',
    'street', 'area', 'city', 'state', 'pincode', 'landmark', 'phones', 'email', 'website',
    'social_media', 'rating_average', 'rating_count', 'amenities', 'tags', 'status', 'featured',
    'promoted', 'views', 'osm_id', 'source', 'created_by', 'verified_by', 'verification_date',
    'primary_image', 'distance_km', 'created_at', 'updated_at',
]
READ_ONLY_FIELDS = ['id', 'slug', 'rating_average', 'rating_count', 'views', 'created_by',
                    'verified_by', 'verification_date', 'created_at', 'updated_at']
ADMIN_ONLY_FIELDS = ['status', 'featured', 'promoted', 'osm_id', 'source']


class ImageSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=500)
    alt = serializers.CharField(required=False, allow_blank=True, default='')
    is_primary = serializers.BooleanField(required=False, default=False)


class ListingSerializer(serializers.ModelSerializer):
    images = serializers.ListField(child=serializers.DictField(), required=False)
    primary_image = serializers.CharField(read_only=True)
    distance_km = serializers.SerializerMethodField()

    class Meta:
        fields = BASE_FIELDS
        read_only_fields = READ_ONLY_FIELDS

    def get_distance_km(self, obj):
        distance = getattr(obj, 'distance_km', None)
        return round(distance, 2) if distance is not None else None

    def get_fields(self):
        fields = super().get_fields()
        request = self.context.get('request')
        if request is not None and not is_admin(request.user):
            for name in ADMIN_ONLY_FIELDS:
                fields[name].read_only = True
        return fields

    def validate_images(self, value):
        images = ImageSerializer(data=value, many=True)
        if not images.is_valid():
            raise serializers.ValidationError(images.errors)
        return [dict(img) for img in images.validated_data]

    def validate_phones(self, value):
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise serializers.ValidationError('Expected a list of phone numbers.')
        return value

    def validate_latitude(self, value):
        if value is not None and not -90 <= value <= 90:
            raise serializers.ValidationError('Latitude must be between -90 and 90.')
        return value

    def validate_longitude(self, value):
        if value is not None and not -180 <= value <= 180:
            raise serializers.ValidationError('Longitude must be between -180 and 180.')
        return value

    def _value(self, data, name):
        if name in data:
            return data[name]
        return getattr(self.instance, name, None) if self.instance else None


class HotelSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Hotel
        fields = BASE_FIELDS + ['category', 'price_min', 'price_max', 'currency', 'room_types',
                                'check_in_time', 'check_out_time', 'cancellation_policy', 'policies']

    def validate(self, data):
        low, high = self._value(data, 'price_min'), self._value(data, 'price_max')
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError({'price_max': 'Maximum price must not be below minimum price.'})
        return data


class RestaurantSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Restaurant
        fields = BASE_FIELDS + ['cuisine', 'price_range', 'opening_hours', 'menu',
                                'delivery_partners', 'reservation_required', 'avg_meal_cost']

    def validate_cuisine(self, value):
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError('At least one cuisine is required.')
        return value


class AttractionSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Attraction
        fields = BASE_FIELDS + ['category', 'entry_fee', 'timings', 'best_time_to_visit',
                                'duration', 'guided_tours', 'accessibility']


class EventSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Event
        fields = BASE_FIELDS + ['category', 'start_date', 'end_date', 'start_time', 'end_time',
                                'ticket_price_min', 'ticket_price_max', 'is_free', 'organizer',
                                'venue', 'ticketing', 'is_recurring', 'recurrence_pattern',
                                'age_restriction', 'dress_code']

    def validate_organizer(self, value):
        if not isinstance(value, dict) or not str(value.get('name', '')).strip():
            raise serializers.ValidationError('Organizer name is required.')
        return value

    def validate(self, data):
        start, end = self._value(data, 'start_date'), self._value(data, 'end_date')
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date must be on or after start date.'})
        return data


class SportsSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Sports
        fields = BASE_FIELDS + ['category', 'sport', 'capacity', 'facilities', 'entry_fee',
                                'timings', 'best_time_to_visit', 'duration']


class TravelSerializer(ListingSerializer):
    class Meta(ListingSerializer.Meta):
        model = Travel
        fields = BASE_FIELDS + ['category', 'transport_type', 'origin', 'destination', 'duration',
                                'frequency', 'price_min', 'price_max', 'features',
                                'operating_hours', 'is_active']


class TravelTipSerializer(serializers.ModelSerializer):
    class Meta:
        model = TravelTip
        fields = ['id', 'title', 'description', 'category', 'icon', 'priority', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class EmergencyContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmergencyContact
        fields = ['id', 'service', 'number', 'description', 'category', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

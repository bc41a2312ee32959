from .models import Hotel, Restaurant, Attraction, Event, Sports, Travel
from .serializers import (HotelSerializer, RestaurantSerializer, AttractionSerializer,
                          EventSerializer, SportsSerializer, TravelSerializer)

LISTING_TYPES = {
    'hotel': (Hotel, HotelSerializer),
    'restaurant': (Restaurant, RestaurantSerializer),
    'attraction': (Attraction, AttractionSerializer),
    'event': (Event, EventSerializer),
    'sports': (Sports, SportsSerializer),
    'travel': (Travel, TravelSerializer),
}

ALIASES = {
    'hotels': 'hotel', 'restaurants': 'restaurant', 'attractions': 'attraction',
    'events': 'event', 'sport': 'sports',
}


def normalize_type(item_type):
    key = str(item_type or '').strip().lower()
    key = ALIASES.get(key, key)
    return key if key in LISTING_TYPES else None


def get_model(item_type):
    key = normalize_type(item_type)
    return LISTING_TYPES[key][0] if key else None


def get_serializer_class(item_type):
    key = normalize_type(item_type)
    return LISTING_TYPES[key][1] if key else None


def find_listing(item_type, item_id, active_only=False):
    model = get_model(item_type)
    if model is None:
        return None
    qs = model.objects.all()
    if active_only:
        qs = qs.filter(status=model.STATUS_ACTIVE)
    try:
        return qs.filter(pk=int(item_id)).first()
    except (TypeError, ValueError):
        return qs.filter(slug=str(item_id)).first()

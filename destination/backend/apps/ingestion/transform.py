"""Map raw Overpass elements onto listing model fields.

Each ``transform_<type>`` function returns a list of plain dicts ready to be
handed to the listing model's constructor. Elements without coordinates,
tags or a name are dropped.
"""
from django.utils.text import slugify

SOURCE = 'OpenStreetMap'

DEFAULT_HOURS = {'open': '09:00', 'close': '21:00', 'closed': False}
WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

PRICES = {
    'hotel': {'min': 1500, 'max': 8000, 'avg': 3500},
    'guest_house': {'min': 800, 'max': 3000, 'avg': 1800},
    'hostel': {'min': 500, 'max': 1500, 'avg': 900},
    'restaurant': {'min': 200, 'max': 1000, 'avg': 500},
    'cafe': {'min': 100, 'max': 400, 'avg': 250},
    'fast_food': {'min': 80, 'max': 300, 'avg': 150},
}

PHONE_KEYS = ['phone', 'contact:phone', 'phone:main', 'contact:phone:main', 'operator:phone',
              'brand:phone']
EMAIL_KEYS = ['email', 'contact:email', 'email:main', 'contact:email:main', 'operator:email',
              'brand:email']
WEBSITE_KEYS = ['website', 'contact:website', 'url', 'contact:url', 'operator:website',
                'brand:website']

HOTEL_AMENITIES = [
    (('internet_access', 'wifi'), 'WiFi'), (('amenity:air_conditioning',), 'AC'),
    (('parking',), 'Parking'), (('swimming_pool',), 'Pool'), (('fitness_centre',), 'Gym'),
    (('spa',), 'Spa'), (('restaurant',), 'Restaurant'), (('bar',), 'Bar'),
    (('room_service',), 'Room Service'),
]
RESTAURANT_AMENITIES = [
    (('outdoor_seating',), 'Outdoor Seating'), (('internet_access', 'wifi'), 'WiFi'),
    (('parking',), 'Parking'), (('live_music',), 'Live Music'),
    (('amenity:air_conditioning',), 'AC'), (('delivery',), 'Home Delivery'),
    (('takeaway',), 'Takeaway'),
]
ATTRACTION_AMENITIES = [
    (('guided_tours',), 'Guided Tours'), (('audio_guide',), 'Audio Guide'),
    (('parking',), 'Parking'), (('wheelchair',), 'Wheelchair Access'),
    (('photography',), 'Photography'), (('shop',), 'Gift Shop'),
]
SPORTS_AMENITIES = [
    (('internet_access', 'wifi'), 'WiFi'), (('parking',), 'Parking'),
    (('changing_room',), 'Changing Rooms'), (('shower',), 'Showers'), (('toilets',), 'Toilets'),
    (('drinking_water',), 'Drinking Water'), (('first_aid',), 'First Aid'),
    (('lit',), 'Floodlights'),
]

ATTRACTION_FEES = {
    'Historical': (10, 5), 'Religious': (0, 0), 'Museums': (20, 10),
    'Parks': (5, 2), 'Architecture': (15, 8), 'Cultural': (50, 25),
}
ATTRACTION_DURATIONS = {
    'Historical': '1-2 hours', 'Religious': '30-60 minutes', 'Museums': '2-3 hours',
    'Parks': '1-3 hours', 'Architecture': '30-60 minutes', 'Cultural': '2-4 hours',
}
ATTRACTION_DESCRIPTIONS = {
    'Historical': '{name} is a significant historical site in Kolkata, showcasing the rich heritage of the city.',
    'Religious': '{name} is an important place of worship, offering spiritual solace to visitors.',
    'Museums': '{name} houses a fascinating collection of artifacts and exhibits.',
    'Parks': '{name} is a beautiful green space perfect for relaxation and recreation.',
    'Architecture': '{name} represents the architectural heritage of Kolkata.',
    'Cultural': '{name} is a vibrant cultural center celebrating the arts and traditions of Bengal.',
}

SPORTS_FEES = {
    'Stadium': (100, 50), 'Sports Grounds': (20, 10), 'Coaching Centers': (500, 300),
    'Sports Clubs': (200, 100), 'Sports Facilities': (50, 25),
}
SPORTS_DURATIONS = {
    'Stadium': '2-4 hours', 'Sports Grounds': '1-2 hours',
    'Coaching Centers': '1-2 hours per session', 'Sports Clubs': '1-3 hours',
    'Sports Facilities': '1-2 hours',
}
SPORTS_BEST_TIME = {
    'Stadium': 'Evening matches, daytime practice',
    'Coaching Centers': 'Morning and evening sessions',
    'Sports Clubs': 'All day with peak hours in evening',
}
SPORTS_DESCRIPTIONS = {
    'Stadium': '{name} is a premier sports stadium in Kolkata, hosting major sporting events and matches.',
    'Sports Grounds': '{name} is a well-maintained sports ground perfect for {sport} and recreational activities.',
    'Coaching Centers': '{name} is a professional coaching center offering training in {sport} and fitness programs.',
    'Sports Clubs': '{name} is a sports club providing facilities and training for {sport} enthusiasts.',
    'Sports Facilities': '{name} offers excellent sports facilities for {sport} in Kolkata.',
}


def coordinates(element):
    """(lat, lng) of a node, or of a way's computed center."""
    if element.get('lat') is not None and element.get('lon') is not None:
        return element['lat'], element['lon']
    center = element.get('center') or {}
    if center.get('lat') is not None and center.get('lon') is not None:
        return center['lat'], center['lon']
    return None


def _first(tags, keys):
    for key in keys:
        if tags.get(key):
            return tags[key]
    return ''


def extract_phones(tags):
    phones = []
    for key in PHONE_KEYS:
        value = (tags.get(key) or '').strip()
        if value and value not in phones:
            phones.append(value)
    return phones


def extract_email(tags):
    return _first(tags, EMAIL_KEYS)[:254]


def extract_website(tags):
    return _first(tags, WEBSITE_KEYS)[:500]


def extract_amenities(tags, mapping):
    return [label for keys, label in mapping if any(tags.get(k) == 'yes' for k in keys)]


def extract_tags(tags):
    values = [tags.get('addr:suburb'), tags.get('addr:district')]
    if tags.get('heritage') == 'yes':
        values.append('Heritage')
    values += [tags.get('tourism'), tags.get('amenity')]
    return [v for v in values if v]


def opening_hours():
    return {day: dict(DEFAULT_HOURS) for day in WEEKDAYS}


def entry_fee(adult, child):
    return {'adult': adult, 'child': child, 'senior': child, 'currency': 'INR',
            'is_free': adult == 0}


def categorize_hotel(tags):
    if tags.get('stars'):
        try:
            stars = int(tags['stars'])
        except ValueError:
            stars = 0
        if stars >= 4:
            return 'Luxury'
        if stars == 3:
            return 'Business'
        return 'Budget'
    if tags.get('tourism') in ('hostel', 'guest_house'):
        return 'Budget'
    name = (tags.get('name') or '').lower()
    if 'heritage' in name or 'palace' in name:
        return 'Heritage'
    if 'resort' in name:
        return 'Resort'
    if 'boutique' in name:
        return 'Boutique'
    return 'Business'


def categorize_attraction(tags):
    if tags.get('historic'):
        return 'Historical'
    if tags.get('amenity') == 'place_of_worship':
        return 'Religious'
    if tags.get('tourism') in ('museum', 'gallery'):
        return 'Museums'
    if tags.get('leisure') == 'park':
        return 'Parks'
    if tags.get('building') == 'government':
        return 'Architecture'
    return 'Cultural'


def categorize_sports(tags):
    if tags.get('leisure') == 'stadium':
        return 'Stadium'
    if tags.get('leisure') == 'pitch':
        return 'Sports Grounds'
    if tags.get('amenity') == 'sports_centre':
        return 'Coaching Centers'
    if tags.get('club') == 'sport':
        return 'Sports Clubs'
    return 'Sports Facilities'


def categorize_price_range(tags):
    if tags.get('amenity') in ('fast_food', 'cafe'):
        return 'Budget'
    if 'fine_dining' in (tags.get('cuisine') or ''):
        return 'Fine Dining'
    return 'Mid-range'


def estimate_price(kind, bound):
    return PRICES.get(kind, PRICES['restaurant'])[bound]


def extract_cuisine(tags):
    cuisines = []
    for raw in (tags.get('cuisine') or 'indian').split(';'):
        c = raw.strip().lower()
        if not c:
            continue
        if 'indian' in c or 'bengali' in c:
            label = 'Bengali'
        elif 'chinese' in c:
            label = 'Chinese'
        elif 'continental' in c:
            label = 'Continental'
        elif 'fast_food' in c:
            label = 'Fast Food'
        else:
            label = c.capitalize()
        if label not in cuisines:
            cuisines.append(label)
    return cuisines or ['Bengali']


def sport_type(tags):
    if tags.get('sport'):
        return tags['sport']
    if tags.get('leisure') == 'pitch':
        return 'football'
    if tags.get('leisure') == 'stadium':
        return 'cricket'
    if tags.get('amenity') == 'sports_centre' or tags.get('club') == 'sport':
        return 'multi-sport'
    return 'general'


def estimate_capacity(tags):
    try:
        return int(tags['capacity'])
    except (KeyError, ValueError):
        pass
    if tags.get('leisure') == 'stadium':
        return 50000
    if tags.get('leisure') == 'pitch':
        return 1000
    if tags.get('amenity') == 'sports_centre':
        return 200
    if tags.get('club') == 'sport':
        return 500
    return 100


def sports_facilities(tags):
    facilities = []
    if tags.get('sport'):
        facilities.append(tags['sport'])
    if tags.get('surface'):
        facilities.append(f"{tags['surface']} surface")
    for key, label in [('lit', 'Floodlights'), ('covered', 'Covered facility'),
                       ('changing_room', 'Changing rooms'), ('shower', 'Showers'),
                       ('parking', 'Parking')]:
        if tags.get(key) == 'yes':
            facilities.append(label)
    return facilities


def base_record(element, tags):
    lat, lng = coordinates(element)
    name = tags['name'].strip()[:200]
    description = tags.get('description', '')
    return {
        'name': name,
        'slug': f"{slugify(name)[:200]}-{element['id']}",
        'description': description,
        'short_description': description[:200],
        'latitude': lat,
        'longitude': lng,
        'street': tags.get('addr:street', '')[:255],
        'area': (tags.get('addr:suburb') or tags.get('addr:district') or '')[:150],
        'city': 'Kolkata',
        'state': 'West Bengal',
        'pincode': tags.get('addr:postcode', '')[:10],
        'landmark': tags.get('landmark', '')[:200],
        'phones': extract_phones(tags),
        'email': extract_email(tags),
        'website': extract_website(tags),
        'tags': extract_tags(tags),
        'status': 'pending',
        'featured': False,
        'promoted': False,
        'osm_id': f"{element.get('type', 'node')}/{element['id']}",
        'source': SOURCE,
    }


def _usable(elements):
    for element in elements or []:
        tags = element.get('tags') or {}
        if not tags.get('name', '').strip() or coordinates(element) is None:
            continue
        yield element, tags


def transform_hotels(elements):
    records = []
    for element, tags in _usable(elements):
        kind = tags.get('tourism', 'hotel')
        record = base_record(element, tags)
        price_min = estimate_price(kind, 'min')
        record.update({
            'description': record['description'] or f'A {kind.replace("_", " ")} in Kolkata',
            'category': categorize_hotel(tags),
            'price_min': price_min,
            'price_max': estimate_price(kind, 'max'),
            'amenities': extract_amenities(tags, HOTEL_AMENITIES),
            'room_types': [{'name': 'Standard Room', 'price': price_min, 'capacity': 2,
                            'amenities': ['WiFi', 'AC'], 'images': [], 'available': True}],
            'check_in_time': '14:00',
            'check_out_time': '12:00',
        })
        records.append(record)
    return records


def transform_restaurants(elements):
    records = []
    for element, tags in _usable(elements):
        kind = tags.get('amenity', 'restaurant')
        record = base_record(element, tags)
        record.update({
            'description': record['description'] or f'A {kind.replace("_", " ")} serving delicious food',
            'cuisine': extract_cuisine(tags),
            'price_range': categorize_price_range(tags),
            'opening_hours': opening_hours(),
            'amenities': extract_amenities(tags, RESTAURANT_AMENITIES),
            'avg_meal_cost': estimate_price(kind, 'avg'),
        })
        records.append(record)
    return records


def transform_attractions(elements):
    records = []
    for element, tags in _usable(elements):
        category = categorize_attraction(tags)
        record = base_record(element, tags)
        if category == 'Parks':
            best_time = 'Early morning or evening'
        elif category == 'Religious':
            best_time = 'Morning or evening prayers'
        else:
            best_time = 'Any time during opening hours'
        record.update({
            'description': record['description'] or ATTRACTION_DESCRIPTIONS[category].format(name=record['name']),
            'category': category,
            'entry_fee': entry_fee(*ATTRACTION_FEES[category]),
            'timings': opening_hours(),
            'best_time_to_visit': best_time,
            'duration': ATTRACTION_DURATIONS[category],
            'accessibility': {'wheelchair_accessible': tags.get('wheelchair') == 'yes',
                              'public_transport': 'Metro, Bus available nearby'},
            'amenities': extract_amenities(tags, ATTRACTION_AMENITIES),
        })
        records.append(record)
    return records


def transform_sports(elements):
    records = []
    for element, tags in _usable(elements):
        category = categorize_sports(tags)
        sport = sport_type(tags)
        record = base_record(element, tags)
        record.update({
            'description': record['description'] or SPORTS_DESCRIPTIONS[category].format(
                name=record['name'], sport=tags.get('sport') or 'various sports'),
            'category': category,
            'sport': sport[:100],
            'capacity': estimate_capacity(tags),
            'facilities': sports_facilities(tags),
            'entry_fee': entry_fee(*SPORTS_FEES[category]),
            'timings': opening_hours(),
            'best_time_to_visit': SPORTS_BEST_TIME.get(category, 'Morning and evening'),
            'duration': SPORTS_DURATIONS[category],
            'amenities': extract_amenities(tags, SPORTS_AMENITIES),
        })
        records.append(record)
    return records


TRANSFORMS = {
    'hotels': transform_hotels,
    'restaurants': transform_restaurants,
    'attractions': transform_attractions,
    'sports': transform_sports,
}


def transform(data_type, payload):
    return TRANSFORMS[data_type]((payload or {}).get('elements', []))

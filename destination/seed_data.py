import os, sys, django
from datetime import date, timedelta
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'backend'))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'destination.settings')
django.setup()

from apps.core.models import User
from apps.listings.models import Hotel, Restaurant, Attraction, Event, Travel, TravelTip, EmergencyContact


def seed_user(email, password, **fields):
    user, created = User.objects.get_or_create(email=email, defaults=fields)
    if created:
        user.set_password(password)
        user.save()
        print(f"✓ {fields.get('role', 'customer').title()} user created ({email})")
    return user


def seed_listings(model, owner, items, key='name'):
    count = 0
    for item in items:
        if not model.objects.filter(**{key: item[key]}).exists():
            model.objects.create(created_by=owner, verified_by=owner, status='active',
                                 source='seed', **item)
            count += 1
    print(f"✓ Created {count} {model._meta.verbose_name_plural}")


def seed():
    admin = seed_user('admin@destinationkolkata.com', 'admin12345', first_name='Site',
                      last_name='Admin', role='admin', email_verified=True, is_staff=True,
                      is_superuser=True)
    seed_user('moderator@destinationkolkata.com', 'moderator123', first_name='Content',
              last_name='Moderator', role='moderator', email_verified=True)
    seed_user('customer@destinationkolkata.com', 'customer123', first_name='Ritika',
              last_name='Sen', role='customer', phone='+91-9830000000', email_verified=True)

    seed_listings(Hotel, admin, [
        {
            'name': 'The Oberoi Grand', 'category': 'Heritage',
            'description': 'A Victorian-era landmark on Chowringhee with a palm-fringed pool courtyard.',
            'latitude': 22.5620, 'longitude': 88.3510, 'street': '15 Jawaharlal Nehru Road',
            'area': 'Esplanade', 'pincode': '700013', 'price_min': 12000, 'price_max': 35000,
            'amenities': ['WiFi', 'Pool', 'Spa', 'Restaurant', 'Bar'],
            'phones': ['+91-33-2249-2323'],
        },
        {
            'name': 'Park Street Residency', 'category': 'Business',
            'description': 'Comfortable rooms steps away from the restaurants of Park Street.',
            'latitude': 22.5530, 'longitude': 88.3520, 'area': 'Park Street', 'pincode': '700016',
            'price_min': 3500, 'price_max': 7000, 'amenities': ['WiFi', 'AC', 'Parking'],
        },
    ])
    seed_listings(Restaurant, admin, [
        {
            'name': 'Kasturi', 'cuisine': ['Bengali'], 'price_range': 'Mid-range',
            'description': 'Home-style Bangladeshi and Bengali fish curries.',
            'latitude': 22.5595, 'longitude': 88.3525, 'area': 'New Market',
            'avg_meal_cost': 600, 'amenities': ['AC', 'Takeaway'],
        },
        {
            'name': 'Peter Cat', 'cuisine': ['Continental', 'Mughlai'], 'price_range': 'Mid-range',
            'description': 'Park Street institution known for its chelo kebab.',
            'latitude': 22.5527, 'longitude': 88.3526, 'area': 'Park Street',
            'avg_meal_cost': 900, 'amenities': ['AC', 'Bar'],
        },
    ])
    seed_listings(Attraction, admin, [
        {
            'name': 'Victoria Memorial', 'category': 'Historical',
            'description': 'White marble museum and gardens dedicated to Queen Victoria.',
            'latitude': 22.5448, 'longitude': 88.3426, 'area': 'Maidan',
            'entry_fee': {'adult': 30, 'child': 10, 'senior': 10, 'currency': 'INR', 'is_free': False},
            'best_time_to_visit': 'October to March', 'duration': '2-3 hours',
        },
        {
            'name': 'Dakshineswar Kali Temple', 'category': 'Religious',
            'description': 'Nineteenth-century temple complex on the banks of the Hooghly.',
            'latitude': 22.6548, 'longitude': 88.3575, 'area': 'Dakshineswar',
            'best_time_to_visit': 'Morning or evening prayers', 'duration': '30-60 minutes',
        },
    ])
    today = date.today()
    seed_listings(Event, admin, [
        {
            'name': 'Kolkata Book Fair', 'category': 'Exhibitions',
            'description': 'One of the largest non-trade book fairs in the world.',
            'latitude': 22.5735, 'longitude': 88.4331, 'area': 'Salt Lake',
            'start_date': today + timedelta(days=30), 'end_date': today + timedelta(days=42),
            'start_time': '12:00', 'end_time': '20:00', 'is_free': True,
            'organizer': {'name': 'Publishers & Booksellers Guild'},
        },
    ])
    seed_listings(Travel, admin, [
        {
            'name': 'Sealdah Railway Station', 'transport_type': 'train',
            'description': 'Major railway station connecting Kolkata with eastern India',
            'latitude': 22.5660, 'longitude': 88.3684, 'origin': 'Eastern India Cities',
            'destination': 'Kolkata', 'duration': '2-12 hours', 'frequency': '50+ trains daily',
            'price_min': 150, 'price_max': 2500, 'phones': ['139'],
            'features': ['Major Station', 'Express Trains', 'Local Trains', 'Food Stalls'],
            'operating_hours': {'open': '00:00', 'close': '23:59'},
        },
        {
            'name': 'Kolkata Tram Service', 'transport_type': 'tram',
            'description': 'Historic tram system running through central Kolkata',
            'latitude': 22.5726, 'longitude': 88.3639, 'origin': 'Esplanade',
            'destination': 'Gariahat', 'duration': '20-30 minutes',
            'frequency': 'Every 15-20 minutes', 'price_min': 5, 'price_max': 10,
            'features': ['Historic Route', 'Scenic Views', 'Cheap Fare'],
            'operating_hours': {'open': '06:00', 'close': '21:00'},
        },
    ])

    tips = [
        ('Best Time to Visit', 'October to March is ideal with pleasant weather. Avoid monsoons (June-September) for sightseeing.', 'general'),
        ('Local Transportation', 'Use Kolkata Metro for quick travel. Yellow taxis, buses and auto-rickshaws are widely available.', 'transport'),
        ('Language', 'Bengali is the local language, but Hindi and English are widely understood in tourist areas.', 'culture'),
        ('Safety Tips', 'Kolkata is generally safe. Avoid isolated areas at night and keep valuables secure in crowded places.', 'safety'),
        ('Local Cuisine', 'Try rosogolla, mishti doi and street food from local markets.', 'food'),
        ('Shopping Tips', 'Visit Gariahat Market and New Market for traditional sarees and handicrafts.', 'shopping'),
    ]
    count = 0
    for priority, (title, description, category) in enumerate(tips, start=1):
        _, created = TravelTip.objects.get_or_create(
            title=title, defaults={'description': description, 'category': category,
                                   'priority': len(tips) - priority})
        count += created
    print(f"✓ Created {count} travel tips")

    contacts = [
        ('Police', '100', 'Emergency police services', 'police'),
        ('Fire Brigade', '101', 'Fire emergency services', 'fire'),
        ('Ambulance', '108', 'Medical emergency services', 'medical'),
        ('Tourist Helpline', '1363', 'Tourist assistance services', 'tourist'),
    ]
    count = 0
    for service, number, description, category in contacts:
        _, created = EmergencyContact.objects.get_or_create(
            service=service, defaults={'number': number, 'description': description,
                                       'category': category})
        count += created
    print(f"✓ Created {count} emergency contacts")

    print("─────────────────────────────")
    print("  admin@destinationkolkata.com     / admin12345")
    print("  moderator@destinationkolkata.com / moderator123")
    print("  customer@destinationkolkata.com  / customer123")
    print("─────────────────────────────")


seed()

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1, lng1, lat2, lng2):
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def bounding_box(lat, lng, distance_km):
    """(min_lat, max_lat, min_lng, max_lng) enclosing a circle of distance_km."""
    dlat = math.degrees(distance_km / EARTH_RADIUS_KM)
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    dlng = math.degrees(distance_km / (EARTH_RADIUS_KM * cos_lat))
    return lat - dlat, lat + dlat, lng - dlng, lng + dlng


def within_radius(queryset, lat, lng, distance_km):
    """Listings within distance_km of (lat, lng), nearest first, each tagged with distance_km."""
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, distance_km)
    candidates = queryset.filter(
        latitude__isnull=False, longitude__isnull=False,
        latitude__gte=min_lat, latitude__lte=max_lat,
        longitude__gte=min_lng, longitude__lte=max_lng,
    )
    results = []
    for obj in candidates:
        obj.distance_km = haversine_km(lat, lng, obj.latitude, obj.longitude)
        if obj.distance_km <= distance_km:
            results.append(obj)
    results.sort(key=lambda o: o.distance_km)
    return results

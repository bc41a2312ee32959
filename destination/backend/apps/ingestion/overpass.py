import time

import requests
import structlog
from django.conf import settings

logger = structlog.get_logger(__name__)

# Overpass QL filters per data type, each applied to nodes and ways
FILTERS = {
    'hotels': [
        '["tourism"="hotel"]', '["tourism"="guest_house"]', '["tourism"="hostel"]',
    ],
    'restaurants': [
        '["amenity"="restaurant"]', '["amenity"="cafe"]', '["amenity"="fast_food"]',
    ],
    'attractions': [
        '["tourism"="attraction"]', '["tourism"="museum"]', '["historic"]',
        '["amenity"="place_of_worship"]', '["leisure"="park"]',
    ],
    'sports': [
        '["leisure"="pitch"]', '["leisure"="stadium"]', '["amenity"="sports_centre"]',
        '["club"="sport"]',
    ],
}


class OverpassError(Exception):
    pass


def build_query(data_type, bbox=None):
    if data_type not in FILTERS:
        raise ValueError(f'Unsupported data type: {data_type}')
    bbox = bbox or settings.INGESTION_BBOX
    parts = [f'{kind}{f}({bbox});' for f in FILTERS[data_type] for kind in ('node', 'way')]
    return f'[out:json][timeout:25];({"".join(parts)});out center tags;'


def fetch(data_type, bbox=None, attempts=None, backoff=1.5):
    """POST the query for a data type and return the decoded Overpass JSON.

    Transient failures are retried with exponential backoff; the last one is
    raised as OverpassError.
    """
    query = build_query(data_type, bbox)
    attempts = attempts or settings.OVERPASS_RETRIES
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            response = requests.post(
                settings.OVERPASS_URL, data={'data': query}, timeout=settings.OVERPASS_TIMEOUT
            )
            response.raise_for_status()
            payload = response.json()
            logger.info('overpass fetch complete', data_type=data_type,
                        elements=len(payload.get('elements', [])))
            return payload
        except (requests.RequestException, ValueError) as e:
            last_error = e
            logger.warning('overpass fetch failed', data_type=data_type, attempt=attempt,
                           attempts=attempts, error=str(e))
            if attempt < attempts:
                time.sleep(min(20.0, backoff * (2 ** (attempt - 1))))
    raise OverpassError(f'Overpass request for {data_type} failed: {last_error}')

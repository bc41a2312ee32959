from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
import structlog

logger = structlog.get_logger(__name__)


def empty_stats():
    return {'total': 0, 'success': 0, 'failed': 0, 'skipped': 0, 'pending': 0}


def load_records(model, records, batch_size=None, errors=None):
    """Insert transformed records in batches, skipping known OSM ids.

    A batch that fails as a whole is retried record by record so one bad
    row does not sink its neighbours. Per-record failures are appended to
    ``errors`` when a list is given.
    """
    batch_size = batch_size or settings.INGESTION_BATCH_SIZE
    stats = empty_stats()
    stats['total'] = len(records)
    if not records:
        return stats

    seen = set(model.objects.exclude(osm_id=None).values_list('osm_id', flat=True))
    total_batches = (len(records) + batch_size - 1) // batch_size
    for start in range(0, len(records), batch_size):
        number = start // batch_size + 1
        batch = []
        for record in records[start:start + batch_size]:
            osm_id = record.get('osm_id')
            if osm_id and osm_id in seen:
                stats['skipped'] += 1
                continue
            if osm_id:
                seen.add(osm_id)
            batch.append(dict(record, status='pending'))
        if not batch:
            logger.info('batch skipped', model=model.__name__, batch=number, batches=total_batches)
            continue

        try:
            with transaction.atomic():
                model.objects.bulk_create([model(**r) for r in batch])
            stats['success'] += len(batch)
            stats['pending'] += len(batch)
            logger.info('batch inserted', model=model.__name__, batch=number,
                        batches=total_batches, inserted=len(batch))
        except (IntegrityError, DatabaseError) as e:
            logger.warning('batch insert failed, inserting one by one', model=model.__name__,
                           batch=number, error=str(e))
            for record in batch:
                try:
                    with transaction.atomic():
                        model(**record).save()
                    stats['success'] += 1
                    stats['pending'] += 1
                except (IntegrityError, DatabaseError) as item_error:
                    stats['failed'] += 1
                    if errors is not None:
                        errors.append({'record': record.get('osm_id') or record.get('name'),
                                       'error': str(item_error),
                                       'timestamp': timezone.now().isoformat()})
    return stats

import json
import time
from pathlib import Path

from django.utils import timezone
import structlog

from apps.listings.registry import get_model
from .models import DataIngestionHistory
from .overpass import fetch, OverpassError
from .transform import transform, TRANSFORMS, SOURCE
from .loader import load_records, empty_stats

logger = structlog.get_logger(__name__)

DATA_TYPES = list(TRANSFORMS)


def normalize_types(types):
    """Known data types from a list or comma separated string; all when empty."""
    if isinstance(types, str):
        types = types.split(',')
    types = [str(t).strip().lower() for t in types or [] if str(t).strip()]
    if not types or 'all' in types:
        return list(DATA_TYPES)
    unknown = [t for t in types if t not in DATA_TYPES]
    if unknown:
        raise ValueError(f"Unknown data types: {', '.join(unknown)}")
    return types


def _raw_payload(data_type, source_dir, output_dir):
    if source_dir:
        path = Path(source_dir) / f'{data_type}.json'
        logger.info('reading raw data', data_type=data_type, path=str(path))
        with open(path, encoding='utf-8') as fh:
            return json.load(fh)
    payload = fetch(data_type)
    if output_dir:
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        with open(out / f'{data_type}.json', 'w', encoding='utf-8') as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
    return payload


def ingest_type(data_type, initiated_by=None, source_dir=None, output_dir=None, dry_run=False):
    started = timezone.now()
    clock = time.monotonic()
    stats = empty_stats()
    errors = []
    try:
        payload = _raw_payload(data_type, source_dir, output_dir)
    except (OverpassError, OSError, ValueError) as e:
        logger.error('ingestion fetch failed', data_type=data_type, error=str(e))
        status = 'failed'
        errors.append({'record': None, 'error': str(e), 'timestamp': timezone.now().isoformat()})
    else:
        records = transform(data_type, payload)
        if dry_run:
            stats['total'] = len(records)
            logger.info('dry run', data_type=data_type, records=len(records))
            return {'data_type': data_type, 'status': 'dry_run', 'stats': stats, 'history_id': None}
        stats = load_records(get_model(data_type), records, errors=errors)
        status = DataIngestionHistory.status_for(stats)

    if dry_run:
        return {'data_type': data_type, 'status': status, 'stats': stats, 'history_id': None,
                'errors': errors}

    history = DataIngestionHistory.objects.create(
        data_type=data_type,
        operation='ingest',
        status=status,
        records_processed=stats['total'],
        records_successful=stats['success'],
        records_failed=stats['failed'],
        records_skipped=stats['skipped'],
        errors=errors[:100],
        metadata={
            'source': 'file' if source_dir else SOURCE,
            'initiated_by': getattr(initiated_by, 'email', None) or 'system',
            'file': str(Path(source_dir) / f'{data_type}.json') if source_dir else None,
        },
        start_time=started,
        end_time=timezone.now(),
        duration_ms=int((time.monotonic() - clock) * 1000),
    )
    logger.info('ingestion finished', data_type=data_type, status=status, **stats)
    return {'data_type': data_type, 'status': status, 'stats': stats, 'history_id': history.id}


def run_ingestion(types=None, initiated_by=None, source_dir=None, output_dir=None, dry_run=False):
    """Fetch, transform and load each requested data type.

    Returns one result dict per type. A failed fetch for one type does not
    stop the others.
    """
    return [
        ingest_type(t, initiated_by=initiated_by, source_dir=source_dir, output_dir=output_dir,
                    dry_run=dry_run)
        for t in normalize_types(types)
    ]


def clear_ingested(types=None, initiated_by=None):
    deleted = {}
    for data_type in normalize_types(types):
        started = timezone.now()
        count, _ = get_model(data_type).objects.filter(source=SOURCE).delete()
        deleted[data_type] = count
        DataIngestionHistory.objects.create(
            data_type=data_type, operation='delete', status='success',
            records_processed=count, records_successful=count,
            metadata={'source': SOURCE,
                      'initiated_by': getattr(initiated_by, 'email', None) or 'system'},
            start_time=started, end_time=timezone.now(),
        )
        logger.info('ingested listings cleared', data_type=data_type, deleted=count)
    return deleted

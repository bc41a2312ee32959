from django.utils import timezone
import structlog

from apps.listings.models import Listing
from apps.listings.registry import get_model, get_serializer_class
from apps.promotions.serializers import PromotionSerializer

logger = structlog.get_logger(__name__)


class PublishError(Exception):
    def __init__(self, errors):
        super().__init__(str(errors))
        self.errors = errors


def submission_payload(submission):
    payload = {'name': submission.title, 'description': submission.description}
    if submission.type == 'promotion':
        payload = {'title': submission.title, 'description': submission.description}
    if submission.category:
        payload['category'] = submission.category
    payload.update(submission.data or {})
    return payload


def publish_submission(submission, reviewer):
    """Create or update the record a submission describes. Call inside a transaction."""
    payload = submission_payload(submission)

    if submission.type == 'promotion':
        serializer = PromotionSerializer(data=payload)
        if not serializer.is_valid():
            raise PublishError(serializer.errors)
        promo = serializer.save(created_by=submission.user)
        logger.info('submission published', submission_id=submission.id, type='promotion',
                    published_id=promo.id)
        return promo

    model = get_model(submission.type)
    serializer_class = get_serializer_class(submission.type)
    extra = {'status': Listing.STATUS_ACTIVE, 'verified_by': reviewer,
             'verification_date': timezone.now()}
    if submission.is_update:
        instance = model.objects.filter(pk=submission.resource_id).first()
        if instance is None:
            raise PublishError({'resource_id': f'{submission.type} #{submission.resource_id} not found.'})
        serializer = serializer_class(instance, data=dict(submission.data or {}), partial=True)
    else:
        serializer = serializer_class(data=payload)
        extra['created_by'] = submission.user
        extra['source'] = 'submission'
    if not serializer.is_valid():
        raise PublishError(serializer.errors)
    listing = serializer.save(**extra)
    logger.info('submission published', submission_id=submission.id, type=submission.type,
                published_id=listing.id, update=submission.is_update)
    return listing

from rest_framework import generics, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
import structlog

from apps.core.models import AuditLog, Notification
from apps.core.pagination import paginate
from apps.core.permissions import IsModerator, is_moderator
from .models import Review, HelpfulVote, ReviewReport
from .serializers import ReviewSerializer, ReviewUpdateSerializer

logger = structlog.get_logger(__name__)

SORT_FIELDS = {'created_at', 'rating', 'helpful_count'}


def _visible_review(request, pk):
    review = Review.objects.select_related('user').filter(pk=pk).first()
    if review is None:
        return None
    if review.status == 'approved' or is_moderator(request.user):
        return review
    if request.user.is_authenticated and review.user_id == request.user.id:
        return review
    return None


class ReviewListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get(self, request):
        q = request.query_params
        entity_type, entity_id = q.get('entity_type'), q.get('entity_id')
        if not entity_type or not entity_id:
            return Response({'error': 'entity_type and entity_id are required'}, status=400)
        if not str(entity_id).isdigit():
            return Response({'error': 'Invalid entity_id'}, status=400)
        qs = Review.objects.select_related('user').filter(entity_type=entity_type, entity_id=entity_id)
        statuses = ('approved',)
        if is_moderator(request.user):
            statuses = ('approved', 'pending', 'rejected')
            if q.get('status'):
                statuses = (q['status'],)
        qs = qs.filter(status__in=statuses)
        if q.get('rating'):
            if q['rating'] not in ('1', '2', '3', '4', '5'):
                return Response({'error': 'rating must be between 1 and 5'}, status=400)
            qs = qs.filter(rating=int(q['rating']))
        sort_by = q.get('sort_by') if q.get('sort_by') in SORT_FIELDS else 'created_at'
        prefix = '' if q.get('sort_order') == 'asc' else '-'
        qs = qs.order_by(prefix + sort_by, '-id')
        return paginate(self, qs, ReviewSerializer,
                        stats=Review.stats_for(entity_type, entity_id, statuses))

    def post(self, request):
        serializer = ReviewSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        try:
            with transaction.atomic():
                review = serializer.save(user=request.user, status='pending',
                                         author_name=request.user.display_name,
                                         author_email=request.user.email)
        except IntegrityError:
            return Response({'error': 'You have already reviewed this item.'}, status=400)
        AuditLog.log(request.user, 'review_created', {'review_id': review.id}, request)
        return Response({'message': 'Review submitted and awaiting moderation',
                         'review': ReviewSerializer(review, context={'request': request}).data},
                        status=201)


class MyReviewsView(generics.ListAPIView):
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Review.objects.filter(user=self.request.user)


class ReviewDetailView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get(self, request, pk):
        review = _visible_review(request, pk)
        if review is None:
            return Response({'error': 'Review not found'}, status=404)
        return Response(ReviewSerializer(review, context={'request': request}).data)

    def patch(self, request, pk):
        review = _visible_review(request, pk)
        if review is None:
            return Response({'error': 'Review not found'}, status=404)
        if review.user_id != request.user.id:
            return Response({'error': 'You can only edit your own reviews'}, status=403)
        serializer = ReviewUpdateSerializer(review, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        was_approved = review.status == 'approved'
        review = serializer.save(is_edited=True, last_edited_at=timezone.now(), status='pending')
        if was_approved:
            Review.refresh_listing_rating(review.entity_type, review.entity_id)
        return Response(ReviewSerializer(review, context={'request': request}).data)

    def delete(self, request, pk):
        review = _visible_review(request, pk)
        if review is None:
            return Response({'error': 'Review not found'}, status=404)
        if review.user_id != request.user.id and not is_moderator(request.user):
            return Response({'error': 'You can only delete your own reviews'}, status=403)
        entity_type, entity_id = review.entity_type, review.entity_id
        review.delete()
        Review.refresh_listing_rating(entity_type, entity_id)
        AuditLog.log(request.user, 'review_deleted', {'review_id': pk}, request)
        return Response({'message': 'Review deleted'})


class ReviewHelpfulView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        review = Review.objects.filter(pk=pk, status='approved').first()
        if review is None:
            return Response({'error': 'Review not found'}, status=404)
        with transaction.atomic():
            vote = HelpfulVote.objects.filter(review=review, user=request.user).first()
            if vote:
                vote.delete()
                Review.objects.filter(pk=review.pk, helpful_count__gt=0).update(helpful_count=F('helpful_count') - 1)
                helpful = False
            else:
                HelpfulVote.objects.create(review=review, user=request.user)
                Review.objects.filter(pk=review.pk).update(helpful_count=F('helpful_count') + 1)
                helpful = True
        review.refresh_from_db(fields=['helpful_count'])
        return Response({'helpful': helpful, 'helpful_count': review.helpful_count})


class ReviewReportView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        review = _visible_review(request, pk)
        if review is None:
            return Response({'error': 'Review not found'}, status=404)
        reason = str(request.data.get('reason', '')).strip()
        if not reason:
            return Response({'error': 'Reason is required'}, status=400)
        _, created = ReviewReport.objects.get_or_create(review=review, user=request.user,
                                                        defaults={'reason': reason})
        if not created:
            return Response({'error': 'You have already reported this review'}, status=400)
        logger.info('review reported', review_id=review.id, user_id=request.user.id)
        return Response({'message': 'Review reported successfully'}, status=201)


class ReviewModerationView(APIView):
    permission_classes = [IsModerator]
    ACTIONS = {'approve': 'approved', 'reject': 'rejected'}

    def patch(self, request):
        ids = request.data.get('review_ids') or []
        action = request.data.get('action')
        if not isinstance(ids, list) or not ids:
            return Response({'error': 'review_ids must be a non-empty list'}, status=400)
        if not all(str(i).isdigit() for i in ids):
            return Response({'error': 'review_ids must be integers'}, status=400)
        if action not in self.ACTIONS:
            return Response({'error': 'action must be approve or reject'}, status=400)
        new_status = self.ACTIONS[action]
        reviews = list(Review.objects.filter(pk__in=ids))
        now = timezone.now()
        with transaction.atomic():
            Review.objects.filter(pk__in=[r.pk for r in reviews]).update(
                status=new_status, moderated_by=request.user, moderated_at=now,
                moderation_notes=request.data.get('notes', ''),
            )
            for entity in {(r.entity_type, r.entity_id) for r in reviews}:
                Review.refresh_listing_rating(*entity)
        for review in reviews:
            if review.user_id:
                Notification.notify(
                    review.user, f'Review {new_status}',
                    f'Your review "{review.title or review.comment[:40]}" was {new_status}.',
                    notif_type='review',
                )
        AuditLog.log(request.user, f'reviews_{new_status}', {'review_ids': [r.pk for r in reviews]}, request)
        return Response({'message': f'{len(reviews)} reviews {new_status}', 'updated': len(reviews)})

from datetime import timedelta

from rest_framework import permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.core.models import User
from apps.core.permissions import IsAdmin
from apps.bookings.models import Booking
from apps.listings.registry import LISTING_TYPES
from apps.moderation.models import Submission, ReportIssue, Feedback, ContactMessage
from apps.moderation.serializers import SubmissionSerializer
from apps.reviews.models import Review


def _counts(qs, field):
    return dict(qs.values_list(field).annotate(n=Count('id')).order_by())


def _per_day(qs, since):
    rows = (qs.filter(created_at__gte=since).annotate(day=TruncDate('created_at'))
            .values('day').annotate(count=Count('id')).order_by('day'))
    return [{'date': r['day'].isoformat(), 'count': r['count']} for r in rows]


def _listing_row(item_type, obj):
    return {
        'id': obj.id, 'item_type': item_type, 'name': obj.name, 'slug': obj.slug,
        'status': obj.status, 'source': obj.source, 'city': obj.city, 'views': obj.views,
        'created_at': obj.created_at,
    }


class DashboardView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        listings = {}
        for item_type, (model, _) in LISTING_TYPES.items():
            by_status = _counts(model.objects.all(), 'status')
            listings[item_type] = {
                'total': sum(by_status.values()),
                'active': by_status.get('active', 0),
                'pending': by_status.get('pending', 0),
            }
        recent = Submission.objects.select_related('user')[:5]
        return Response({
            'listings': listings,
            'users': {'total': User.objects.count(), 'by_role': _counts(User.objects.all(), 'role')},
            'pending_submissions': Submission.objects.filter(status='pending').count(),
            'pending_reviews': Review.objects.filter(status='pending').count(),
            'open_reports': ReportIssue.objects.filter(status__in=ReportIssue.OPEN_STATUSES).count(),
            'new_feedback': Feedback.objects.filter(status='new').count(),
            'new_contact_messages': ContactMessage.objects.filter(status='new').count(),
            'bookings': _counts(Booking.objects.all(), 'booking_status'),
            'recent_submissions': SubmissionSerializer(recent, many=True).data,
        })


class AnalyticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        try:
            days = min(max(int(request.query_params.get('days', 30)), 1), 365)
        except ValueError:
            return Response({'error': 'days must be an integer'}, status=400)
        since = timezone.now() - timedelta(days=days)
        top = []
        for item_type, (model, _) in LISTING_TYPES.items():
            top += [_listing_row(item_type, obj) for obj in model.objects.order_by('-views')[:10]]
        top.sort(key=lambda row: row['views'], reverse=True)
        return Response({
            'days': days,
            'new_users': _per_day(User.objects.all(), since),
            'bookings': _per_day(Booking.objects.all(), since),
            'reviews': _per_day(Review.objects.all(), since),
            'top_listings': top[:10],
        })


class PendingListingsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        wanted = request.query_params.get('type')
        rows = []
        for item_type, (model, _) in LISTING_TYPES.items():
            if wanted and wanted != item_type:
                continue
            pending = model.objects.filter(status=model.STATUS_PENDING).order_by('-created_at')
            rows += [_listing_row(item_type, obj) for obj in pending]
        rows.sort(key=lambda row: row['created_at'], reverse=True)
        return Response({'results': rows, 'total': len(rows)})


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({'status': 'OK', 'timestamp': timezone.now().isoformat(),
                         'service': 'destination-kolkata-api'})

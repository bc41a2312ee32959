from rest_framework import generics, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Avg, Case, When, IntegerField
from django.utils import timezone
import structlog

from apps.core.models import User, AuditLog, Notification
from apps.core.pagination import paginate
from apps.core.permissions import IsAdmin, IsModerator, is_admin, is_moderator
from apps.mailer.services import send_workflow_email
from .models import Submission, ReportIssue, Feedback, ContactMessage
from .publishing import publish_submission, PublishError
from .serializers import (SubmissionSerializer, ReportIssueSerializer, FeedbackSerializer,
                          ContactMessageSerializer)

logger = structlog.get_logger(__name__)

SEVERITY_ORDER = Case(
    When(severity='critical', then=0), When(severity='high', then=1),
    When(severity='medium', then=2), When(severity='low', then=3),
    output_field=IntegerField(),
)


def _counts(qs, field):
    return dict(qs.values_list(field).annotate(n=Count('id')).order_by())


def _submission_email_context(submission):
    return {
        'submission_id': submission.id, 'submission_type': submission.get_type_display(),
        'title': submission.title, 'description': submission.description,
        'submitter_name': submission.user.display_name, 'submitter_email': submission.user.email,
        'user_name': submission.user.display_name, 'admin_notes': submission.admin_notes,
    }


# Submissions

class SubmissionListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        qs = Submission.objects.select_related('user')
        if not is_moderator(request.user):
            qs = qs.filter(user=request.user)
        q = request.query_params
        if q.get('status'):
            qs = qs.filter(status=q['status'])
        if q.get('type'):
            qs = qs.filter(type=q['type'])
        if q.get('assigned_to') == 'me':
            qs = qs.filter(assigned_to=request.user)
        sort = q.get('sort', 'newest')
        if sort == 'oldest':
            qs = qs.order_by('created_at')
        elif sort == 'status':
            qs = qs.order_by('status', '-created_at')
        else:
            qs = qs.order_by('-created_at')
        return paginate(self, qs, SubmissionSerializer)

    def post(self, request):
        serializer = SubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        submission = serializer.save(user=request.user, status='pending')
        AuditLog.log(request.user, 'submission_created',
                     {'submission_id': submission.id, 'type': submission.type}, request)
        send_workflow_email('submission_admin_notification', settings.ADMIN_NOTIFICATION_EMAIL,
                            _submission_email_context(submission), related=submission)
        for staff in User.staff_recipients(User.MODERATOR_ROLES):
            Notification.notify(staff, 'New submission', f'{submission.get_type_display()}: {submission.title}',
                                notif_type='submission', link=f'/admin/submissions/{submission.id}')
        return Response({'message': 'Submission received and pending review',
                         'submission': SubmissionSerializer(submission).data}, status=201)


class SubmissionDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def _get(self, request, pk):
        submission = Submission.objects.select_related('user').filter(pk=pk).first()
        if submission is None:
            return None, Response({'error': 'Submission not found'}, status=404)
        if submission.user_id != request.user.id and not is_moderator(request.user):
            return None, Response({'error': 'Access denied'}, status=403)
        return submission, None

    def get(self, request, pk):
        submission, error = self._get(request, pk)
        if error:
            return error
        return Response(SubmissionSerializer(submission).data)

    def patch(self, request, pk):
        submission, error = self._get(request, pk)
        if error:
            return error
        if not is_moderator(request.user) and submission.status != 'pending':
            return Response({'error': 'Only pending submissions can be edited'}, status=400)
        serializer = SubmissionSerializer(submission, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        serializer.save()
        return Response(serializer.data)

    def delete(self, request, pk):
        submission, error = self._get(request, pk)
        if error:
            return error
        if not is_admin(request.user):
            if submission.user_id != request.user.id:
                return Response({'error': 'Access denied'}, status=403)
            if submission.status != 'pending':
                return Response({'error': 'Only pending submissions can be deleted'}, status=400)
        AuditLog.log(request.user, 'submission_deleted', {'submission_id': submission.id}, request)
        submission.delete()
        return Response({'message': 'Submission deleted'})


class SubmissionReviewView(APIView):
    permission_classes = [IsModerator]
    STATUSES = ('approved', 'rejected', 'in_review')

    def post(self, request, pk):
        submission = Submission.objects.select_related('user').filter(pk=pk).first()
        if submission is None:
            return Response({'error': 'Submission not found'}, status=404)
        new_status = request.data.get('status')
        if new_status not in self.STATUSES:
            return Response({'error': 'Status must be one of: ' + ', '.join(self.STATUSES)}, status=400)
        if submission.status == 'approved':
            return Response({'error': 'Submission has already been approved'}, status=400)
        priority = request.data.get('priority')
        if priority and priority not in dict(Submission._meta.get_field('priority').choices):
            return Response({'error': 'Invalid priority'}, status=400)

        try:
            with transaction.atomic():
                if new_status == 'approved':
                    published = publish_submission(submission, request.user)
                    submission.published_id = published.pk
                submission.status = new_status
                submission.admin_notes = request.data.get('admin_notes', submission.admin_notes)
                if priority:
                    submission.priority = priority
                submission.reviewed_by = request.user
                submission.reviewed_at = timezone.now()
                submission.save()
        except PublishError as e:
            logger.info('submission publish rejected', submission_id=submission.id, errors=e.errors)
            return Response({'error': 'Submission data is invalid', 'details': e.errors}, status=400)

        AuditLog.log(request.user, f'submission_{new_status}',
                     {'submission_id': submission.id, 'published_id': submission.published_id}, request)
        if new_status in ('approved', 'rejected'):
            workflow = 'submission_approval' if new_status == 'approved' else 'submission_rejection'
            send_workflow_email(workflow, submission.user.email, _submission_email_context(submission),
                                user=submission.user, related=submission)
            Notification.notify(
                submission.user, f'Submission {new_status}',
                f'Your submission "{submission.title}" was {new_status}.',
                notif_type='submission', link='/submissions',
            )
        return Response(SubmissionSerializer(submission).data)


class SubmissionAssignView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request, pk):
        submission = Submission.objects.select_related('user').filter(pk=pk).first()
        if submission is None:
            return Response({'error': 'Submission not found'}, status=404)
        assignee = User.objects.filter(pk=request.data.get('assignee_id'),
                                       role__in=User.MODERATOR_ROLES).first()
        if assignee is None:
            return Response({'error': 'Assignee must be a moderator or admin'}, status=400)
        submission.assigned_to = assignee
        if submission.status == 'pending':
            submission.status = 'in_review'
        submission.save()
        context = _submission_email_context(submission)
        context.update({'assignee_name': assignee.display_name, 'assigned_by': request.user.display_name})
        send_workflow_email('resource_assignment', assignee.email, context, user=assignee, related=submission)
        Notification.notify(assignee, 'Submission assigned', f'You were assigned "{submission.title}".',
                            notif_type='submission', link=f'/admin/submissions/{submission.id}')
        AuditLog.log(request.user, 'submission_assigned',
                     {'submission_id': submission.id, 'assignee_id': assignee.id}, request)
        return Response(SubmissionSerializer(submission).data)


# Issue reports

class ReportIssueListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def get(self, request):
        qs = ReportIssue.objects.all()
        q = request.query_params
        for field in ('status', 'severity', 'item_type'):
            if q.get(field):
                qs = qs.filter(**{field: q[field]})
        sort = q.get('sort', 'newest')
        if sort == 'oldest':
            qs = qs.order_by('created_at')
        elif sort == 'severity':
            qs = qs.annotate(severity_rank=SEVERITY_ORDER).order_by('severity_rank', '-created_at')
        else:
            qs = qs.order_by('-created_at')
        all_reports = ReportIssue.objects.all()
        return paginate(self, qs, ReportIssueSerializer, breakdown={
            'status': _counts(all_reports, 'status'),
            'severity': _counts(all_reports, 'severity'),
        })

    def post(self, request):
        serializer = ReportIssueSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        data = serializer.validated_data
        if ReportIssue.has_open_report(request.user, data['item_type'], data['item_id']):
            return Response({'error': 'You already have an open report for this item'}, status=400)
        report = serializer.save(user=request.user)
        AuditLog.log(request.user, 'issue_reported', {'report_id': report.id}, request)
        if report.severity in ('high', 'critical'):
            send_workflow_email('admin_alert', settings.ADMIN_NOTIFICATION_EMAIL, {
                'title': f'{report.get_severity_display()} severity report',
                'message': f'{report.item_type} #{report.item_id}: {report.reason}',
                'link': f'/admin/reports/{report.id}',
            }, related=report)
        return Response({'message': 'Report submitted', 'report': ReportIssueSerializer(report).data},
                        status=201)


class MyReportsView(generics.ListAPIView):
    serializer_class = ReportIssueSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return ReportIssue.objects.filter(user=self.request.user)


class ReportIssueDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        report = ReportIssue.objects.filter(pk=pk).first()
        if report is None:
            return Response({'error': 'Report not found'}, status=404)
        if is_admin(request.user):
            report.mark_viewed(request.user)
        elif report.user_id != request.user.id:
            return Response({'error': 'Access denied'}, status=403)
        return Response(ReportIssueSerializer(report).data)


class ReportIssueStatusView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request, pk):
        report = ReportIssue.objects.filter(pk=pk).first()
        if report is None:
            return Response({'error': 'Report not found'}, status=404)
        new_status = request.data.get('status')
        if new_status not in dict(ReportIssue.STATUS_CHOICES):
            return Response({'error': 'Invalid status'}, status=400)
        report.status = new_status
        report.admin = request.user
        if 'action_taken' in request.data:
            report.action_taken = request.data['action_taken']
        report.resolved_at = timezone.now() if new_status in ReportIssue.CLOSED_STATUSES else None
        report.save()
        AuditLog.log(request.user, 'report_status_changed',
                     {'report_id': report.id, 'status': new_status}, request)
        Notification.notify(report.user, 'Report updated', f'Your report is now {report.get_status_display()}.',
                            notif_type='report')
        return Response(ReportIssueSerializer(report).data)


class ReportIssueStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        qs = ReportIssue.objects.all()
        return Response({
            'total': qs.count(),
            'open': qs.filter(status__in=ReportIssue.OPEN_STATUSES).count(),
            'by_status': _counts(qs, 'status'),
            'by_severity': _counts(qs, 'severity'),
            'by_item_type': _counts(qs, 'item_type'),
        })


# Feedback

class FeedbackListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def get(self, request):
        qs = Feedback.objects.all()
        q = request.query_params
        for field in ('type', 'status', 'priority', 'category'):
            if q.get(field):
                qs = qs.filter(**{field: q[field]})
        if q.get('search'):
            qs = qs.filter(
                Q(subject__icontains=q['search']) |
                Q(message__icontains=q['search']) |
                Q(email__icontains=q['search'])
            )
        return paginate(self, qs, FeedbackSerializer)

    def post(self, request):
        serializer = FeedbackSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        user = request.user if request.user.is_authenticated else None
        feedback = serializer.save(user=user)
        logger.info('feedback received', feedback_id=feedback.id, type=feedback.type)
        return Response({'message': 'Thank you for your feedback',
                         'feedback': FeedbackSerializer(feedback).data}, status=201)


class FeedbackStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        qs = Feedback.objects.all()
        return Response({
            'total': qs.count(),
            'average_rating': round(qs.aggregate(avg=Avg('rating'))['avg'] or 0, 1),
            'by_type': _counts(qs, 'type'),
            'by_status': _counts(qs, 'status'),
            'by_category': _counts(qs, 'category'),
        })


class FeedbackDetailView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, pk):
        feedback = Feedback.objects.filter(pk=pk).first()
        if feedback is None:
            return Response({'error': 'Feedback not found'}, status=404)
        feedback.mark_viewed(request.user)
        return Response(FeedbackSerializer(feedback).data)

    def delete(self, request, pk):
        deleted, _ = Feedback.objects.filter(pk=pk).delete()
        if not deleted:
            return Response({'error': 'Feedback not found'}, status=404)
        return Response({'message': 'Feedback deleted'})


class FeedbackReviewView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request, pk):
        feedback = Feedback.objects.filter(pk=pk).first()
        if feedback is None:
            return Response({'error': 'Feedback not found'}, status=404)
        new_status = request.data.get('status', 'reviewed')
        if new_status not in dict(Feedback.STATUS_CHOICES):
            return Response({'error': 'Invalid status'}, status=400)
        priority = request.data.get('priority')
        if priority:
            if priority not in dict(Feedback._meta.get_field('priority').choices):
                return Response({'error': 'Invalid priority'}, status=400)
            feedback.priority = priority
        feedback.status = new_status
        feedback.notes = request.data.get('notes', feedback.notes)
        feedback.reviewed_by = request.user
        feedback.reviewed_at = timezone.now()
        feedback.save()
        return Response(FeedbackSerializer(feedback).data)


# Contact

class ContactCreateView(generics.CreateAPIView):
    serializer_class = ContactMessageSerializer
    permission_classes = [permissions.AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        message = serializer.save()
        logger.info('contact message received', contact_id=message.id, category=message.category)
        return Response({'message': 'Thank you for contacting us. We will get back to you soon.',
                         'id': message.id}, status=201)


class AdminContactListView(generics.ListAPIView):
    serializer_class = ContactMessageSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        qs = ContactMessage.objects.all()
        q = self.request.query_params
        for field in ('status', 'category', 'priority'):
            if q.get(field):
                qs = qs.filter(**{field: q[field]})
        return qs


class AdminContactRespondView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request, pk):
        message = ContactMessage.objects.filter(pk=pk).first()
        if message is None:
            return Response({'error': 'Message not found'}, status=404)
        response_text = str(request.data.get('response', '')).strip()
        if not response_text:
            return Response({'error': 'Response is required'}, status=400)
        new_status = request.data.get('status', 'resolved')
        if new_status not in dict(ContactMessage.STATUS_CHOICES):
            return Response({'error': 'Invalid status'}, status=400)
        message.response = response_text
        message.status = new_status
        message.responded_by = request.user
        message.responded_at = timezone.now()
        message.save()
        sent = send_workflow_email('contact_response', message.email, {
            'name': message.full_name, 'subject': message.subject, 'response': response_text,
        }, related=message)
        return Response({'message': 'Response saved', 'email_sent': sent,
                         'contact': ContactMessageSerializer(message).data})

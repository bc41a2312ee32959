from rest_framework import generics
from rest_framework.views import APIView
from rest_framework.response import Response
from django.utils import timezone

from apps.core.models import AuditLog
from apps.core.permissions import IsAdmin
from .models import EmailTemplate, EmailHistory
from .serializers import EmailTemplateSerializer, EmailHistorySerializer
from .services import send_workflow_email


class EmailTemplateListView(generics.ListCreateAPIView):
    serializer_class = EmailTemplateSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        qs = EmailTemplate.objects.all()
        q = self.request.query_params
        if q.get('workflow_type'):
            qs = qs.filter(workflow_type=q['workflow_type'])
        if q.get('is_active') in ('true', 'false'):
            qs = qs.filter(is_active=q['is_active'] == 'true')
        return qs

    def perform_create(self, serializer):
        template = serializer.save(created_by=self.request.user, updated_by=self.request.user)
        AuditLog.log(self.request.user, 'email_template_created', {'id': template.id}, self.request)


class EmailTemplateDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = EmailTemplateSerializer
    permission_classes = [IsAdmin]
    queryset = EmailTemplate.objects.all()

    def perform_update(self, serializer):
        template = serializer.save(updated_by=self.request.user)
        AuditLog.log(self.request.user, 'email_template_updated',
                     {'id': template.id, 'version': template.version}, self.request)


class EmailHistoryListView(generics.ListAPIView):
    serializer_class = EmailHistorySerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        qs = EmailHistory.objects.all()
        q = self.request.query_params
        if q.get('status'):
            qs = qs.filter(status=q['status'])
        if q.get('workflow_type'):
            qs = qs.filter(workflow_type=q['workflow_type'])
        if q.get('recipient'):
            qs = qs.filter(recipient__icontains=q['recipient'])
        return qs


class EmailTestView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        recipient = request.data.get('email') or request.user.email
        sent = send_workflow_email('verification_test', recipient, {
            'requested_by': request.user.email, 'sent_at': timezone.now(),
        }, user=request.user)
        if not sent:
            return Response({'error': 'Test email could not be sent', 'recipient': recipient}, status=502)
        return Response({'message': 'Test email sent', 'recipient': recipient})

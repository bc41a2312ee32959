from rest_framework import generics, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.db.models import Q
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_encode, urlsafe_base64_decode
import structlog

from .models import User, AuditLog, Notification
from .permissions import IsAdmin
from .serializers import (RegisterSerializer, LoginSerializer, UserSerializer,
                          AdminUserSerializer, NotificationSerializer)
from .tokens import issue_tokens, set_auth_cookie, clear_auth_cookie
from apps.mailer.services import send_workflow_email

logger = structlog.get_logger(__name__)


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            tokens = issue_tokens(user)
            AuditLog.log(user, 'register', request=request)
            context = {'user_name': user.display_name, 'user_email': user.email,
                       'phone': user.phone, 'registered_at': user.created_at}
            send_workflow_email('registration_welcome', user.email, context, user=user, related=user)
            send_workflow_email('registration_admin_notification', settings.ADMIN_NOTIFICATION_EMAIL,
                                context, related=user)
            response = Response({'user': UserSerializer(user).data, 'tokens': tokens}, status=201)
            return set_auth_cookie(response, tokens['access'])
        return Response(serializer.errors, status=400)


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            if 'non_field_errors' in serializer.errors:
                return Response({'error': 'Invalid credentials'}, status=401)
            return Response(serializer.errors, status=400)
        user = serializer.validated_data['user']
        if not user.is_active_status:
            logger.info('login rejected', user_id=user.id, status=user.status)
            return Response({'error': 'Account is not active. Please contact support.'}, status=401)
        remember_me = serializer.validated_data['remember_me']
        tokens = issue_tokens(user, remember_me=remember_me)
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        AuditLog.log(user, 'login', request=request)
        response = Response({'user': UserSerializer(user).data, 'tokens': tokens})
        return set_auth_cookie(response, tokens['access'], remember_me=remember_me)


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        return clear_auth_cookie(Response({'message': 'Logout successful'}))


class ProfileView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=400)


class ForgotPasswordView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        email = str(request.data.get('email', '')).lower().strip()
        if not email:
            return Response({'error': 'Email is required'}, status=400)
        user = User.objects.filter(email__iexact=email).first()
        if user:
            uid = urlsafe_base64_encode(force_bytes(user.pk))
            token = default_token_generator.make_token(user)
            send_workflow_email('password_reset', user.email, {
                'user_name': user.display_name,
                'reset_url': f'{settings.FRONTEND_URL}/reset-password?uid={uid}&token={token}',
            }, user=user, related=user)
            AuditLog.log(user, 'password_reset_requested', request=request)
        return Response({'message': 'If that email is registered, a reset link has been sent.'})


class ResetPasswordView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        uid = request.data.get('uid', '')
        token = request.data.get('token', '')
        password = request.data.get('password', '')
        if len(password) < 8:
            return Response({'error': 'Password must be at least 8 characters'}, status=400)
        try:
            user = User.objects.get(pk=force_str(urlsafe_base64_decode(uid)))
        except (User.DoesNotExist, ValueError, TypeError, OverflowError):
            return Response({'error': 'Invalid or expired reset link'}, status=400)
        if not default_token_generator.check_token(user, token):
            return Response({'error': 'Invalid or expired reset link'}, status=400)
        user.set_password(password)
        user.save()
        AuditLog.log(user, 'password_reset', request=request)
        return Response({'message': 'Password has been reset'})


class NotificationListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        notifs = Notification.objects.filter(user=request.user)[:30]
        unread = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({'results': NotificationSerializer(notifs, many=True).data, 'unread': unread})

    def post(self, request):
        Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return Response({'message': 'All marked as read'})


class NotificationReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        Notification.objects.filter(id=pk, user=request.user).update(is_read=True)
        return Response({'message': 'Marked as read'})


class AdminUserListView(generics.ListCreateAPIView):
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        qs = User.objects.all().order_by('-created_at')
        q = self.request.query_params
        if q.get('role'):
            qs = qs.filter(role=q['role'])
        if q.get('status'):
            qs = qs.filter(status=q['status'])
        if q.get('search'):
            qs = qs.filter(
                Q(email__icontains=q['search']) |
                Q(first_name__icontains=q['search']) |
                Q(last_name__icontains=q['search'])
            )
        return qs

    def perform_create(self, serializer):
        user = serializer.save()
        AuditLog.log(self.request.user, 'user_created', {'user_id': user.id}, self.request)


class AdminUserDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdmin]
    queryset = User.objects.all()

    def perform_update(self, serializer):
        user = serializer.save()
        AuditLog.log(self.request.user, 'user_updated',
                     {'user_id': user.id, 'fields': sorted(serializer.validated_data)}, self.request)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=400)
        AuditLog.log(request.user, 'user_deleted', {'user_id': user.id, 'email': user.email}, request)
        user.delete()
        return Response(status=204)

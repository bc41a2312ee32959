from decimal import Decimal, InvalidOperation

from rest_framework import generics, permissions, serializers
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Q
from django.utils import timezone

from apps.core.models import AuditLog
from apps.core.permissions import IsCustomerOrAdmin, IsOwnerOrAdmin
from .models import Promotion, PromotionError
from .serializers import PromotionSerializer


class PromotionListView(generics.ListCreateAPIView):
    serializer_class = PromotionSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsCustomerOrAdmin()]
        return [permissions.AllowAny()]

    def get_queryset(self):
        qs = Promotion.objects.all()
        q = self.request.query_params
        if q.get('business_type'):
            qs = qs.filter(business_type=q['business_type'])
        if q.get('business_id'):
            if not q['business_id'].isdigit():
                raise serializers.ValidationError({'error': 'Invalid business_id'})
            qs = qs.filter(business_id=q['business_id'])
        if q.get('active') in ('true', 'false'):
            qs = qs.filter(is_active=q['active'] == 'true')
        if q.get('include_expired') != 'true':
            qs = qs.filter(valid_until__gte=timezone.now())
        if q.get('search'):
            qs = qs.filter(
                Q(title__icontains=q['search']) |
                Q(description__icontains=q['search']) |
                Q(code__icontains=q['search'])
            )
        return qs.order_by('valid_until')

    def perform_create(self, serializer):
        promo = serializer.save(created_by=self.request.user)
        AuditLog.log(self.request.user, 'promotion_created', {'id': promo.id, 'code': promo.code},
                     self.request)


class ActivePromotionsView(generics.ListAPIView):
    serializer_class = PromotionSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        now = timezone.now()
        qs = Promotion.objects.filter(is_active=True, valid_from__lte=now, valid_until__gte=now)
        if self.request.query_params.get('business_type'):
            qs = qs.filter(business_type=self.request.query_params['business_type'])
        return qs


class PromotionValidateView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, code):
        try:
            amount = Decimal(str(request.query_params.get('amount', 0)))
        except InvalidOperation:
            return Response({'valid': False, 'error': 'Invalid amount'}, status=400)
        if not amount.is_finite() or amount < 0:
            return Response({'valid': False, 'error': 'Invalid amount'}, status=400)
        try:
            promo, discount = Promotion.validate_code(
                code, amount, request.query_params.get('business_type'))
        except PromotionError as e:
            return Response({'valid': False, 'error': e.message}, status=e.status)
        return Response({
            'valid': True,
            'promotion': PromotionSerializer(promo).data,
            'discount': discount,
            'final_amount': amount - discount,
        })


class PromotionDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = PromotionSerializer
    queryset = Promotion.objects.all()
    owner_field = 'created_by'

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def perform_update(self, serializer):
        promo = serializer.save()
        AuditLog.log(self.request.user, 'promotion_updated', {'id': promo.id}, self.request)

    def perform_destroy(self, instance):
        AuditLog.log(self.request.user, 'promotion_deleted', {'id': instance.id, 'code': instance.code},
                     self.request)
        instance.delete()


class PromotionUseView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        promo = Promotion.objects.filter(pk=pk).first()
        if not promo:
            return Response({'error': 'Promotion not found'}, status=404)
        if not promo.is_current:
            return Response({'error': 'Promotion is not active'}, status=400)
        if not promo.redeem():
            return Response({'error': 'Promotion usage limit reached'}, status=400)
        return Response({'message': 'Promotion used', 'used_count': promo.used_count})

from rest_framework import generics, permissions
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Q, F, Count
from django.utils import timezone
import structlog

from apps.core.models import AuditLog
from apps.core.permissions import (IsAdmin, IsAdminOrReadOnly, IsCustomerOrAdmin,
                                   IsOwnerOrAdmin, is_admin)
from .geo import within_radius
from .models import (Listing, Hotel, Restaurant, Attraction, Event, Sports, Travel,
                     TravelTip, EmergencyContact)
from .serializers import (HotelSerializer, RestaurantSerializer, AttractionSerializer,
                          EventSerializer, SportsSerializer, TravelSerializer,
                          TravelTipSerializer, EmergencyContactSerializer)

logger = structlog.get_logger(__name__)

SORT_FIELDS = ['name', '-name', '-created_at', 'created_at', '-rating_average', '-views']


def _float(value, name):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError({name: 'Must be a number.'})


class ListingListCreateView(generics.ListCreateAPIView):
    model = None

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsCustomerOrAdmin()]
        return [permissions.AllowAny()]

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx['request'] = self.request
        return ctx

    def get_queryset(self):
        qs = self.model.objects.all()
        q = self.request.query_params
        if is_admin(self.request.user):
            if q.get('status') and q['status'] != 'all':
                qs = qs.filter(status=q['status'])
        else:
            qs = qs.filter(status=Listing.STATUS_ACTIVE)
        if q.get('search'):
            qs = qs.filter(
                Q(name__icontains=q['search']) |
                Q(description__icontains=q['search']) |
                Q(area__icontains=q['search'])
            )
        if q.get('category'):
            qs = qs.filter(category=q['category'])
        if q.get('city'):
            qs = qs.filter(city__iexact=q['city'])
        if q.get('featured') in ('true', '1'):
            qs = qs.filter(featured=True)
        if q.get('min_rating'):
            qs = qs.filter(rating_average__gte=_float(q['min_rating'], 'min_rating'))
        if q.get('amenities'):
            for amenity in [a.strip() for a in q['amenities'].split(',') if a.strip()]:
                qs = qs.filter(amenities__icontains=amenity)
        qs = self.filter_type(qs, q)
        sort = q.get('sort')
        if sort in SORT_FIELDS:
            qs = qs.order_by(sort)
        return qs

    def filter_type(self, qs, q):
        return qs

    def list(self, request, *args, **kwargs):
        q = request.query_params
        if not (q.get('lat') and q.get('lng')):
            return super().list(request, *args, **kwargs)
        lat, lng = _float(q['lat'], 'lat'), _float(q['lng'], 'lng')
        distance = _float(q.get('distance', 50), 'distance')
        nearby = within_radius(self.get_queryset(), lat, lng, distance)
        page = self.paginate_queryset(nearby)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def perform_create(self, serializer):
        user = self.request.user
        extra = {'created_by': user}
        if not is_admin(user):
            extra['status'] = Listing.STATUS_PENDING
        listing = serializer.save(**extra)
        AuditLog.log(user, f'{self.model.item_type}_created', {'id': listing.id}, self.request)
        logger.info('listing created', item_type=self.model.item_type, listing_id=listing.id,
                    status=listing.status)


class ListingDetailView(generics.RetrieveUpdateDestroyAPIView):
    model = None
    owner_field = 'created_by'

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx['request'] = self.request
        return ctx

    def get_queryset(self):
        return self.model.objects.all()

    def get_object(self):
        key = self.kwargs['key']
        qs = self.get_queryset()
        obj = qs.filter(pk=int(key)).first() if key.isdigit() else qs.filter(slug=key).first()
        if obj is None:
            raise NotFound('Listing not found')
        user = self.request.user
        is_owner = user.is_authenticated and obj.created_by_id == user.id
        if obj.status != Listing.STATUS_ACTIVE and not (is_owner or is_admin(user)):
            raise NotFound('Listing not found')
        self.check_object_permissions(self.request, obj)
        return obj

    def retrieve(self, request, *args, **kwargs):
        obj = self.get_object()
        if not (request.user.is_authenticated and obj.created_by_id == request.user.id):
            self.model.objects.filter(pk=obj.pk).update(views=F('views') + 1)
            obj.refresh_from_db(fields=['views'])
        return Response(self.get_serializer(obj).data)

    def perform_update(self, serializer):
        listing = serializer.save()
        AuditLog.log(self.request.user, f'{self.model.item_type}_updated',
                     {'id': listing.id, 'fields': sorted(serializer.validated_data)}, self.request)

    def perform_destroy(self, instance):
        AuditLog.log(self.request.user, f'{self.model.item_type}_deleted',
                     {'id': instance.id, 'name': instance.name}, self.request)
        instance.delete()


class ListingCategoriesView(APIView):
    permission_classes = [permissions.AllowAny]
    model = None

    def get(self, request):
        choices = getattr(self.model, 'CATEGORY_CHOICES', None)
        field = 'category'
        if choices is None:
            choices, field = self.model.PRICE_RANGE_CHOICES, 'price_range'
        counts = dict(
            self.model.objects.filter(status=Listing.STATUS_ACTIVE)
            .values_list(field).annotate(n=Count('id')).order_by()
        )
        return Response({'field': field, 'results': [
            {'value': value, 'label': label, 'count': counts.get(value, 0)}
            for value, label in choices
        ]})


class ListingVerifyView(APIView):
    permission_classes = [IsAdmin]
    model = None

    def post(self, request, pk):
        listing = self.model.objects.filter(pk=pk).first()
        if not listing:
            return Response({'error': 'Listing not found'}, status=404)
        new_status = request.data.get('status', Listing.STATUS_ACTIVE)
        if new_status not in dict(Listing.STATUS_CHOICES):
            return Response({'error': 'Invalid status'}, status=400)
        listing.status = new_status
        listing.verified_by = request.user
        listing.verification_date = timezone.now()
        listing.save(update_fields=['status', 'verified_by', 'verification_date', 'updated_at'])
        AuditLog.log(request.user, f'{self.model.item_type}_verified',
                     {'id': listing.id, 'status': new_status}, request)
        return Response({'message': f'Listing marked {new_status}', 'id': listing.id,
                         'status': listing.status})


class HotelListView(ListingListCreateView):
    model = Hotel
    serializer_class = HotelSerializer

    def filter_type(self, qs, q):
        if q.get('min_price'):
            qs = qs.filter(price_max__gte=_float(q['min_price'], 'min_price'))
        if q.get('max_price'):
            qs = qs.filter(price_min__lte=_float(q['max_price'], 'max_price'))
        return qs


class RestaurantListView(ListingListCreateView):
    model = Restaurant
    serializer_class = RestaurantSerializer

    def filter_type(self, qs, q):
        if q.get('cuisine'):
            qs = qs.filter(cuisine__icontains=q['cuisine'])
        if q.get('price_range'):
            qs = qs.filter(price_range=q['price_range'])
        return qs


class AttractionListView(ListingListCreateView):
    model = Attraction
    serializer_class = AttractionSerializer


class EventListView(ListingListCreateView):
    model = Event
    serializer_class = EventSerializer

    def filter_type(self, qs, q):
        if q.get('upcoming') in ('true', '1'):
            qs = qs.filter(end_date__gte=timezone.localdate())
        if q.get('from'):
            qs = qs.filter(end_date__gte=q['from'])
        if q.get('to'):
            qs = qs.filter(start_date__lte=q['to'])
        if not q.get('sort'):
            qs = qs.order_by('start_date', 'name')
        return qs


class SportsListView(ListingListCreateView):
    model = Sports
    serializer_class = SportsSerializer

    def filter_type(self, qs, q):
        if q.get('sport'):
            qs = qs.filter(sport__icontains=q['sport'])
        return qs


class TravelListView(ListingListCreateView):
    model = Travel
    serializer_class = TravelSerializer

    def filter_type(self, qs, q):
        if q.get('transport_type'):
            qs = qs.filter(transport_type=q['transport_type'])
        return qs


class HotelDetailView(ListingDetailView):
    model = Hotel
    serializer_class = HotelSerializer


class RestaurantDetailView(ListingDetailView):
    model = Restaurant
    serializer_class = RestaurantSerializer


class AttractionDetailView(ListingDetailView):
    model = Attraction
    serializer_class = AttractionSerializer


class EventDetailView(ListingDetailView):
    model = Event
    serializer_class = EventSerializer


class SportsDetailView(ListingDetailView):
    model = Sports
    serializer_class = SportsSerializer


class TravelDetailView(ListingDetailView):
    model = Travel
    serializer_class = TravelSerializer


class TravelTipListView(generics.ListCreateAPIView):
    serializer_class = TravelTipSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        qs = TravelTip.objects.all()
        if not is_admin(self.request.user):
            qs = qs.filter(is_active=True)
        if self.request.query_params.get('category'):
            qs = qs.filter(category=self.request.query_params['category'])
        return qs


class TravelTipDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = TravelTipSerializer
    permission_classes = [IsAdminOrReadOnly]
    queryset = TravelTip.objects.all()


class EmergencyContactListView(generics.ListCreateAPIView):
    serializer_class = EmergencyContactSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        qs = EmergencyContact.objects.all()
        if not is_admin(self.request.user):
            qs = qs.filter(is_active=True)
        if self.request.query_params.get('category'):
            qs = qs.filter(category=self.request.query_params['category'])
        return qs


class EmergencyContactDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = EmergencyContactSerializer
    permission_classes = [IsAdminOrReadOnly]
    queryset = EmergencyContact.objects.all()

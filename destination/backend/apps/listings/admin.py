from django.contrib import admin
from .models import Hotel, Restaurant, Attraction, Event, Sports, Travel, TravelTip, EmergencyContact


class ListingAdmin(admin.ModelAdmin):
    list_display = ['name', 'area', 'status', 'featured', 'rating_average', 'views', 'source', 'created_at']
    list_filter = ['status', 'featured', 'promoted', 'source']
    search_fields = ['name', 'area', 'description', 'osm_id']
    readonly_fields = ['slug', 'views', 'rating_average', 'rating_count', 'created_at', 'updated_at']
    actions = ['make_active', 'make_inactive']

    @admin.action(description='Mark selected listings active')
    def make_active(self, request, queryset):
        queryset.update(status='active')

    @admin.action(description='Mark selected listings inactive')
    def make_inactive(self, request, queryset):
        queryset.update(status='inactive')


@admin.register(Hotel)
class HotelAdmin(ListingAdmin):
    list_display = ListingAdmin.list_display[:2] + ['category', 'price_min', 'price_max'] + ListingAdmin.list_display[2:]
    list_filter = ListingAdmin.list_filter + ['category']


@admin.register(Restaurant)
class RestaurantAdmin(ListingAdmin):
    list_filter = ListingAdmin.list_filter + ['price_range']


@admin.register(Attraction)
class AttractionAdmin(ListingAdmin):
    list_filter = ListingAdmin.list_filter + ['category']


@admin.register(Event)
class EventAdmin(ListingAdmin):
    list_display = ['name', 'category', 'start_date', 'end_date', 'status', 'featured']
    list_filter = ListingAdmin.list_filter + ['category']


@admin.register(Sports)
class SportsAdmin(ListingAdmin):
    list_filter = ListingAdmin.list_filter + ['category']


@admin.register(Travel)
class TravelAdmin(ListingAdmin):
    list_filter = ListingAdmin.list_filter + ['category', 'transport_type']


@admin.register(TravelTip)
class TravelTipAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'priority', 'is_active']
    list_filter = ['category', 'is_active']


@admin.register(EmergencyContact)
class EmergencyContactAdmin(admin.ModelAdmin):
    list_display = ['service', 'number', 'category', 'is_active']
    list_filter = ['category', 'is_active']

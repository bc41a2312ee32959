from django.contrib import admin
from .models import Booking, Favorite

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['confirmation_number', 'customer', 'item_type', 'item_name', 'check_in_date',
                    'event_date', 'total_amount', 'payment_status', 'booking_status']
    list_filter = ['booking_status', 'payment_status', 'item_type']
    search_fields = ['confirmation_number', 'customer__email', 'guest_email', 'item_name']

@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['user', 'item_type', 'item_name', 'added_at']
    list_filter = ['item_type']

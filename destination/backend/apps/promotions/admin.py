from django.contrib import admin
from .models import Promotion


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ['code', 'title', 'business_type', 'discount_percent', 'discount_amount',
                    'used_count', 'usage_limit', 'valid_until', 'is_active']
    list_filter = ['business_type', 'is_active']
    search_fields = ['code', 'title']

from django.contrib import admin
from .models import Review, ReviewReport


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['entity_type', 'entity_id', 'user', 'rating', 'status', 'helpful_count', 'created_at']
    list_filter = ['status', 'entity_type', 'rating']
    search_fields = ['title', 'comment', 'user__email', 'author_email']


@admin.register(ReviewReport)
class ReviewReportAdmin(admin.ModelAdmin):
    list_display = ['review', 'user', 'created_at']

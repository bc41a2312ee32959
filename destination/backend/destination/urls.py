from django.contrib import admin
from django.urls import path, include

from apps.core import views as core_views
from apps.dashboard.views import HealthView
from apps.ingestion import urls as ingestion_urls
from apps.listings import urls as listing_urls
from apps.mailer import urls as mailer_urls
from apps.mailer.views import EmailTestView
from apps.moderation import urls as moderation_urls
from apps.reviews.views import ReviewModerationView

admin_urls = [
    path('users/', core_views.AdminUserListView.as_view()),
    path('users/<int:pk>/', core_views.AdminUserDetailView.as_view()),
    path('reviews/', ReviewModerationView.as_view()),
    path('contact/', include(moderation_urls.admin_contact_urls)),
    path('email-templates/', include(mailer_urls.template_urls)),
    path('email-history/', include(mailer_urls.history_urls)),
    path('email-test/', EmailTestView.as_view()),
    path('data-ingestion/', include(ingestion_urls.ingestion_urls)),
    path('data-ingestion-history/', include(ingestion_urls.history_urls)),
    path('', include('apps.dashboard.urls')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', HealthView.as_view()),
    path('api/auth/', include('apps.core.urls')),
    path('api/hotels/', include(listing_urls.hotel_urls)),
    path('api/restaurants/', include(listing_urls.restaurant_urls)),
    path('api/attractions/', include(listing_urls.attraction_urls)),
    path('api/events/', include(listing_urls.event_urls)),
    path('api/sports/', include(listing_urls.sports_urls)),
    path('api/travel/', include(listing_urls.travel_urls)),
    path('api/emergency-contacts/', include(listing_urls.emergency_urls)),
    path('api/bookings/', include('apps.bookings.urls')),
    path('api/reviews/', include('apps.reviews.urls')),
    path('api/promotions/', include('apps.promotions.urls')),
    path('api/upload/', include('apps.media.urls')),
    path('api/submissions/', include(moderation_urls.submission_urls)),
    path('api/report/', include(moderation_urls.report_urls)),
    path('api/feedback/', include(moderation_urls.feedback_urls)),
    path('api/contact/', include(moderation_urls.contact_urls)),
    path('api/admin/', include(admin_urls)),
]

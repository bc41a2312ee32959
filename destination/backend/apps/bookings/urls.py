from django.urls import path
from . import views

urlpatterns = [
    path('', views.BookingListCreateView.as_view()),
    path('stats/', views.BookingStatsView.as_view()),
    path('favorites/', views.FavoriteView.as_view()),
    path('<int:pk>/', views.BookingDetailView.as_view()),
    path('<int:pk>/cancel/', views.BookingCancelView.as_view()),
    path('<int:pk>/status/', views.BookingStatusView.as_view()),
]

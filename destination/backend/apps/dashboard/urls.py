from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/', views.DashboardView.as_view()),
    path('analytics/', views.AnalyticsView.as_view()),
    path('pending/', views.PendingListingsView.as_view()),
]

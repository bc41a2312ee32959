from django.urls import path
from . import views

ingestion_urls = [
    path('', views.IngestionRunView.as_view()),
]

history_urls = [
    path('', views.IngestionHistoryListView.as_view()),
    path('stats/', views.IngestionStatsView.as_view()),
    path('<int:pk>/', views.IngestionHistoryDetailView.as_view()),
]

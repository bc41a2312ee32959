from django.urls import path
from . import views

template_urls = [
    path('', views.EmailTemplateListView.as_view()),
    path('<int:pk>/', views.EmailTemplateDetailView.as_view()),
]

history_urls = [
    path('', views.EmailHistoryListView.as_view()),
]

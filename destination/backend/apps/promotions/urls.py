from django.urls import path
from . import views

urlpatterns = [
    path('', views.PromotionListView.as_view()),
    path('active/', views.ActivePromotionsView.as_view()),
    path('validate/<str:code>/', views.PromotionValidateView.as_view()),
    path('<int:pk>/', views.PromotionDetailView.as_view()),
    path('<int:pk>/use/', views.PromotionUseView.as_view()),
]

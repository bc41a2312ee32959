from django.urls import path
from . import views

urlpatterns = [
    path('', views.ReviewListCreateView.as_view()),
    path('mine/', views.MyReviewsView.as_view()),
    path('<int:pk>/', views.ReviewDetailView.as_view()),
    path('<int:pk>/helpful/', views.ReviewHelpfulView.as_view()),
    path('<int:pk>/report/', views.ReviewReportView.as_view()),
]

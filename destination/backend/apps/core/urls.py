from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from . import views

urlpatterns = [
    path('signup/', views.RegisterView.as_view()),
    path('login/', views.LoginView.as_view()),
    path('logout/', views.LogoutView.as_view()),
    path('me/', views.ProfileView.as_view()),
    path('token/refresh/', TokenRefreshView.as_view()),
    path('forgot-password/', views.ForgotPasswordView.as_view()),
    path('reset-password/', views.ResetPasswordView.as_view()),
    path('notifications/', views.NotificationListView.as_view()),
    path('notifications/<int:pk>/read/', views.NotificationReadView.as_view()),
]

from django.urls import path
from . import views

urlpatterns = [
    path('', views.UploadView.as_view()),
    path('multiple/', views.MultipleUploadView.as_view()),
    path('folders/', views.FoldersView.as_view()),
    path('mine/', views.MyUploadsView.as_view()),
    path('transform/', views.TransformView.as_view()),
    path('<path:public_id>/', views.DeleteUploadView.as_view()),
]

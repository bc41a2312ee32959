from django.urls import path
from . import views

submission_urls = [
    path('', views.SubmissionListCreateView.as_view()),
    path('<int:pk>/', views.SubmissionDetailView.as_view()),
    path('<int:pk>/review/', views.SubmissionReviewView.as_view()),
    path('<int:pk>/assign/', views.SubmissionAssignView.as_view()),
]

report_urls = [
    path('', views.ReportIssueListCreateView.as_view()),
    path('mine/', views.MyReportsView.as_view()),
    path('stats/', views.ReportIssueStatsView.as_view()),
    path('<int:pk>/', views.ReportIssueDetailView.as_view()),
    path('<int:pk>/status/', views.ReportIssueStatusView.as_view()),
]

feedback_urls = [
    path('', views.FeedbackListCreateView.as_view()),
    path('stats/', views.FeedbackStatsView.as_view()),
    path('<int:pk>/', views.FeedbackDetailView.as_view()),
    path('<int:pk>/review/', views.FeedbackReviewView.as_view()),
]

contact_urls = [
    path('', views.ContactCreateView.as_view()),
]

admin_contact_urls = [
    path('', views.AdminContactListView.as_view()),
    path('<int:pk>/respond/', views.AdminContactRespondView.as_view()),
]

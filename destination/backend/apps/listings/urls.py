from django.urls import path
from . import views
from .models import Hotel, Restaurant, Attraction, Event, Sports, Travel


def listing_urls(model, list_view, detail_view):
    return [
        path('', list_view.as_view()),
        path('categories/', views.ListingCategoriesView.as_view(model=model)),
        path('<int:pk>/verify/', views.ListingVerifyView.as_view(model=model)),
        path('<str:key>/', detail_view.as_view()),
    ]


hotel_urls = listing_urls(Hotel, views.HotelListView, views.HotelDetailView)
restaurant_urls = listing_urls(Restaurant, views.RestaurantListView, views.RestaurantDetailView)
attraction_urls = listing_urls(Attraction, views.AttractionListView, views.AttractionDetailView)
event_urls = listing_urls(Event, views.EventListView, views.EventDetailView)
sports_urls = listing_urls(Sports, views.SportsListView, views.SportsDetailView)
travel_urls = [
    path('tips/', views.TravelTipListView.as_view()),
    path('tips/<int:pk>/', views.TravelTipDetailView.as_view()),
] + listing_urls(Travel, views.TravelListView, views.TravelDetailView)
emergency_urls = [
    path('', views.EmergencyContactListView.as_view()),
    path('<int:pk>/', views.EmergencyContactDetailView.as_view()),
]

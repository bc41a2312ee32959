"""
Tests for the listing catalog: browsing, geo search, submissions by owners and admin verification.
"""

from datetime import date, timedelta

import pytest

from apps.core.models import AuditLog
from apps.listings.geo import haversine_km, within_radius
from apps.listings.models import Hotel, Restaurant, Event, TravelTip, EmergencyContact

pytestmark = pytest.mark.django_db

HOTEL_PAYLOAD = {
    "name": "Salt Lake Suites", "category": "Business", "price_min": 3000, "price_max": 5000,
    "latitude": 22.58, "longitude": 88.42, "area": "Salt Lake",
}


class TestGeo:
    def test_haversine_known_distance(self):
        # Howrah Bridge to Victoria Memorial
        distance = haversine_km(22.5851, 88.3468, 22.5448, 88.3426)
        assert 4.0 < distance < 5.0

    def test_within_radius_orders_nearest_first(self, hotel):
        far = Hotel.objects.create(name="Airport Inn", category="Budget", price_min=1000,
                                   price_max=2000, status="active", latitude=22.6540, longitude=88.4467)
        results = within_radius(Hotel.objects.all(), 22.54, 88.35, 50)

        assert [h.id for h in results] == [hotel.id, far.id]
        assert results[0].distance_km < results[1].distance_km

    def test_within_radius_excludes_far_and_unlocated(self, hotel):
        Hotel.objects.create(name="No Coordinates", category="Budget", price_min=1, price_max=2,
                             status="active")
        assert within_radius(Hotel.objects.all(), 28.61, 77.20, 20) == []


class TestListingBrowse:
    def test_anonymous_sees_only_active(self, api_client, hotel):
        Hotel.objects.create(name="Pending Palace", category="Luxury", price_min=1, price_max=2)

        response = api_client.get("/api/hotels/")

        assert response.status_code == 200
        assert [h["name"] for h in response.data["results"]] == [hotel.name]
        assert response.data["pagination"]["total"] == 1

    def test_admin_can_filter_pending(self, auth_client, admin, hotel):
        Hotel.objects.create(name="Pending Palace", category="Luxury", price_min=1, price_max=2)

        response = auth_client(admin).get("/api/hotels/?status=pending")

        assert [h["name"] for h in response.data["results"]] == ["Pending Palace"]

    def test_search_and_price_filters(self, api_client, hotel):
        Hotel.objects.create(name="Budget Lodge", category="Budget", price_min=500, price_max=900,
                             status="active")

        cheap = api_client.get("/api/hotels/?max_price=1000")
        searched = api_client.get("/api/hotels/?search=hindusthan")

        assert [h["name"] for h in cheap.data["results"]] == ["Budget Lodge"]
        assert [h["name"] for h in searched.data["results"]] == [hotel.name]

    def test_amenities_filter(self, api_client, hotel):
        Hotel.objects.create(name="Plain Rooms", category="Budget", price_min=500, price_max=900,
                             status="active", amenities=["WiFi"])

        response = api_client.get("/api/hotels/?amenities=Pool")

        assert [h["name"] for h in response.data["results"]] == [hotel.name]

    def test_cuisine_filter(self, api_client, restaurant):
        Restaurant.objects.create(name="Mainland China", cuisine=["Chinese"], price_range="Mid-range",
                                  status="active")

        response = api_client.get("/api/restaurants/?cuisine=Bengali")

        assert [r["name"] for r in response.data["results"]] == [restaurant.name]

    def test_nearby_search_adds_distance(self, api_client, hotel):
        response = api_client.get("/api/hotels/?lat=22.54&lng=88.35&distance=5")

        assert response.status_code == 200
        assert response.data["results"][0]["distance_km"] < 1

    def test_bad_coordinates_rejected(self, api_client):
        response = api_client.get("/api/hotels/?lat=north&lng=88.35")

        assert response.status_code == 400

    def test_upcoming_events(self, api_client, event):
        past = date.today() - timedelta(days=30)
        Event.objects.create(name="Last Year Fair", category="Festivals", start_date=past,
                             end_date=past + timedelta(days=1), organizer={"name": "x"}, status="active")

        response = api_client.get("/api/events/?upcoming=true")

        assert [e["name"] for e in response.data["results"]] == [event.name]

    def test_categories_count_active(self, api_client, hotel):
        response = api_client.get("/api/hotels/categories/")

        counts = {c["value"]: c["count"] for c in response.data["results"]}
        assert counts["Business"] == 1
        assert counts["Luxury"] == 0


class TestListingDetail:
    def test_lookup_by_slug_counts_view(self, api_client, hotel):
        response = api_client.get(f"/api/hotels/{hotel.slug}/")

        assert response.status_code == 200
        assert response.data["id"] == hotel.id
        hotel.refresh_from_db()
        assert hotel.views == 1

    def test_owner_view_not_counted(self, auth_client, business_user):
        listing = Hotel.objects.create(name="Owner Hotel", category="Budget", price_min=1,
                                       price_max=2, status="active", created_by=business_user)

        auth_client(business_user).get(f"/api/hotels/{listing.id}/")

        listing.refresh_from_db()
        assert listing.views == 0

    def test_pending_hidden_from_public(self, api_client, auth_client, business_user):
        listing = Hotel.objects.create(name="Owner Hotel", category="Budget", price_min=1,
                                       price_max=2, created_by=business_user)

        assert api_client.get(f"/api/hotels/{listing.id}/").status_code == 404
        assert auth_client(business_user).get(f"/api/hotels/{listing.id}/").status_code == 200

    def test_unknown_is_404(self, api_client):
        assert api_client.get("/api/hotels/does-not-exist/").status_code == 404

    def test_slug_regenerated_on_rename(self, hotel):
        hotel.name = "The Hindusthan"
        hotel.save()

        assert hotel.slug == "the-hindusthan"

    def test_duplicate_names_get_unique_slugs(self, hotel):
        twin = Hotel.objects.create(name=hotel.name, category="Budget", price_min=1, price_max=2)

        assert twin.slug == f"{hotel.slug}-2"


class TestListingWrite:
    def test_anonymous_cannot_create(self, api_client):
        assert api_client.post("/api/hotels/", HOTEL_PAYLOAD, format="json").status_code == 401

    def test_moderator_cannot_create(self, auth_client, moderator):
        response = auth_client(moderator).post("/api/hotels/", HOTEL_PAYLOAD, format="json")

        assert response.status_code == 403

    def test_business_creation_is_pending(self, auth_client, business_user):
        payload = dict(HOTEL_PAYLOAD, status="active", featured=True)

        response = auth_client(business_user).post("/api/hotels/", payload, format="json")

        assert response.status_code == 201
        listing = Hotel.objects.get(pk=response.data["id"])
        assert listing.status == "pending"
        assert listing.featured is False
        assert listing.created_by == business_user
        assert AuditLog.objects.filter(action="hotel_created").exists()

    def test_admin_may_set_status(self, auth_client, admin):
        response = auth_client(admin).post("/api/hotels/", dict(HOTEL_PAYLOAD, status="active"),
                                           format="json")

        assert Hotel.objects.get(pk=response.data["id"]).status == "active"

    def test_price_range_validated(self, auth_client, admin):
        payload = dict(HOTEL_PAYLOAD, price_min=9000, price_max=1000)

        response = auth_client(admin).post("/api/hotels/", payload, format="json")

        assert response.status_code == 400
        assert "price_max" in response.data

    def test_event_dates_validated(self, auth_client, admin):
        response = auth_client(admin).post("/api/events/", {
            "name": "Backwards Fest", "category": "Festivals", "start_date": "2026-12-10",
            "end_date": "2026-12-01", "organizer": {"name": "Someone"},
        }, format="json")

        assert response.status_code == 400
        assert "end_date" in response.data

    def test_event_requires_organizer_name(self, auth_client, admin):
        response = auth_client(admin).post("/api/events/", {
            "name": "Anonymous Fest", "category": "Festivals", "start_date": "2026-12-01",
            "end_date": "2026-12-02", "organizer": {},
        }, format="json")

        assert response.status_code == 400
        assert "organizer" in response.data

    def test_restaurant_requires_cuisine(self, auth_client, admin):
        response = auth_client(admin).post("/api/restaurants/", {
            "name": "Nowhere Cafe", "price_range": "Budget", "cuisine": [],
        }, format="json")

        assert response.status_code == 400

    def test_latitude_bounds(self, auth_client, admin):
        response = auth_client(admin).post("/api/hotels/", dict(HOTEL_PAYLOAD, latitude=120),
                                           format="json")

        assert response.status_code == 400
        assert "latitude" in response.data

    def test_non_owner_cannot_edit(self, auth_client, other_customer, business_user):
        listing = Hotel.objects.create(name="Owner Hotel", category="Budget", price_min=1,
                                       price_max=2, status="active", created_by=business_user)

        response = auth_client(other_customer).patch(f"/api/hotels/{listing.id}/", {"area": "X"},
                                                     format="json")

        assert response.status_code == 403

    def test_owner_edits(self, auth_client, business_user):
        listing = Hotel.objects.create(name="Owner Hotel", category="Budget", price_min=1,
                                       price_max=2, status="active", created_by=business_user)

        response = auth_client(business_user).patch(f"/api/hotels/{listing.id}/",
                                                     {"area": "Gariahat"}, format="json")

        assert response.status_code == 200
        listing.refresh_from_db()
        assert listing.area == "Gariahat"

    def test_unowned_listing_admin_only(self, auth_client, customer, admin, hotel):
        assert auth_client(customer).delete(f"/api/hotels/{hotel.id}/").status_code == 403
        assert auth_client(admin).delete(f"/api/hotels/{hotel.id}/").status_code == 204
        assert not Hotel.objects.filter(pk=hotel.pk).exists()


class TestVerify:
    def test_admin_verifies_pending(self, auth_client, admin):
        listing = Hotel.objects.create(name="Pending Palace", category="Luxury", price_min=1,
                                       price_max=2)

        response = auth_client(admin).post(f"/api/hotels/{listing.id}/verify/", {}, format="json")

        assert response.status_code == 200
        listing.refresh_from_db()
        assert listing.status == "active"
        assert listing.verified_by == admin
        assert listing.verification_date is not None

    def test_invalid_status(self, auth_client, admin, hotel):
        response = auth_client(admin).post(f"/api/hotels/{hotel.id}/verify/", {"status": "gold"},
                                           format="json")

        assert response.status_code == 400

    def test_customer_forbidden(self, auth_client, customer, hotel):
        response = auth_client(customer).post(f"/api/hotels/{hotel.id}/verify/", {}, format="json")

        assert response.status_code == 403


class TestReferenceData:
    def test_inactive_tips_hidden(self, api_client):
        TravelTip.objects.create(title="Metro", description="Use the metro", category="transport")
        TravelTip.objects.create(title="Old", description="Stale", is_active=False)

        response = api_client.get("/api/travel/tips/")

        assert [t["title"] for t in response.data] == ["Metro"]

    def test_customer_cannot_add_tip(self, auth_client, customer):
        response = auth_client(customer).post("/api/travel/tips/", {
            "title": "x", "description": "y",
        }, format="json")

        assert response.status_code == 403

    def test_emergency_contacts_by_category(self, api_client):
        EmergencyContact.objects.create(service="Police", number="100", category="police")
        EmergencyContact.objects.create(service="Ambulance", number="108", category="medical")

        response = api_client.get("/api/emergency-contacts/?category=medical")

        assert [c["number"] for c in response.data] == ["108"]

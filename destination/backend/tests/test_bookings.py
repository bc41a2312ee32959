"""
Tests for bookings, cancellations, admin status changes and favorites.
"""

from datetime import date, timedelta
from decimal import Decimal
import smtplib
from unittest.mock import patch

import pytest
from django.core import mail
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone

from apps.bookings.models import Booking, Favorite
from apps.core.models import Notification
from apps.promotions.models import Promotion

pytestmark = pytest.mark.django_db


def hotel_booking(hotel, **extra):
    check_in = date.today() + timedelta(days=7)
    payload = {
        "item_type": "hotel", "item_id": hotel.id, "total_amount": "5000.00",
        "check_in_date": check_in.isoformat(),
        "check_out_date": (check_in + timedelta(days=2)).isoformat(),
        "number_of_guests": 2,
    }
    payload.update(extra)
    return payload


def make_booking(customer, hotel, **extra):
    fields = dict(customer=customer, item_type="hotel", item_id=hotel.id, item_name=hotel.name,
                  guest_name="Ritika", guest_email=customer.email, guest_phone="123",
                  check_in_date=date.today() + timedelta(days=3), total_amount=Decimal("4000"))
    fields.update(extra)
    return Booking.objects.create(**fields)


class TestCreateBooking:
    def test_hotel_booking_confirmed_and_emailed(self, auth_client, customer, hotel):
        response = auth_client(customer).post("/api/bookings/", hotel_booking(hotel), format="json")

        assert response.status_code == 201
        booking = Booking.objects.get(pk=response.data["id"])
        assert booking.confirmation_number.startswith("DK")
        assert len(booking.confirmation_number) == 10
        assert booking.item_name == hotel.name
        assert booking.item_location == "Bhowanipore, Kolkata"
        assert booking.guest_email == customer.email
        assert booking.guest_phone == customer.phone
        assert booking.nights == 2
        assert booking.confirmation_sent is True
        assert mail.outbox[0].to == [customer.email]
        assert booking.confirmation_number in mail.outbox[0].subject + mail.outbox[0].body
        assert Notification.objects.filter(user=customer, notif_type="booking").exists()

    def test_failed_email_leaves_confirmation_unsent(self, auth_client, customer, hotel):
        with patch.object(EmailMultiAlternatives, "send", side_effect=smtplib.SMTPException("down")):
            response = auth_client(customer).post("/api/bookings/", hotel_booking(hotel), format="json")

        assert response.status_code == 201
        assert Booking.objects.get(pk=response.data["id"]).confirmation_sent is False

    def test_hotel_requires_check_in(self, auth_client, customer, hotel):
        payload = hotel_booking(hotel)
        del payload["check_in_date"]

        response = auth_client(customer).post("/api/bookings/", payload, format="json")

        assert response.status_code == 400
        assert "check_in_date" in response.data

    def test_check_out_after_check_in(self, auth_client, customer, hotel):
        payload = hotel_booking(hotel, check_out_date=date.today().isoformat())

        response = auth_client(customer).post("/api/bookings/", payload, format="json")

        assert response.status_code == 400
        assert "check_out_date" in response.data

    def test_event_requires_event_date(self, auth_client, customer, event):
        response = auth_client(customer).post("/api/bookings/", {
            "item_type": "event", "item_id": event.id, "total_amount": "500",
        }, format="json")

        assert response.status_code == 400
        assert "event_date" in response.data

    def test_inactive_listing_rejected(self, auth_client, customer, hotel):
        hotel.status = "inactive"
        hotel.save()

        response = auth_client(customer).post("/api/bookings/", hotel_booking(hotel), format="json")

        assert response.status_code == 400
        assert "item_id" in response.data

    def test_guest_phone_required_without_profile_phone(self, auth_client, business_user, hotel):
        response = auth_client(business_user).post("/api/bookings/", hotel_booking(hotel), format="json")

        assert response.status_code == 400
        assert "guest_phone" in response.data

    def test_moderator_cannot_book(self, auth_client, moderator, hotel):
        response = auth_client(moderator).post("/api/bookings/", hotel_booking(hotel), format="json")

        assert response.status_code == 403

    def test_promo_code_applied_and_redeemed(self, auth_client, customer, hotel):
        now = timezone.now()
        promo = Promotion.objects.create(
            title="Monsoon", description="10% off", business_type="hotel", discount_percent=10,
            valid_from=now - timedelta(days=1), valid_until=now + timedelta(days=1),
            code="MONSOON10", usage_limit=5,
        )

        response = auth_client(customer).post("/api/bookings/", hotel_booking(hotel, promo_code="monsoon10"),
                                              format="json")

        assert response.status_code == 201
        booking = Booking.objects.get(pk=response.data["id"])
        assert booking.discount_amount == Decimal("500.00")
        assert booking.total_amount == Decimal("4500.00")
        assert booking.promo_code == "MONSOON10"
        promo.refresh_from_db()
        assert promo.used_count == 1

    def test_promo_for_other_business_type_rejected(self, auth_client, customer, hotel):
        now = timezone.now()
        Promotion.objects.create(
            title="Dinner", description="Flat 200", business_type="restaurant", discount_amount=200,
            valid_from=now - timedelta(days=1), valid_until=now + timedelta(days=1), code="DINE200",
        )

        response = auth_client(customer).post("/api/bookings/", hotel_booking(hotel, promo_code="DINE200"),
                                              format="json")

        assert response.status_code == 400
        assert "promo_code" in response.data


class TestBookingAccess:
    def test_list_only_own(self, auth_client, customer, other_customer, hotel):
        make_booking(customer, hotel)
        make_booking(other_customer, hotel)

        response = auth_client(customer).get("/api/bookings/")

        assert response.data["pagination"]["total"] == 1

    def test_other_customer_gets_404(self, auth_client, customer, other_customer, hotel):
        booking = make_booking(customer, hotel)

        assert auth_client(other_customer).get(f"/api/bookings/{booking.id}/").status_code == 404
        assert auth_client(customer).get(f"/api/bookings/{booking.id}/").status_code == 200

    def test_update_guest_details(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(customer).patch(f"/api/bookings/{booking.id}/",
                                               {"number_of_guests": 3}, format="json")

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.number_of_guests == 3


class TestCancel:
    def test_cancel_with_refund(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(customer).post(f"/api/bookings/{booking.id}/cancel/",
                                              {"reason": "Plans changed", "refund_amount": "1000"},
                                              format="json")

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.booking_status == "cancelled"
        assert booking.payment_status == "refunded"
        assert booking.refund_amount == Decimal("1000")
        assert booking.cancellation_date is not None
        assert len(mail.outbox) == 1

    def test_cancel_without_refund_marks_payment_failed(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        auth_client(customer).post(f"/api/bookings/{booking.id}/cancel/", {}, format="json")

        booking.refresh_from_db()
        assert booking.payment_status == "failed"

    def test_cannot_cancel_twice(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel, booking_status="cancelled")

        response = auth_client(customer).post(f"/api/bookings/{booking.id}/cancel/", {}, format="json")

        assert response.status_code == 400

    def test_refund_above_total_rejected(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(customer).post(f"/api/bookings/{booking.id}/cancel/",
                                              {"refund_amount": "99999"}, format="json")

        assert response.status_code == 400

    def test_nan_refund_rejected(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(customer).post(f"/api/bookings/{booking.id}/cancel/",
                                              {"refund_amount": "NaN"}, format="json")

        assert response.status_code == 400

    def test_admin_cancel_notifies_customer(self, auth_client, admin, customer, hotel):
        booking = make_booking(customer, hotel)

        auth_client(admin).post(f"/api/bookings/{booking.id}/cancel/", {}, format="json")

        assert Notification.objects.filter(user=customer, notif_type="cancellation").exists()


class TestStatus:
    def test_admin_completes_booking(self, auth_client, admin, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(admin).post(f"/api/bookings/{booking.id}/status/",
                                           {"status": "completed"}, format="json")

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.booking_status == "completed"
        assert booking.payment_status == "completed"

    def test_customer_cannot_change_status(self, auth_client, customer, hotel):
        booking = make_booking(customer, hotel)

        response = auth_client(customer).post(f"/api/bookings/{booking.id}/status/",
                                              {"status": "completed"}, format="json")

        assert response.status_code == 403

    def test_stats(self, auth_client, admin, customer, hotel):
        make_booking(customer, hotel, booking_status="completed", total_amount=Decimal("1500"))
        make_booking(customer, hotel, booking_status="cancelled")

        response = auth_client(admin).get("/api/bookings/stats/")

        assert response.data["total"] == 2
        assert response.data["cancelled"] == 1
        assert response.data["total_revenue"] == Decimal("1500")


class TestFavorites:
    def test_add_is_idempotent(self, auth_client, customer, hotel):
        client = auth_client(customer)
        payload = {"item_type": "hotel", "item_id": hotel.id}

        first = client.post("/api/bookings/favorites/", payload, format="json")
        second = client.post("/api/bookings/favorites/", payload, format="json")

        assert first.status_code == 201
        assert second.status_code == 200
        assert Favorite.objects.filter(user=customer).count() == 1
        assert first.data["favorite"]["item_name"] == hotel.name

    def test_unknown_item(self, auth_client, customer):
        response = auth_client(customer).post("/api/bookings/favorites/",
                                              {"item_type": "hotel", "item_id": 9999}, format="json")

        assert response.status_code == 404

    def test_remove(self, auth_client, customer, hotel):
        Favorite.objects.create(user=customer, item_type="hotel", item_id=hotel.id, item_name=hotel.name)

        response = auth_client(customer).delete("/api/bookings/favorites/",
                                                {"item_type": "hotel", "item_id": hotel.id}, format="json")

        assert response.status_code == 200
        assert not Favorite.objects.exists()

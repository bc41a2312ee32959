"""
Tests for reviews: submission, moderation, listing ratings, helpful votes and reports.
"""

from decimal import Decimal

import pytest

from apps.core.models import Notification
from apps.reviews.models import Review
from conftest import make_user

pytestmark = pytest.mark.django_db


def make_review(user, listing, rating=4, status="approved", entity_type="hotel"):
    return Review.objects.create(user=user, entity_type=entity_type, entity_id=listing.id,
                                 rating=rating, comment="Lovely stay near the Maidan", status=status)


class TestSubmitReview:
    def test_review_is_pending(self, auth_client, customer, hotel):
        response = auth_client(customer).post("/api/reviews/", {
            "entity_type": "hotel", "entity_id": hotel.id, "rating": 5, "comment": " Great food ",
        }, format="json")

        assert response.status_code == 201
        assert response.data["review"]["status"] == "pending"
        review = Review.objects.get()
        assert review.comment == "Great food"
        assert review.author_email == customer.email

    def test_one_review_per_listing(self, auth_client, customer, hotel):
        make_review(customer, hotel)

        response = auth_client(customer).post("/api/reviews/", {
            "entity_type": "hotel", "entity_id": hotel.id, "rating": 3, "comment": "Again",
        }, format="json")

        assert response.status_code == 400

    def test_missing_listing(self, auth_client, customer):
        response = auth_client(customer).post("/api/reviews/", {
            "entity_type": "hotel", "entity_id": 424242, "rating": 3, "comment": "Ghost",
        }, format="json")

        assert response.status_code == 400
        assert "entity_id" in response.data

    def test_rating_range(self, auth_client, customer, hotel):
        response = auth_client(customer).post("/api/reviews/", {
            "entity_type": "hotel", "entity_id": hotel.id, "rating": 6, "comment": "Too good",
        }, format="json")

        assert response.status_code == 400

    def test_anonymous_rejected(self, api_client, hotel):
        response = api_client.post("/api/reviews/", {
            "entity_type": "hotel", "entity_id": hotel.id, "rating": 5, "comment": "Hi",
        }, format="json")

        assert response.status_code == 401


class TestListReviews:
    def test_requires_entity(self, api_client):
        assert api_client.get("/api/reviews/").status_code == 400

    def test_public_sees_approved_with_stats(self, api_client, customer, other_customer, hotel):
        make_review(customer, hotel, rating=5)
        make_review(other_customer, hotel, rating=2, status="pending")

        response = api_client.get(f"/api/reviews/?entity_type=hotel&entity_id={hotel.id}")

        assert response.status_code == 200
        assert len(response.data["results"]) == 1
        assert response.data["stats"]["total_reviews"] == 1
        assert response.data["stats"]["average_rating"] == 5.0
        assert response.data["stats"]["rating_distribution"]["5"] == 1

    def test_moderator_sees_pending(self, auth_client, moderator, customer, hotel):
        make_review(customer, hotel, status="pending")

        response = auth_client(moderator).get(
            f"/api/reviews/?entity_type=hotel&entity_id={hotel.id}&status=pending")

        assert len(response.data["results"]) == 1

    def test_pending_detail_hidden_from_others(self, api_client, auth_client, customer, hotel):
        review = make_review(customer, hotel, status="pending")

        assert api_client.get(f"/api/reviews/{review.id}/").status_code == 404
        assert auth_client(customer).get(f"/api/reviews/{review.id}/").status_code == 200

    def test_rating_filter(self, api_client, customer, other_customer, hotel):
        make_review(customer, hotel, rating=5)
        make_review(other_customer, hotel, rating=2)
        base = f"/api/reviews/?entity_type=hotel&entity_id={hotel.id}"

        response = api_client.get(base + "&rating=2")

        assert [r["rating"] for r in response.data["results"]] == [2]
        assert api_client.get(base + "&rating=x").status_code == 400
        assert api_client.get(base + "&rating=9").status_code == 400


class TestModeration:
    def test_approve_updates_listing_rating(self, auth_client, moderator, customer, other_customer, hotel):
        first = make_review(customer, hotel, rating=5, status="pending")
        second = make_review(other_customer, hotel, rating=4, status="pending")

        response = auth_client(moderator).patch("/api/admin/reviews/", {
            "review_ids": [first.id, second.id], "action": "approve",
        }, format="json")

        assert response.status_code == 200
        assert response.data["updated"] == 2
        hotel.refresh_from_db()
        assert hotel.rating_average == Decimal("4.5")
        assert hotel.rating_count == 2
        first.refresh_from_db()
        assert first.moderated_by == moderator
        assert Notification.objects.filter(user=customer, notif_type="review").exists()

    def test_reject_removes_from_rating(self, auth_client, admin, customer, hotel):
        review = make_review(customer, hotel, rating=1)
        Review.refresh_listing_rating("hotel", hotel.id)

        auth_client(admin).patch("/api/admin/reviews/", {
            "review_ids": [review.id], "action": "reject",
        }, format="json")

        hotel.refresh_from_db()
        assert hotel.rating_count == 0
        assert hotel.rating_average == Decimal("0")

    def test_invalid_action(self, auth_client, moderator, customer, hotel):
        review = make_review(customer, hotel, status="pending")

        response = auth_client(moderator).patch("/api/admin/reviews/", {
            "review_ids": [review.id], "action": "delete",
        }, format="json")

        assert response.status_code == 400

    def test_non_integer_ids(self, auth_client, moderator):
        response = auth_client(moderator).patch("/api/admin/reviews/", {
            "review_ids": ["abc"], "action": "approve",
        }, format="json")

        assert response.status_code == 400
        assert response.data["error"] == "review_ids must be integers"

    def test_customer_cannot_moderate(self, auth_client, customer):
        response = auth_client(customer).patch("/api/admin/reviews/", {
            "review_ids": [1], "action": "approve",
        }, format="json")

        assert response.status_code == 403


class TestEditAndDelete:
    def test_edit_returns_to_pending(self, auth_client, customer, hotel):
        review = make_review(customer, hotel)
        Review.refresh_listing_rating("hotel", hotel.id)

        response = auth_client(customer).patch(f"/api/reviews/{review.id}/", {"rating": 2},
                                               format="json")

        assert response.status_code == 200
        review.refresh_from_db()
        assert review.status == "pending"
        assert review.is_edited
        hotel.refresh_from_db()
        assert hotel.rating_count == 0

    def test_cannot_edit_others(self, auth_client, customer, other_customer, hotel):
        review = make_review(customer, hotel)

        response = auth_client(other_customer).patch(f"/api/reviews/{review.id}/", {"rating": 1},
                                                     format="json")

        assert response.status_code == 403

    def test_moderator_deletes(self, auth_client, moderator, customer, hotel):
        review = make_review(customer, hotel)

        response = auth_client(moderator).delete(f"/api/reviews/{review.id}/")

        assert response.status_code == 200
        assert not Review.objects.exists()


class TestVotesAndReports:
    def test_helpful_toggles(self, auth_client, customer, other_customer, hotel):
        review = make_review(customer, hotel)
        client = auth_client(other_customer)

        on = client.post(f"/api/reviews/{review.id}/helpful/")
        off = client.post(f"/api/reviews/{review.id}/helpful/")

        assert (on.data["helpful"], on.data["helpful_count"]) == (True, 1)
        assert (off.data["helpful"], off.data["helpful_count"]) == (False, 0)

    def test_helpful_on_pending_is_404(self, auth_client, customer, other_customer, hotel):
        review = make_review(customer, hotel, status="pending")

        assert auth_client(other_customer).post(f"/api/reviews/{review.id}/helpful/").status_code == 404

    def test_report_once(self, auth_client, customer, hotel):
        review = make_review(customer, hotel)
        reporter = auth_client(make_user("reporter@example.com"))

        first = reporter.post(f"/api/reviews/{review.id}/report/", {"reason": "Spam"}, format="json")
        again = reporter.post(f"/api/reviews/{review.id}/report/", {"reason": "Spam"}, format="json")

        assert first.status_code == 201
        assert again.status_code == 400

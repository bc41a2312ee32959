"""
Tests for the moderation workflows: submissions, issue reports, feedback and contact messages.
"""

from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from apps.core.models import Notification
from apps.listings.models import Hotel
from apps.mailer.models import EmailHistory
from apps.moderation.models import Submission, ReportIssue, Feedback, ContactMessage
from apps.promotions.models import Promotion

pytestmark = pytest.mark.django_db

HOTEL_DATA = {"category": "Boutique", "price_min": 2000, "price_max": 4000, "area": "Kalighat"}


def make_submission(user, **extra):
    fields = dict(user=user, type="hotel", title="Kalighat Guest House",
                  description="Small family run guest house", data=HOTEL_DATA)
    fields.update(extra)
    return Submission.objects.create(**fields)


class TestSubmissions:
    def test_create_notifies_admin_and_moderators(self, auth_client, customer, moderator):
        response = auth_client(customer).post("/api/submissions/", {
            "type": "hotel", "title": "Kalighat Guest House", "data": HOTEL_DATA,
        }, format="json")

        assert response.status_code == 201
        assert response.data["submission"]["status"] == "pending"
        assert EmailHistory.objects.filter(workflow_type="submission_admin_notification").exists()
        assert Notification.objects.filter(user=moderator, notif_type="submission").exists()

    def test_data_must_be_object(self, auth_client, customer):
        response = auth_client(customer).post("/api/submissions/", {
            "type": "hotel", "title": "Broken", "data": ["not", "a", "dict"],
        }, format="json")

        assert response.status_code == 400

    def test_customers_see_only_their_own(self, auth_client, customer, other_customer):
        make_submission(customer)
        make_submission(other_customer)

        response = auth_client(customer).get("/api/submissions/")

        assert response.data["pagination"]["total"] == 1

    def test_other_user_denied(self, auth_client, customer, other_customer):
        submission = make_submission(customer)

        assert auth_client(other_customer).get(f"/api/submissions/{submission.id}/").status_code == 403

    def test_approve_publishes_listing(self, auth_client, moderator, customer):
        submission = make_submission(customer)

        response = auth_client(moderator).post(f"/api/submissions/{submission.id}/review/",
                                               {"status": "approved", "admin_notes": "Looks good"},
                                               format="json")

        assert response.status_code == 200
        submission.refresh_from_db()
        hotel = Hotel.objects.get(pk=submission.published_id)
        assert hotel.status == "active"
        assert hotel.created_by == customer
        assert hotel.verified_by == moderator
        assert hotel.source == "submission"
        assert submission.reviewed_by == moderator
        assert mail.outbox[-1].to == [customer.email]

    def test_approve_update_submission(self, auth_client, moderator, customer, hotel):
        submission = make_submission(customer, resource_id=hotel.id, data={"area": "Esplanade"})

        auth_client(moderator).post(f"/api/submissions/{submission.id}/review/",
                                    {"status": "approved"}, format="json")

        hotel.refresh_from_db()
        assert hotel.area == "Esplanade"

    def test_approve_promotion(self, auth_client, admin, business_user):
        now = timezone.now()
        submission = make_submission(business_user, type="promotion", title="Pujo Offer",
                                     description="15% off", data={
                                         "business_type": "restaurant", "discount_percent": "15",
                                         "valid_from": now.isoformat(),
                                         "valid_until": (now + timedelta(days=10)).isoformat(),
                                     })

        response = auth_client(admin).post(f"/api/submissions/{submission.id}/review/",
                                           {"status": "approved"}, format="json")

        assert response.status_code == 200
        promo = Promotion.objects.get()
        assert promo.title == "Pujo Offer"
        assert promo.created_by == business_user

    def test_invalid_data_blocks_approval(self, auth_client, moderator, customer):
        submission = make_submission(customer, data={"category": "Castle"})

        response = auth_client(moderator).post(f"/api/submissions/{submission.id}/review/",
                                               {"status": "approved"}, format="json")

        assert response.status_code == 400
        assert "details" in response.data
        submission.refresh_from_db()
        assert submission.status == "pending"
        assert not Hotel.objects.exists()

    def test_reject_emails_submitter(self, auth_client, moderator, customer):
        submission = make_submission(customer)

        auth_client(moderator).post(f"/api/submissions/{submission.id}/review/",
                                    {"status": "rejected", "admin_notes": "Duplicate"}, format="json")

        submission.refresh_from_db()
        assert submission.status == "rejected"
        assert EmailHistory.objects.filter(workflow_type="submission_rejection",
                                           recipient=customer.email).exists()

    def test_cannot_review_twice_after_approval(self, auth_client, moderator, customer):
        submission = make_submission(customer, status="approved")

        response = auth_client(moderator).post(f"/api/submissions/{submission.id}/review/",
                                               {"status": "rejected"}, format="json")

        assert response.status_code == 400

    def test_customer_cannot_review(self, auth_client, customer):
        submission = make_submission(customer)

        response = auth_client(customer).post(f"/api/submissions/{submission.id}/review/",
                                              {"status": "approved"}, format="json")

        assert response.status_code == 403

    def test_assign_to_moderator(self, auth_client, admin, moderator, customer):
        submission = make_submission(customer)

        response = auth_client(admin).post(f"/api/submissions/{submission.id}/assign/",
                                           {"assignee_id": moderator.id}, format="json")

        assert response.status_code == 200
        submission.refresh_from_db()
        assert submission.assigned_to == moderator
        assert submission.status == "in_review"
        assert EmailHistory.objects.filter(workflow_type="resource_assignment").exists()

    def test_assign_to_customer_rejected(self, auth_client, admin, customer, other_customer):
        submission = make_submission(customer)

        response = auth_client(admin).post(f"/api/submissions/{submission.id}/assign/",
                                           {"assignee_id": other_customer.id}, format="json")

        assert response.status_code == 400


class TestIssueReports:
    def test_duplicate_open_report(self, auth_client, customer):
        client = auth_client(customer)
        payload = {"item_type": "listing", "item_id": "12", "reason": "Closed down"}

        assert client.post("/api/report/", payload, format="json").status_code == 201
        assert client.post("/api/report/", payload, format="json").status_code == 400

    def test_invalid_severity_defaults_to_medium(self, auth_client, customer):
        auth_client(customer).post("/api/report/", {
            "item_type": "review", "item_id": "3", "reason": "Spam", "severity": "apocalyptic",
        }, format="json")

        assert ReportIssue.objects.get().severity == "medium"

    def test_critical_report_alerts_admin(self, auth_client, customer):
        auth_client(customer).post("/api/report/", {
            "item_type": "user", "item_id": "9", "reason": "Fraud", "severity": "critical",
        }, format="json")

        assert EmailHistory.objects.filter(workflow_type="admin_alert").exists()

    def test_list_is_admin_only(self, auth_client, customer, admin):
        assert auth_client(customer).get("/api/report/").status_code == 403
        assert auth_client(admin).get("/api/report/").status_code == 200

    def test_severity_sort(self, auth_client, admin, customer):
        ReportIssue.objects.create(user=customer, item_type="listing", item_id="1", reason="a",
                                   severity="low")
        ReportIssue.objects.create(user=customer, item_type="listing", item_id="2", reason="b",
                                   severity="critical")

        response = auth_client(admin).get("/api/report/?sort=severity")

        assert [r["severity"] for r in response.data["results"]] == ["critical", "low"]
        assert response.data["breakdown"]["severity"] == {"low": 1, "critical": 1}

    def test_resolve_sets_timestamp_and_notifies(self, auth_client, admin, customer):
        report = ReportIssue.objects.create(user=customer, item_type="listing", item_id="1", reason="a")

        response = auth_client(admin).post(f"/api/report/{report.id}/status/",
                                           {"status": "resolved", "action_taken": "Removed"},
                                           format="json")

        assert response.status_code == 200
        report.refresh_from_db()
        assert report.resolved_at is not None
        assert report.admin == admin
        assert Notification.objects.filter(user=customer, notif_type="report").exists()

    def test_admin_view_is_tracked(self, auth_client, admin, customer):
        report = ReportIssue.objects.create(user=customer, item_type="listing", item_id="1", reason="a")

        auth_client(admin).get(f"/api/report/{report.id}/")

        report.refresh_from_db()
        assert report.view_count == 1
        assert report.viewed_by == admin


class TestFeedback:
    def test_anonymous_feedback(self, api_client):
        response = api_client.post("/api/feedback/", {
            "type": "BUG", "message": "Map does not load", "rating": 3,
        }, format="json")

        assert response.status_code == 201
        feedback = Feedback.objects.get()
        assert feedback.type == "bug"
        assert feedback.user is None

    def test_rating_bounds(self, api_client):
        response = api_client.post("/api/feedback/", {"message": "Hmm", "rating": 9}, format="json")

        assert response.status_code == 400

    def test_stats(self, auth_client, admin):
        Feedback.objects.create(message="a", rating=4)
        Feedback.objects.create(message="b", rating=2, type="bug")

        response = auth_client(admin).get("/api/feedback/stats/")

        assert response.data["total"] == 2
        assert response.data["average_rating"] == 3.0
        assert response.data["by_type"] == {"general": 1, "bug": 1}

    def test_review_feedback(self, auth_client, admin):
        feedback = Feedback.objects.create(message="Add dark mode")

        response = auth_client(admin).post(f"/api/feedback/{feedback.id}/review/",
                                           {"status": "implemented", "priority": "high"}, format="json")

        assert response.status_code == 200
        feedback.refresh_from_db()
        assert (feedback.status, feedback.priority) == ("implemented", "high")


class TestContact:
    def test_contact_and_admin_response(self, api_client, auth_client, admin):
        created = api_client.post("/api/contact/", {
            "first_name": "Amit", "email": "amit@example.com", "subject": "Partnership",
            "message": "We run heritage walks", "category": "partnership",
        }, format="json")

        assert created.status_code == 201
        response = auth_client(admin).post(f"/api/admin/contact/{created.data['id']}/respond/",
                                           {"response": "Let's talk"}, format="json")

        assert response.status_code == 200
        assert response.data["email_sent"] is True
        message = ContactMessage.objects.get()
        assert message.status == "resolved"
        assert mail.outbox[-1].to == ["amit@example.com"]

    def test_response_required(self, auth_client, admin):
        message = ContactMessage.objects.create(first_name="A", email="a@example.com", subject="s",
                                                message="m")

        response = auth_client(admin).post(f"/api/admin/contact/{message.id}/respond/", {},
                                           format="json")

        assert response.status_code == 400

    def test_contact_list_admin_only(self, auth_client, customer):
        assert auth_client(customer).get("/api/admin/contact/").status_code == 403

"""
Shared fixtures: users per role, authenticated API clients and sample listings.
"""

from datetime import date, timedelta

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.core.models import User
from apps.listings.models import Hotel, Restaurant, Event


def make_user(email, role=User.ROLE_CUSTOMER, password="password123", **extra):
    extra.setdefault("first_name", email.split("@")[0].title())
    return User.objects.create_user(username=email, email=email, password=password, role=role, **extra)


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    """Factory returning an APIClient authenticated as the given user."""

    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def customer(db):
    return make_user("ritika@example.com", phone="+91-9830000001")


@pytest.fixture
def other_customer(db):
    return make_user("arjun@example.com", phone="+91-9830000002")


@pytest.fixture
def business_user(db):
    return make_user("owner@example.com", role=User.ROLE_BUSINESS, business_name="Owner Hospitality")


@pytest.fixture
def moderator(db):
    return make_user("mod@example.com", role=User.ROLE_MODERATOR)


@pytest.fixture
def admin(db):
    return make_user("admin@example.com", role=User.ROLE_ADMIN)


@pytest.fixture
def hotel(db):
    return Hotel.objects.create(
        name="Hotel Hindusthan International", category="Business", price_min=2500,
        price_max=6000, status="active", latitude=22.5396, longitude=88.3520,
        area="Bhowanipore", amenities=["WiFi", "Pool"],
    )


@pytest.fixture
def restaurant(db):
    return Restaurant.objects.create(
        name="Bhojohori Manna", cuisine=["Bengali"], price_range="Mid-range", status="active",
        latitude=22.5180, longitude=88.3650, area="Ballygunge",
    )


@pytest.fixture
def event(db):
    start = date.today() + timedelta(days=10)
    return Event.objects.create(
        name="Durga Puja Heritage Walk", category="Cultural", start_date=start,
        end_date=start + timedelta(days=2), organizer={"name": "Calcutta Walks"}, status="active",
    )

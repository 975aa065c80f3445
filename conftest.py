"""
Shared pytest fixtures.

Run with: python -m pytest -v
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from applications.models import Application
from offers.models import Offer
from users.models import CompanyProfile, CreatorProfile

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_creator(db):
    def make(email="creator@example.com", youtube_url="https://youtube.com/@creator", **extra):
        user = User.objects.create_user(email=email, password="Str0ng-pass!", role=User.Role.CREATOR, **extra)
        CreatorProfile.objects.create(user=user, youtube_url=youtube_url, niches=["tech"])
        return user
    return make


@pytest.fixture
def make_company(db):
    def make(email="brand@example.com", status=CompanyProfile.Status.APPROVED, **profile):
        user = User.objects.create_user(email=email, password="Str0ng-pass!", role=User.Role.COMPANY)
        profile.setdefault("legal_name", "Acme Holdings Inc.")
        profile.setdefault("trade_name", "Acme")
        CompanyProfile.objects.create(user=user, status=status, **profile)
        return user
    return make


@pytest.fixture
def creator(make_creator):
    return make_creator()


@pytest.fixture
def company_user(make_company):
    return make_company()


@pytest.fixture
def company(company_user):
    return company_user.company_profile


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@example.com", password="Str0ng-pass!", role=User.Role.ADMIN, is_staff=True,
    )


@pytest.fixture
def make_offer(company):
    def make(**fields):
        fields.setdefault("title", "Acme Smart Lamp")
        fields.setdefault("product_name", "Smart Lamp")
        fields.setdefault("short_description", "A lamp that follows your schedule")
        fields.setdefault("full_description", "Wi-Fi lamp with scheduling and voice control.")
        fields.setdefault("primary_niche", "tech")
        fields.setdefault("product_url", "https://acme.example.com/lamp")
        fields.setdefault("commission_type", Offer.CommissionType.PER_SALE)
        fields.setdefault("commission_percentage", Decimal("10.00"))
        fields.setdefault("status", Offer.Status.APPROVED)
        return Offer.objects.create(company=fields.pop("company", company), **fields)
    return make


@pytest.fixture
def offer(make_offer):
    return make_offer()


@pytest.fixture
def application(creator, offer):
    return Application.objects.create(creator=creator, offer=offer)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """``client_for(user)`` returns an APIClient authenticated as ``user``."""
    def make(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return make

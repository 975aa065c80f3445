"""
Tests for the shared exception, repository, service and middleware layers

Run with: python -m pytest core/tests -v
"""

import json
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.http import HttpResponse
from django.test import RequestFactory
from rest_framework.exceptions import NotAuthenticated

from affiliatexchange.config import AppConfig, PlatformConfig, SecurityConfig
from affiliatexchange.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    affiliatexchange_exception_handler,
)
from core.config import validate_config_on_startup
from core.http import get_client_ip
from core.services import BaseService
from offers.models import Niche
from offers.repositories import niche_repo


@pytest.fixture
def rf():
    return RequestFactory()


class TestExceptionHandler:

    def test_application_error_is_rendered(self):
        response = affiliatexchange_exception_handler(ValidationError("Bad input", field="title"), {})
        assert response.status_code == 400
        assert response.data == {"error": "validation_error", "message": "Bad input", "detail": {"field": "title"}}

    def test_conflict_carries_resource(self):
        response = affiliatexchange_exception_handler(ConflictError("Already applied", resource="application"), {})
        assert response.status_code == 409
        assert response.data["detail"] == {"resource": "application"}

    def test_drf_errors_fall_through(self):
        response = affiliatexchange_exception_handler(NotAuthenticated(), {})
        assert response.status_code == 401

    def test_unknown_errors_are_left_to_django(self):
        assert affiliatexchange_exception_handler(RuntimeError("boom"), {"view": None}) is None

    def test_default_message_and_empty_context(self):
        error = ConflictError()
        assert error.to_dict() == {"error": "conflict", "message": "Resource conflict"}

    def test_configuration_error_is_a_server_error(self):
        response = affiliatexchange_exception_handler(ConfigurationError(setting="GOOGLE_CLIENT_ID"), {})
        assert response.status_code == 500
        assert response.data["detail"] == {"setting": "GOOGLE_CLIENT_ID"}


@pytest.mark.django_db
class TestBaseRepository:

    def test_get_by_id_raises_not_found(self):
        with pytest.raises(NotFoundError) as excinfo:
            niche_repo.get_by_id(999)
        assert excinfo.value.details["resource"] == "niche"

    def test_garbage_id_is_not_found(self):
        assert niche_repo.get_by_id_or_none("abc") is None
        with pytest.raises(NotFoundError):
            niche_repo.get_by_id("abc")

    def test_update_and_increment(self):
        niche = niche_repo.create(name="Fitness")
        niche = niche_repo.update(niche, description="Workouts and gear")
        assert Niche.objects.get(pk=niche.pk).description == "Workouts and gear"
        assert niche_repo.count(name="Fitness") == 1
        assert niche_repo.get_or_create(name="Fitness")[1] is False


class TestBaseService:

    def test_subclasses_get_their_own_logger(self):
        class LampService(BaseService):
            pass

        assert LampService.logger.name == __name__

    def test_ensure_owner(self):
        owner = SimpleNamespace(id=1, is_admin=False)
        stranger = SimpleNamespace(id=2, is_admin=False)
        admin = SimpleNamespace(id=3, is_admin=True)
        BaseService.ensure_owner(1, owner)
        BaseService.ensure_owner(1, admin)
        with pytest.raises(AuthorizationError):
            BaseService.ensure_owner(1, stranger)


class TestMiddleware:

    def test_client_ip_prefers_forwarded_for(self, rf):
        request = rf.get("/", HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1", REMOTE_ADDR="10.0.0.2")
        assert get_client_ip(request) == "203.0.113.9"
        assert get_client_ip(rf.get("/", REMOTE_ADDR="10.0.0.2")) == "10.0.0.2"

    def test_security_headers(self, rf):
        response = SecurityHeadersMiddleware(lambda request: HttpResponse("ok"))(rf.get("/api/v1/"))
        assert response["X-Frame-Options"] == "DENY"
        assert response["X-Content-Type-Options"] == "nosniff"
        assert "frame-ancestors 'none'" in response["Content-Security-Policy"]

    def test_rate_limit_on_login(self, rf):
        middleware = RateLimitMiddleware(lambda request: HttpResponse("ok"))
        statuses = [
            middleware(rf.post("/api/v1/auth/login/", REMOTE_ADDR="198.51.100.7")).status_code
            for _ in range(11)
        ]
        assert statuses[:10] == [200] * 10
        assert statuses[10] == 429

    def test_rate_limited_body(self, rf):
        middleware = RateLimitMiddleware(lambda request: HttpResponse("ok"))
        for _ in range(5):
            middleware(rf.post("/api/v1/auth/register/", REMOTE_ADDR="198.51.100.8"))
        response = middleware(rf.post("/api/v1/auth/register/", REMOTE_ADDR="198.51.100.8"))
        assert json.loads(response.content)["error"] == "rate_limit"

    def test_rate_limit_ignores_other_paths(self, rf):
        middleware = RateLimitMiddleware(lambda request: HttpResponse("ok"))
        for _ in range(20):
            assert middleware(rf.get("/api/v1/offers/", REMOTE_ADDR="198.51.100.7")).status_code == 200


class TestStartupValidation:

    @pytest.fixture
    def production(self):
        return AppConfig(
            environment="production",
            debug=True,
            security=SecurityConfig(secret_key="short"),
            platform=PlatformConfig(default_platform_fee=Decimal("0.9")),
        )

    def test_production_issues(self, production):
        critical = [issue.message for issue in production.validate() if issue.is_critical]
        assert any("SECRET_KEY" in message for message in critical)
        assert any("DEFAULT_PLATFORM_FEE" in message for message in critical)

    def test_defaults_have_no_critical_issues(self):
        issues = AppConfig(environment="development", platform=PlatformConfig()).validate()
        assert not [issue for issue in issues if issue.is_critical]

    def test_production_refuses_to_start(self, production):
        with mock.patch("core.config.validators.config", production):
            with pytest.raises(ImproperlyConfigured) as excinfo:
                validate_config_on_startup()
        assert "in-memory layer" in str(excinfo.value)

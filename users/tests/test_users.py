"""
Tests for accounts, onboarding and website verification

Run with: python -m pytest users/tests -v
"""

from types import SimpleNamespace
from unittest import mock

import pytest
import requests
from django.contrib.auth import get_user_model
from django.core import mail

from core.exceptions import AuthenticationError, ConfigurationError, ConflictError, ServiceError, ValidationError
from users.models import CompanyProfile
from users.oauth import GoogleOAuth
from users.services import OnboardingService, UserService, WebsiteVerificationService

User = get_user_model()

PASSWORD = "Str0ng-pass!"


@pytest.mark.django_db
class TestUserService:

    def test_register_creates_role_profile(self):
        user = UserService.register("new@example.com", PASSWORD, User.Role.COMPANY)
        assert user.username == "new"
        assert user.company_profile.status == CompanyProfile.Status.PENDING

    def test_register_rejects_admin_role(self):
        with pytest.raises(ValidationError):
            UserService.register("root@example.com", PASSWORD, User.Role.ADMIN)

    def test_duplicate_email(self, creator):
        with pytest.raises(ConflictError):
            UserService.register(creator.email, PASSWORD, User.Role.CREATOR)

    def test_username_gets_suffix(self):
        UserService.register("sam@example.com", PASSWORD, User.Role.CREATOR)
        second = UserService.register("sam@other.example.com", PASSWORD, User.Role.CREATOR)
        assert second.username == "sam2"

    def test_banned_user_cannot_login(self, creator):
        creator.account_status = User.AccountStatus.BANNED
        creator.save()
        with pytest.raises(AuthenticationError):
            UserService.login(creator.email, PASSWORD)

    def test_oauth_links_existing_account(self, creator):
        user, created = UserService.authenticate_oauth({"email": creator.email, "uid": "g-123"})
        assert created is False
        assert user.pk == creator.pk
        creator.refresh_from_db()
        assert creator.google_id == "g-123"

    def test_oauth_creates_verified_account(self):
        user, created = UserService.authenticate_oauth(
            {"email": "fresh@example.com", "uid": "g-9", "first_name": "Fresh"}, role=User.Role.COMPANY,
        )
        assert created is True
        assert user.email_verified is True
        assert user.role == User.Role.COMPANY
        assert not user.has_usable_password()

    def test_password_reset_round_trip(self, creator):
        uid, token = UserService.make_token(creator)
        UserService.reset_password(uid, token, "An0ther-pass!")
        creator.refresh_from_db()
        assert creator.check_password("An0ther-pass!")
        with pytest.raises(ValidationError):
            UserService.reset_password(uid, token, "Th1rd-pass!")

    def test_reset_for_unknown_email_is_silent(self):
        UserService.request_password_reset("nobody@example.com")
        assert mail.outbox == []

    def test_reset_email_carries_the_link(self, creator):
        UserService.request_password_reset(creator.email)
        assert len(mail.outbox) == 1
        email = mail.outbox[0]
        assert email.subject == "AffiliateXchange: Reset your password"
        assert "/reset-password?uid=" in email.body
        assert "notification settings" not in email.body


@pytest.mark.django_db
class TestOnboarding:

    def test_creator_steps(self, make_creator):
        user = make_creator(email="steps@example.com", youtube_url="")
        status = OnboardingService.status(user)
        assert status["missing"] == ["platforms", "bio"]

        OnboardingService.save_creator_step(user, "platforms", {"tiktok_url": "https://tiktok.com/@me",
                                                                "tiktok_followers": "1200"})
        OnboardingService.save_creator_step(user, "bio", {"bio": "I review desk gadgets every week."})
        user.creator_profile.refresh_from_db()
        assert user.creator_profile.tiktok_followers == 1200
        assert OnboardingService.status(user)["completed"] is True

    def test_platform_step_needs_a_url(self, creator):
        with pytest.raises(ValidationError):
            OnboardingService.save_creator_step(creator, "platforms", {"youtube_url": " "})

    def test_negative_followers(self, creator):
        with pytest.raises(ValidationError):
            OnboardingService.save_creator_step(
                creator, "platforms", {"youtube_url": "https://youtube.com/@c", "youtube_followers": -3},
            )

    @pytest.mark.parametrize("url", ["x", 5, ["https://youtube.com/@c"]])
    def test_platform_links_must_be_urls(self, make_creator, url):
        user = make_creator(email="badlink@example.com", youtube_url="")
        with pytest.raises(ValidationError) as excinfo:
            OnboardingService.save_creator_step(user, "platforms", {"youtube_url": url})
        assert excinfo.value.details["field"] == "youtube_url"
        user.creator_profile.refresh_from_db()
        assert user.creator_profile.youtube_url == ""

    def test_platform_step_endpoint_rejects_bad_link(self, client_for, make_creator):
        user = make_creator(email="badlink@example.com", youtube_url="")
        response = client_for(user).post(
            "/api/v1/onboarding/creator/platforms/", {"tiktok_url": 12}, format="json",
        )
        assert response.status_code == 400
        assert response.data["detail"]["field"] == "tiktok_url"

    def test_company_step_lists_missing_fields(self, company_user):
        with pytest.raises(ValidationError) as excinfo:
            OnboardingService.save_company_step(company_user, "contact", {"contact_name": "Dana"})
        assert excinfo.value.details["fields"] == ["description"]

    def test_unknown_step(self, creator):
        with pytest.raises(ValidationError):
            OnboardingService.save_creator_step(creator, "payments", {})


@pytest.mark.django_db
class TestWebsiteVerification:

    @pytest.fixture
    def with_site(self, company):
        company.website_url = "https://acme.example.com"
        company.save()
        return company

    def test_meta_tag_verifies(self, with_site, company_user):
        token = WebsiteVerificationService.request_token(company_user)["token"]
        page = mock.Mock(status_code=200, text=f'<head><meta content="{token}" name="affiliatexchange-verification"></head>')
        with mock.patch("users.services.requests.get", return_value=page):
            profile = WebsiteVerificationService.verify(company_user)
        assert profile.website_verified is True
        assert profile.website_verification_method == CompanyProfile.VerificationMethod.META_TAG

    def test_missing_tag(self, with_site, company_user):
        WebsiteVerificationService.request_token(company_user)
        page = mock.Mock(status_code=200, text="<head></head>")
        with mock.patch("users.services.requests.get", return_value=page):
            with pytest.raises(ValidationError):
                WebsiteVerificationService.verify(company_user)

    def test_unreachable_site(self, with_site, company_user):
        WebsiteVerificationService.request_token(company_user)
        with mock.patch("users.services.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(ServiceError):
                WebsiteVerificationService.verify(company_user)

    def test_dns_txt_unsupported(self, with_site, company_user):
        WebsiteVerificationService.request_token(company_user)
        with pytest.raises(ValidationError):
            WebsiteVerificationService.verify(company_user, CompanyProfile.VerificationMethod.DNS_TXT)


@pytest.mark.django_db
class TestAuthAPI:

    def test_register_returns_tokens_and_sends_verification(self, api_client):
        response = api_client.post("/api/v1/auth/register/", {
            "email": "newbie@example.com", "password": PASSWORD, "password_confirm": PASSWORD, "role": "creator",
        }, format="json")
        assert response.status_code == 201
        assert set(response.data["tokens"]) == {"access", "refresh"}
        assert response.data["user"]["role"] == "creator"
        assert len(mail.outbox) == 1
        assert "verify-email?uid=" in mail.outbox[0].alternatives[0][0]

    def test_register_password_mismatch(self, api_client):
        response = api_client.post("/api/v1/auth/register/", {
            "email": "newbie@example.com", "password": PASSWORD, "password_confirm": "nope", "role": "creator",
        }, format="json")
        assert response.status_code == 400

    def test_login(self, api_client, creator):
        response = api_client.post("/api/v1/auth/login/", {"email": creator.email, "password": PASSWORD}, format="json")
        assert response.status_code == 200
        assert response.data["user"]["id"] == creator.id

    def test_login_wrong_password(self, api_client, creator):
        response = api_client.post("/api/v1/auth/login/", {"email": creator.email, "password": "wrong"}, format="json")
        assert response.status_code == 401

    def test_profile_patch_updates_role_profile(self, client_for, creator):
        response = client_for(creator).patch("/api/v1/auth/profile/", {
            "first_name": "Casey", "profile": {"bio": "Tech reviews", "niches": ["tech", " audio "]},
        }, format="json")
        assert response.status_code == 200
        assert response.data["first_name"] == "Casey"
        assert response.data["creator_profile"]["niches"] == ["tech", "audio"]

    def test_verify_email(self, api_client, creator):
        uid, token = UserService.make_token(creator)
        response = api_client.post("/api/v1/auth/verify-email/", {"uid": uid, "token": token}, format="json")
        assert response.status_code == 200
        creator.refresh_from_db()
        assert creator.email_verified is True

    def test_onboarding_status_endpoint(self, client_for, company_user):
        response = client_for(company_user).get("/api/v1/onboarding/status/")
        assert response.data["steps"] == ["company", "contact"]
        assert response.data["missing"] == ["company", "contact"]


class TestGoogleOAuth:

    @pytest.fixture
    def unconfigured(self):
        blank = SimpleNamespace(oauth=SimpleNamespace(google_client_id="", google_client_secret="", google_redirect_uri=""))
        with mock.patch("users.oauth.config", blank):
            yield

    @pytest.fixture
    def configured(self):
        creds = SimpleNamespace(oauth=SimpleNamespace(
            google_client_id="client-id", google_client_secret="secret", google_redirect_uri="https://app.example.com/cb",
        ))
        with mock.patch("users.oauth.config", creds):
            yield

    def test_not_configured(self, unconfigured):
        with pytest.raises(ConfigurationError):
            GoogleOAuth().get_authorization_url()

    def test_authorization_url_uses_default_redirect(self, configured):
        url = GoogleOAuth().get_authorization_url(state="xyz")
        assert "client_id=client-id" in url
        assert "redirect_uri=https%3A%2F%2Fapp.example.com%2Fcb" in url
        assert "state=xyz" in url

    def test_unverified_email_is_rejected(self, configured):
        tokens = mock.Mock(status_code=200, json=lambda: {"access_token": "at"})
        profile = mock.Mock(status_code=200, json=lambda: {"email": "x@example.com", "verified_email": False})
        with mock.patch("users.oauth.requests.post", return_value=tokens), \
                mock.patch("users.oauth.requests.get", return_value=profile):
            with pytest.raises(ValidationError):
                GoogleOAuth().get_user_info("code")

    def test_profile_is_mapped(self, configured):
        tokens = mock.Mock(status_code=200, json=lambda: {"access_token": "at"})
        profile = mock.Mock(status_code=200, json=lambda: {
            "id": "g-1", "email": "x@example.com", "verified_email": True, "given_name": "Sam",
        })
        with mock.patch("users.oauth.requests.post", return_value=tokens), \
                mock.patch("users.oauth.requests.get", return_value=profile):
            info = GoogleOAuth().get_user_info("code")
        assert info["uid"] == "g-1"
        assert info["first_name"] == "Sam"
        assert info["last_name"] == ""

    def test_google_down(self, configured):
        with mock.patch("users.oauth.requests.post", side_effect=requests.ConnectionError("down")):
            with pytest.raises(ServiceError):
                GoogleOAuth().get_user_info("code")

    @pytest.mark.django_db
    def test_endpoint_reports_missing_configuration(self, api_client, unconfigured):
        response = api_client.get("/api/v1/auth/google/")
        assert response.status_code == 500
        assert response.data["error"] == "configuration_error"

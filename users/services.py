"""
User Services
=============

Business logic for accounts, onboarding and company website verification.
"""

import re

import requests
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from affiliatexchange.config import config
from core.services import BaseService
from core.exceptions import (
    AuthenticationError,
    ConflictError,
    ServiceError,
    ValidationError,
)
from .models import CompanyProfile
from .serializers import CreatorPlatformsSerializer
from .repositories import user_repo, creator_profile_repo, company_profile_repo

User = get_user_model()


class UserService(BaseService):
    """
    Centralised account logic shared by password and Google sign-in.
    """

    @classmethod
    def register(cls, email: str, password: str, role: str, username: str = "", **extra) -> User:
        """
        Create a creator or company account with its empty profile.

        Company accounts start in ``pending`` until an admin approves them.
        """
        if role not in (User.Role.CREATOR, User.Role.COMPANY):
            raise ValidationError("Role must be creator or company", field="role")
        if user_repo.get_by_email(email):
            raise ConflictError("An account with this email already exists", resource="user")

        username = username or cls._unique_username(email.split("@")[0])
        if user_repo.username_taken(username):
            raise ConflictError("Username is already taken", resource="user")

        with cls.atomic():
            user = user_repo.create_user(email=email, password=password, username=username, role=role, **extra)
            if role == User.Role.CREATOR:
                creator_profile_repo.create(user=user)
            else:
                company_profile_repo.create(user=user)

        cls.logger.info("Registered %s account %s", role, user.email)
        return user

    @classmethod
    def login(cls, email: str, password: str) -> User:
        user = authenticate(email=email, password=password)
        if not user:
            raise AuthenticationError("Invalid email or password")
        cls.ensure_can_sign_in(user)
        return user

    @staticmethod
    def ensure_can_sign_in(user):
        if not user.is_active:
            raise AuthenticationError("Account is disabled")
        if user.account_status == User.AccountStatus.BANNED:
            raise AuthenticationError("This account has been banned")
        if user.account_status == User.AccountStatus.SUSPENDED:
            raise AuthenticationError("This account is suspended")

    @classmethod
    def authenticate_oauth(cls, user_info: dict, role: str = User.Role.CREATOR) -> tuple:
        """
        Authenticate (or create) a user from Google profile info.

        Steps:
            1. Look up by Google ID (strongest match)
            2. Fall back to email lookup, linking the Google ID when unlinked
            3. Create a new account with the requested role

        Returns:
            (user, created) tuple
        """
        email = user_info.get("email")
        if not email:
            raise ValidationError("Could not retrieve email from provider")

        uid = user_info.get("uid")
        user = user_repo.get_by_google_id(uid) if uid else None
        created = False

        if not user:
            user = user_repo.get_by_email(email)
            if user and not user.google_id and uid:
                user_repo.update(user, google_id=uid)
                cls.logger.info("Linked existing user %s to Google", email)

        if not user:
            user = cls.register(
                email=email,
                password=None,
                role=role if role in (User.Role.CREATOR, User.Role.COMPANY) else User.Role.CREATOR,
                first_name=user_info.get("first_name", ""),
                last_name=user_info.get("last_name", ""),
                google_id=uid,
                email_verified=True,
                profile_image_url=user_info.get("picture", ""),
            )
            created = True
            cls.logger.info("Created new Google user %s", email)

        cls.ensure_can_sign_in(user)
        return user, created

    @classmethod
    def get_google_user_info(cls, code: str, redirect_uri: str = None) -> dict:
        from users.oauth import GoogleOAuth

        return GoogleOAuth().get_user_info(code=code, redirect_uri=redirect_uri)

    @classmethod
    def change_password(cls, user, old_password: str, new_password: str) -> None:
        if user.has_usable_password() and not user.check_password(old_password):
            raise ValidationError("Incorrect password", field="old_password")
        user.set_password(new_password)
        user.save(update_fields=["password"])

    # ── Email verification / password reset ──────────────────────────

    @staticmethod
    def make_token(user) -> tuple:
        return urlsafe_base64_encode(force_bytes(user.pk)), default_token_generator.make_token(user)

    @staticmethod
    def resolve_token(uid: str, token: str) -> User:
        try:
            pk = force_str(urlsafe_base64_decode(uid))
        except (TypeError, ValueError):
            raise ValidationError("Invalid or expired link")
        user = user_repo.get_by_id_or_none(pk)
        if not user or not default_token_generator.check_token(user, token):
            raise ValidationError("Invalid or expired link")
        return user

    @classmethod
    def send_verification_email(cls, user) -> None:
        from notifications.tasks import send_email

        uid, token = cls.make_token(user)
        link = f"{config.email.site_url}/verify-email?uid={uid}&token={token}"
        send_email.delay(
            user.email,
            "Verify your email",
            "Confirm your email address to finish setting up your account.",
            link,
            "Verify email address",
            name=user.display_name,
        )

    @classmethod
    def verify_email(cls, uid: str, token: str) -> User:
        user = cls.resolve_token(uid, token)
        if not user.email_verified:
            user_repo.update(user, email_verified=True)
        return user

    @classmethod
    def request_password_reset(cls, email: str) -> None:
        """Always succeeds from the caller's view so emails can't be enumerated."""
        from notifications.tasks import send_email

        user = user_repo.get_by_email(email)
        if not user:
            cls.logger.info("Password reset requested for unknown email")
            return
        uid, token = cls.make_token(user)
        link = f"{config.email.site_url}/reset-password?uid={uid}&token={token}"
        send_email.delay(
            user.email,
            "Reset your password",
            "Someone asked to reset the password on your account. If it was not you, ignore this email.",
            link,
            "Choose a new password",
            name=user.display_name,
        )

    @classmethod
    def reset_password(cls, uid: str, token: str, new_password: str) -> None:
        user = cls.resolve_token(uid, token)
        user.set_password(new_password)
        user.save(update_fields=["password"])
        cls.logger.info("Password reset for user %s", user.pk)

    @staticmethod
    def _unique_username(base: str) -> str:
        base = re.sub(r"[^\w.-]", "", base) or "user"
        candidate = base
        suffix = 1
        while user_repo.username_taken(candidate):
            suffix += 1
            candidate = f"{base}{suffix}"
        return candidate


class OnboardingService(BaseService):
    """
    Multi-step profile wizard.

    Creator steps: ``niches`` → ``platforms`` → ``bio``.
    Company steps: ``company`` (legal name, industry, website) → ``contact``
    (contact name, description).
    Each step validates on its own; ``status`` reports what is still missing.
    """

    CREATOR_STEPS = ("niches", "platforms", "bio")
    COMPANY_STEPS = ("company", "contact")

    @classmethod
    def save_creator_step(cls, user, step: str, data: dict):
        if step not in cls.CREATOR_STEPS:
            raise ValidationError(f"Unknown onboarding step: {step}", field="step")

        profile = creator_profile_repo.get_for_user(user)

        if step == "niches":
            niches = data.get("niches") or []
            if not isinstance(niches, list) or not niches:
                raise ValidationError("Select at least one niche", field="niches")
            return creator_profile_repo.update(profile, niches=[str(n).strip() for n in niches if str(n).strip()])

        if step == "platforms":
            # Blank follower counts mean "not given"
            submitted = {key: value for key, value in data.items() if not (key.endswith("_followers") and value == "")}
            serializer = CreatorPlatformsSerializer(data=submitted)
            if not serializer.is_valid():
                field, errors = next(iter(serializer.errors.items()))
                raise ValidationError(str(errors[0]), field=field)
            cleaned = serializer.validated_data

            fields = {}
            for platform in ("youtube", "tiktok", "instagram"):
                fields[f"{platform}_url"] = cleaned.get(f"{platform}_url") or ""
                if cleaned.get(f"{platform}_followers") is not None:
                    fields[f"{platform}_followers"] = cleaned[f"{platform}_followers"]
            if not any(fields[f"{p}_url"] for p in ("youtube", "tiktok", "instagram")):
                raise ValidationError(
                    "Add at least one video platform (YouTube, TikTok or Instagram)",
                    field="platforms",
                )
            return creator_profile_repo.update(profile, **fields)

        bio = (data.get("bio") or "").strip()
        if len(bio) < 20:
            raise ValidationError("Bio must be at least 20 characters", field="bio")
        return creator_profile_repo.update(profile, bio=bio)

    @classmethod
    def save_company_step(cls, user, step: str, data: dict):
        if step not in cls.COMPANY_STEPS:
            raise ValidationError(f"Unknown onboarding step: {step}", field="step")

        profile = company_profile_repo.get_for_user(user)

        if step == "company":
            required = ("legal_name", "industry", "website_url")
        else:
            required = ("contact_name", "description")

        missing = [name for name in required if not str(data.get(name) or "").strip()]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)

        allowed = {
            "company": ("legal_name", "trade_name", "industry", "website_url", "company_size", "year_founded", "logo_url"),
            "contact": ("contact_name", "contact_job_title", "phone_number", "business_address", "description",
                        "linkedin_url", "twitter_url", "facebook_url", "instagram_url"),
        }[step]
        fields = {name: data[name] for name in allowed if name in data}
        return company_profile_repo.update(profile, **fields)

    @classmethod
    def status(cls, user) -> dict:
        if user.is_creator:
            profile = creator_profile_repo.get_for_user(user)
            missing = []
            if not profile.niches:
                missing.append("niches")
            if not profile.has_video_platform:
                missing.append("platforms")
            if not profile.bio:
                missing.append("bio")
            steps = cls.CREATOR_STEPS
        elif user.is_company:
            profile = company_profile_repo.get_for_user(user)
            missing = []
            if not (profile.legal_name and profile.industry and profile.website_url):
                missing.append("company")
            if not (profile.contact_name and profile.description):
                missing.append("contact")
            steps = cls.COMPANY_STEPS
        else:
            return {"role": user.role, "steps": [], "missing": [], "completed": True}

        return {
            "role": user.role,
            "steps": list(steps),
            "missing": missing,
            "completed": not missing,
        }


class WebsiteVerificationService(BaseService):
    """Prove a company controls its website via a meta tag."""

    META_NAME = "affiliatexchange-verification"
    TIMEOUT = 10

    @classmethod
    def request_token(cls, user) -> dict:
        profile = company_profile_repo.get_for_user(user)
        if not profile.website_url:
            raise ValidationError("Add your website URL before verifying it", field="website_url")
        token = profile.issue_verification_token()
        return {
            "token": token,
            "meta_tag": f'<meta name="{cls.META_NAME}" content="{token}">',
            "website_url": profile.website_url,
        }

    @classmethod
    def verify(cls, user, method: str = CompanyProfile.VerificationMethod.META_TAG) -> CompanyProfile:
        profile = company_profile_repo.get_for_user(user)
        if not profile.website_verification_token:
            raise ValidationError("Request a verification token first")
        if method == CompanyProfile.VerificationMethod.DNS_TXT:
            raise ValidationError("DNS TXT verification is not supported; use the meta tag", field="method")
        if method != CompanyProfile.VerificationMethod.META_TAG:
            raise ValidationError("Unknown verification method", field="method")

        try:
            response = requests.get(
                profile.website_url,
                timeout=cls.TIMEOUT,
                headers={"User-Agent": "AffiliateXchange-Verifier/1.0"},
            )
        except requests.RequestException as exc:
            cls.logger.warning("Website fetch failed for company %s: %s", profile.pk, exc)
            raise ServiceError("Could not reach your website", vendor="website")

        if response.status_code != 200:
            raise ServiceError(f"Website returned HTTP {response.status_code}", vendor="website")

        if not cls.page_has_token(response.text, profile.website_verification_token):
            raise ValidationError("Verification meta tag not found on your homepage")

        profile.mark_website_verified(method)
        cls.logger.info("Website verified for company %s", profile.pk)
        return profile

    @classmethod
    def page_has_token(cls, html: str, token: str) -> bool:
        for tag in re.findall(r"<meta\b[^>]*>", html, flags=re.IGNORECASE):
            name = re.search(r'name\s*=\s*["\']([^"\']+)["\']', tag, flags=re.IGNORECASE)
            content = re.search(r'content\s*=\s*["\']([^"\']+)["\']', tag, flags=re.IGNORECASE)
            if name and content and name.group(1) == cls.META_NAME and content.group(1) == token:
                return True
        return False


def creator_is_eligible(user) -> bool:
    """Creators need at least one video platform to apply anywhere."""
    profile = getattr(user, "creator_profile", None)
    return bool(profile and profile.has_video_platform)

"""
Administration Services
=======================

Platform oversight: company approval, account enforcement, platform
settings and dashboard numbers. Every mutation made through the admin
API is recorded with ``AuditService.log``.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from core.exceptions import ConflictError, ValidationError
from core.http import get_client_ip
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from payments import fees
from users.models import CompanyProfile
from users.repositories import company_profile_repo, user_repo
from .repositories import audit_log_repo, platform_setting_repo

User = get_user_model()


class AuditService(BaseService):

    @classmethod
    def log(cls, actor, action: str, entity_type: str, entity_id="", changes: dict = None,
            reason: str = "", request=None):
        entry = audit_log_repo.create(
            actor=actor,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else "",
            changes=_json_safe(changes or {}),
            reason=reason or "",
            ip_address=get_client_ip(request) if request is not None else "",
            user_agent=request.META.get("HTTP_USER_AGENT", "") if request is not None else "",
        )
        cls.logger.info("Audit: %s %s %s:%s", getattr(actor, "pk", None), action, entity_type, entity_id)
        return entry


def _json_safe(data: dict) -> dict:
    return {
        key: value if isinstance(value, (int, float, bool, str, type(None), list, dict)) else str(value)
        for key, value in data.items()
    }


class AdminService(BaseService):

    # ── Dashboard ────────────────────────────────────────────────────

    @classmethod
    def dashboard_stats(cls) -> dict:
        from applications.models import Application
        from moderation.repositories import content_flag_repo
        from offers.models import Offer
        from payments.models import Payment, PaymentStatus, RetainerPayment
        from retainers.models import RetainerContract

        return {
            "users": {
                "total": User.objects.count(),
                "creators": User.objects.filter(role=User.Role.CREATOR).count(),
                "companies": User.objects.filter(role=User.Role.COMPANY).count(),
                "admins": User.objects.filter(role=User.Role.ADMIN).count(),
            },
            "pending_companies": CompanyProfile.objects.filter(status=CompanyProfile.Status.PENDING).count(),
            "pending_offers": Offer.objects.filter(status=Offer.Status.PENDING_REVIEW).count(),
            "live_offers": Offer.objects.filter(status=Offer.Status.APPROVED).count(),
            "active_applications": Application.objects.filter(
                status__in=[Application.Status.APPROVED, Application.Status.ACTIVE],
            ).count(),
            "open_retainers": RetainerContract.objects.filter(status=RetainerContract.Status.OPEN).count(),
            "pending_payments": (
                Payment.objects.filter(status=PaymentStatus.PENDING).count()
                + RetainerPayment.objects.filter(status=PaymentStatus.PENDING).count()
            ),
            "flagged_content": content_flag_repo.pending_count(),
        }

    # ── Companies ────────────────────────────────────────────────────

    @classmethod
    def approve_company(cls, company: CompanyProfile) -> CompanyProfile:
        if company.status == CompanyProfile.Status.APPROVED:
            raise ConflictError("Company is already approved", resource="company")
        company = company_profile_repo.update(
            company, status=CompanyProfile.Status.APPROVED, approved_at=timezone.now(), rejection_reason="",
        )
        NotificationService.send(
            company.user,
            NotificationType.REGISTRATION_APPROVED,
            "Your company account is approved",
            "You can now publish offers and retainer contracts.",
        )
        return company

    @classmethod
    def reject_company(cls, company: CompanyProfile, reason: str) -> CompanyProfile:
        if not (reason or "").strip():
            raise ValidationError("A rejection reason is required", field="reason")
        company = company_profile_repo.update(
            company, status=CompanyProfile.Status.REJECTED, rejection_reason=reason.strip(),
        )
        NotificationService.send(
            company.user,
            NotificationType.REGISTRATION_REJECTED,
            "Your company registration was not approved",
            f"Reason: {reason.strip()}",
        )
        return company

    @classmethod
    def suspend_company(cls, company: CompanyProfile, reason: str = "") -> CompanyProfile:
        if company.status != CompanyProfile.Status.APPROVED:
            raise ConflictError("Only approved companies can be suspended", resource="company")
        company = company_profile_repo.update(company, status=CompanyProfile.Status.SUSPENDED)
        NotificationService.send(
            company.user,
            NotificationType.ACCOUNT_STATUS_CHANGE,
            "Company account suspended",
            "Your offers are hidden from the marketplace while your account is suspended."
            + (f" Reason: {reason}" if reason else ""),
        )
        return company

    @classmethod
    def unsuspend_company(cls, company: CompanyProfile) -> CompanyProfile:
        if company.status != CompanyProfile.Status.SUSPENDED:
            raise ConflictError("Company is not suspended", resource="company")
        company = company_profile_repo.update(company, status=CompanyProfile.Status.APPROVED)
        NotificationService.send(
            company.user,
            NotificationType.ACCOUNT_STATUS_CHANGE,
            "Company account reinstated",
            "Your company account is active again.",
        )
        return company

    @classmethod
    def set_company_fee(cls, company: CompanyProfile, percentage) -> CompanyProfile:
        """``percentage`` is a fraction (0.05) or None to fall back to the platform default."""
        if percentage is not None:
            percentage = Decimal(str(percentage))
            if not fees.is_valid_platform_fee_percentage(percentage):
                raise ValidationError("Platform fee must be between 0% and 50%", field="platform_fee_percentage")
        company = company_profile_repo.update(company, custom_platform_fee_percentage=percentage)
        label = fees.format_fee_percentage(percentage) if percentage is not None else "the platform default"
        NotificationService.send(
            company.user,
            NotificationType.SYSTEM_ANNOUNCEMENT,
            "Platform fee updated",
            f"Your platform fee is now {label}.",
            {"link_url": "/company/dashboard"},
        )
        return company

    # ── Accounts ─────────────────────────────────────────────────────

    @classmethod
    def set_account_status(cls, user, status: str, reason: str = ""):
        status = str(status)
        if user.is_admin:
            raise ConflictError("Admin accounts cannot be suspended or banned", resource="user")
        if user.account_status == status:
            raise ConflictError(f"Account is already {status}", resource="user")
        user = user_repo.update(user, account_status=status)
        titles = {
            User.AccountStatus.ACTIVE.value: "Account reinstated",
            User.AccountStatus.SUSPENDED.value: "Account suspended",
            User.AccountStatus.BANNED.value: "Account banned",
        }
        NotificationService.send(
            user,
            NotificationType.ACCOUNT_STATUS_CHANGE,
            titles[status],
            f"Your account status is now {status}." + (f" Reason: {reason}" if reason else ""),
        )
        cls.logger.warning("Account %s set to %s", user.pk, status)
        return user

    # ── Settings ─────────────────────────────────────────────────────

    @classmethod
    def upsert_setting(cls, admin, key: str, value, description: str = "", category: str = ""):
        key = (key or "").strip()
        if not key:
            raise ValidationError("Setting key is required", field="key")
        value = str(value).strip()
        if key in (fees.PLATFORM_FEE_KEY, fees.PROCESSING_FEE_KEY):
            fraction = fees.parse_fee_percentage(value)
            if fraction is None or not fees.is_valid_platform_fee_percentage(fraction):
                raise ValidationError("Fee settings must be a percentage between 0 and 50", field="value")
            category = "fees"

        existing = platform_setting_repo.get_by_key(key)
        fields = {"updated_by": admin}
        if description or existing is None:
            fields["description"] = description
        if category or existing is None:
            fields["category"] = category or "general"
        setting, created = platform_setting_repo.upsert(key, value, **fields)

        fees.clear_fee_settings_cache()
        return setting, created, existing.value if existing else None

"""
Application Services
====================

Creator applications to offers, from request to paid completion.

    pending ──approve (company or auto after 7 min)──▶ approved ⇄ active ⇄ paused
       │                                                  │
       └──reject──▶ rejected                              └──complete──▶ completed (+ Payment)

Approval issues the tracking code and the public ``/go/<code>`` link.
"""

import re

from django.db import IntegrityError
from django.utils import timezone

from affiliatexchange.config import config
from analytics.services import AnalyticsService
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from offers.models import Offer
from offers.repositories import offer_repo
from payments.services import PaymentService
from users.services import creator_is_eligible
from .models import Application
from .repositories import application_repo, click_event_repo

BOT_USER_AGENT = re.compile(r"bot|crawler|spider|curl|wget|python-requests|headless", re.IGNORECASE)
RAPID_CLICK_WINDOW_SECONDS = 10
RAPID_CLICK_LIMIT = 3

# Statuses a company may set directly through the status patch
COMPANY_STATUSES = {
    Application.Status.APPROVED.value,
    Application.Status.ACTIVE.value,
    Application.Status.PAUSED.value,
    Application.Status.REJECTED.value,
    Application.Status.COMPLETED.value,
}


def build_tracking_code(application: Application) -> str:
    return "CR-{}-{}-{}".format(
        str(application.creator_id)[:8],
        str(application.offer_id)[:8],
        str(application.pk)[:8],
    )


def build_tracking_link(code: str) -> str:
    return f"{config.platform.tracking_base_url.rstrip('/')}/go/{code}"


class ApplicationService(BaseService):

    # ── Creator ──────────────────────────────────────────────────────

    @classmethod
    def apply(cls, creator, offer_id, message: str = "", preferred_commission: str = "") -> Application:
        if not creator_is_eligible(creator):
            raise ValidationError(
                "Video platform required: add a YouTube, TikTok or Instagram account to your profile first",
                field="platforms",
            )
        offer = offer_repo.get_by_id(offer_id)
        if offer.status != Offer.Status.APPROVED:
            raise ValidationError("This offer is not accepting applications", field="offer")
        if application_repo.exists(creator=creator, offer=offer):
            raise ConflictError("You have already applied to this offer", resource="application")

        try:
            with cls.atomic():
                application = application_repo.create(
                    creator=creator,
                    offer=offer,
                    message=message,
                    preferred_commission=preferred_commission,
                )
                offer_repo.increment(offer.pk, "application_count")
        except IntegrityError:
            raise ConflictError("You have already applied to this offer", resource="application")

        cls.logger.info("Creator %s applied to offer %s (application %s)", creator.pk, offer.pk, application.pk)
        NotificationService.send(
            offer.company.user,
            NotificationType.NEW_APPLICATION,
            "New application",
            f'{creator.display_name} applied to promote "{offer.title}".',
            {"application_id": application.pk, "offer_id": offer.pk},
        )
        return application

    # ── Company ──────────────────────────────────────────────────────

    @classmethod
    def approve(cls, application: Application, user=None) -> Application:
        """Approve ``application``; ``user`` is None for the auto-approval job."""
        if user is not None:
            cls.ensure_owner(application.offer.company.user_id, user, "You can only review applications to your offers")
        if application.status != Application.Status.PENDING:
            raise ConflictError(f"Cannot approve an application that is {application.status}", resource="application")

        code = build_tracking_code(application)
        application = application_repo.update(
            application,
            status=Application.Status.APPROVED,
            tracking_code=code,
            tracking_link=build_tracking_link(code),
            approved_at=timezone.now(),
        )
        cls.logger.info("Application %s approved (%s)", application.pk, "company" if user else "auto")
        NotificationService.send(
            application.creator,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Application approved",
            f'You were approved to promote "{application.offer.title}". '
            f"Your tracking link: {application.tracking_link}",
            {"application_id": application.pk, "offer_id": application.offer_id},
        )
        return application

    @classmethod
    def reject(cls, application: Application, user, reason: str = "") -> Application:
        cls.ensure_owner(application.offer.company.user_id, user, "You can only review applications to your offers")
        if application.status != Application.Status.PENDING:
            raise ConflictError(f"Cannot reject an application that is {application.status}", resource="application")
        application = application_repo.update(
            application, status=Application.Status.REJECTED, rejection_reason=reason.strip(),
        )
        message = f'Your application to promote "{application.offer.title}" was not accepted.'
        if reason.strip():
            message += f" Reason: {reason.strip()}"
        NotificationService.send(
            application.creator,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Application rejected",
            message,
            {"application_id": application.pk},
        )
        return application

    @classmethod
    def complete(cls, application: Application, user, sale_amount=None) -> dict:
        """
        Mark the work done and raise the commission payment.

        Returns ``{"application", "payment", "prompt_review"}``; the review
        prompt is shown the first time this creator completes work for the
        company, unless they already reviewed it.
        """
        cls.ensure_owner(application.offer.company.user_id, user, "You can only complete applications to your offers")
        if not application.is_working:
            raise ValidationError("Only approved applications can be marked as complete", field="status")

        with cls.atomic():
            application = application_repo.update(
                application, status=Application.Status.COMPLETED, completed_at=timezone.now(),
            )
            payment = PaymentService.create_for_application(application, sale_amount)

        return {
            "application": application,
            "payment": payment,
            "prompt_review": cls.should_prompt_review(application),
        }

    @classmethod
    def should_prompt_review(cls, application: Application) -> bool:
        from reviews.repositories import review_repo

        company = application.offer.company
        if application_repo.completed_between(application.creator, company).count() != 1:
            return False
        return not review_repo.exists(creator=application.creator, company=company)

    @classmethod
    def set_status(cls, application: Application, user, status: str, reason: str = "", sale_amount=None):
        """Company status patch; routes to the matching transition."""
        status = str(status)
        if status not in COMPANY_STATUSES:
            raise ValidationError(f"Unsupported status: {status}", field="status")
        if status == Application.Status.APPROVED and application.status == Application.Status.PENDING:
            return cls.approve(application, user)
        if status == Application.Status.REJECTED:
            return cls.reject(application, user, reason)
        if status == Application.Status.COMPLETED:
            return cls.complete(application, user, sale_amount)["application"]

        cls.ensure_owner(application.offer.company.user_id, user, "You can only manage applications to your offers")
        working = (Application.Status.APPROVED, Application.Status.ACTIVE, Application.Status.PAUSED)
        if application.status not in working:
            raise ConflictError(f"Cannot move a {application.status} application to {status}", resource="application")
        application = application_repo.update(application, status=status)
        NotificationService.send(
            application.creator,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Application updated",
            f'Your work on "{application.offer.title}" is now {status}.',
            {"application_id": application.pk},
        )
        return application

    # ── Background ───────────────────────────────────────────────────

    @classmethod
    def auto_approve_due(cls, now=None) -> int:
        approved = 0
        for application in application_repo.due_for_auto_approval(now):
            if not application.offer.is_live:
                continue
            try:
                cls.approve(application)
                approved += 1
            except ConflictError:
                # Approved or rejected by the company while we were iterating
                continue
        if approved:
            cls.logger.info("Auto-approved %d applications", approved)
        return approved

    # ── Click tracking ───────────────────────────────────────────────

    @classmethod
    def record_click(cls, code: str, ip: str, user_agent: str, referer: str, params) -> tuple:
        """Store a click for ``code``; returns ``(click, redirect_url)``."""
        application = application_repo.get_by_tracking_code(code)
        if application is None:
            raise NotFoundError("Tracking link not found", resource="tracking_link")

        if ip.startswith("::ffff:"):
            ip = ip[7:]
        score, flags = cls.score_click(application, ip, user_agent, referer)
        click = click_event_repo.create(
            application=application,
            ip_address=ip,
            user_agent=user_agent or "unknown",
            referer=referer or "direct",
            utm_source=params.get("utm_source", "")[:255],
            utm_medium=params.get("utm_medium", "")[:255],
            utm_campaign=params.get("utm_campaign", "")[:255],
            utm_term=params.get("utm_term", "")[:255],
            utm_content=params.get("utm_content", "")[:255],
            fraud_score=score,
            fraud_flags=",".join(flags),
        )
        AnalyticsService.record_click(click)
        if flags:
            cls.logger.warning("Suspicious click on %s from %s: %s (score %d)", code, ip, flags, score)
        return click, application.offer.product_url

    @staticmethod
    def score_click(application, ip: str, user_agent: str, referer: str) -> tuple:
        score, flags = 0, []
        if not user_agent or BOT_USER_AGENT.search(user_agent):
            score += 60
            flags.append("bot_user_agent")
        # The current click is stored after scoring
        if click_event_repo.recent_from_ip(application, ip, RAPID_CLICK_WINDOW_SECONDS) >= RAPID_CLICK_LIMIT - 1:
            score += 40
            flags.append("rapid_repeat")
        if ip in ("", "unknown"):
            score += 10
            flags.append("missing_ip")
        return min(score, 100), flags

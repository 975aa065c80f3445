"""
Offer Services
==============

Offer lifecycle: company authoring, admin review and creator discovery.

    draft ──submit──▶ pending_review ──approve──▶ approved ──pause──▶ paused
                          │                        ▲                   │
                          └──reject──▶ archived    └──────resume───────┘

Editing a reviewed field of an approved offer sends it back to pending_review.
"""

from decimal import Decimal

from django.utils import timezone

from affiliatexchange.config import config
from core.services import BaseService
from core.exceptions import ConflictError, ValidationError
from notifications.models import NotificationType
from notifications.services import NotificationService
from .models import Offer
from .repositories import offer_repo, offer_video_repo

# Fields whose change sends an approved offer back to review
REVIEWED_FIELDS = {
    "title", "product_name", "short_description", "full_description", "product_url",
    "commission_type", "commission_amount", "commission_percentage", "custom_terms",
}


class OfferService(BaseService):

    # ── Validation ───────────────────────────────────────────────────

    @staticmethod
    def validate_commission(commission_type, amount, percentage) -> None:
        if commission_type not in Offer.CommissionType.values:
            raise ValidationError("Unknown commission type", field="commission_type")
        if commission_type == Offer.CommissionType.PER_SALE:
            if percentage is None:
                raise ValidationError("Per-sale offers need a commission percentage", field="commission_percentage")
        elif commission_type == Offer.CommissionType.HYBRID:
            if amount is None and percentage is None:
                raise ValidationError("Hybrid offers need an amount or a percentage", field="commission_amount")
        elif commission_type == Offer.CommissionType.MONTHLY_RETAINER:
            if amount is None:
                raise ValidationError("Retainer offers need a monthly amount", field="commission_amount")
        elif amount is None:
            raise ValidationError("This commission type needs a commission amount", field="commission_amount")

        if percentage is not None and not (Decimal("0") < Decimal(percentage) <= Decimal("100")):
            raise ValidationError("Commission percentage must be between 0 and 100", field="commission_percentage")
        if amount is not None and Decimal(amount) <= 0:
            raise ValidationError("Commission amount must be positive", field="commission_amount")

    # ── Company authoring ────────────────────────────────────────────

    @classmethod
    def create(cls, company, data: dict, as_draft: bool = False) -> Offer:
        cls.validate_commission(
            data.get("commission_type"), data.get("commission_amount"), data.get("commission_percentage"),
        )
        status = Offer.Status.DRAFT if as_draft else Offer.Status.PENDING_REVIEW
        offer = offer_repo.create(company=company, status=status, **data)
        cls.logger.info("Company %s created offer %s (%s)", company.pk, offer.pk, status)

        if status == Offer.Status.PENDING_REVIEW:
            cls._notify_admins_for_review(offer)
        return offer

    @classmethod
    def update(cls, offer: Offer, user, data: dict) -> Offer:
        cls.ensure_owner(offer.company.user_id, user, "You can only edit your own offers")
        if offer.status == Offer.Status.ARCHIVED:
            raise ConflictError("Archived offers cannot be edited", resource="offer")

        cls.validate_commission(
            data.get("commission_type", offer.commission_type),
            data.get("commission_amount", offer.commission_amount),
            data.get("commission_percentage", offer.commission_percentage),
        )

        changes = dict(data)
        if offer.status == Offer.Status.APPROVED and REVIEWED_FIELDS & set(data) and not user.is_admin:
            changes["status"] = Offer.Status.PENDING_REVIEW
            cls.logger.info("Offer %s edited after approval, back to review", offer.pk)
        offer = offer_repo.update(offer, **changes)
        if changes.get("status") == Offer.Status.PENDING_REVIEW:
            cls._notify_admins_for_review(offer)
        return offer

    @classmethod
    def delete(cls, offer: Offer, user) -> None:
        cls.ensure_owner(offer.company.user_id, user, "You can only delete your own offers")
        from applications.models import Application

        active = offer.applications.filter(status__in=[Application.Status.APPROVED, Application.Status.ACTIVE])
        if active.exists():
            raise ConflictError(
                "This offer has active creators; pause or archive it instead",
                resource="offer",
                active_applications=active.count(),
            )
        offer_repo.delete(offer)
        cls.logger.info("Offer %s deleted by %s", offer.pk, user.pk)

    @classmethod
    def submit_for_review(cls, offer: Offer, user) -> Offer:
        cls.ensure_owner(offer.company.user_id, user)
        if offer.status != Offer.Status.DRAFT:
            raise ConflictError("Only draft offers can be submitted for review", resource="offer")
        offer = offer_repo.update(offer, status=Offer.Status.PENDING_REVIEW)
        cls._notify_admins_for_review(offer)
        return offer

    @classmethod
    def pause(cls, offer: Offer, user) -> Offer:
        cls.ensure_owner(offer.company.user_id, user)
        if offer.status != Offer.Status.APPROVED:
            raise ConflictError("Only live offers can be paused", resource="offer")
        return offer_repo.update(offer, status=Offer.Status.PAUSED)

    @classmethod
    def resume(cls, offer: Offer, user) -> Offer:
        cls.ensure_owner(offer.company.user_id, user)
        if offer.status != Offer.Status.PAUSED:
            raise ConflictError("Only paused offers can be resumed", resource="offer")
        return offer_repo.update(offer, status=Offer.Status.APPROVED)

    @classmethod
    def record_view(cls, offer: Offer) -> None:
        offer_repo.increment(offer.pk, "view_count")

    # ── Example videos ───────────────────────────────────────────────

    @classmethod
    def add_video(cls, offer: Offer, user, data: dict):
        cls.ensure_owner(offer.company.user_id, user)
        if offer.videos.count() >= config.platform.max_offer_videos:
            raise ValidationError(
                f"An offer can have at most {config.platform.max_offer_videos} videos", field="videos",
            )
        with cls.atomic():
            if data.get("is_primary") or not offer.videos.exists():
                offer_video_repo.clear_primary(offer)
                data["is_primary"] = True
            data.setdefault("order_index", offer.videos.count())
            return offer_video_repo.create(offer=offer, **data)

    @classmethod
    def set_primary_video(cls, video, user):
        cls.ensure_owner(video.offer.company.user_id, user)
        with cls.atomic():
            offer_video_repo.clear_primary(video.offer)
            return offer_video_repo.update(video, is_primary=True)

    @classmethod
    def delete_video(cls, video, user) -> None:
        cls.ensure_owner(video.offer.company.user_id, user)
        offer = video.offer
        was_primary = video.is_primary
        offer_video_repo.delete(video)
        if was_primary:
            replacement = offer.videos.order_by("order_index").first()
            if replacement:
                offer_video_repo.update(replacement, is_primary=True)

    # ── Admin review ─────────────────────────────────────────────────

    @classmethod
    def approve(cls, offer: Offer) -> Offer:
        if offer.status not in (Offer.Status.PENDING_REVIEW, Offer.Status.DRAFT, Offer.Status.PAUSED):
            raise ConflictError(f"Cannot approve an offer that is {offer.status}", resource="offer")
        offer = offer_repo.update(
            offer, status=Offer.Status.APPROVED, approved_at=timezone.now(), rejection_reason="",
        )
        NotificationService.send(
            offer.company.user,
            NotificationType.OFFER_APPROVED,
            "Offer approved",
            f'Your offer "{offer.title}" is now live on the marketplace.',
            {"offer_id": offer.pk},
        )
        return offer

    @classmethod
    def reject(cls, offer: Offer, reason: str) -> Offer:
        if not reason.strip():
            raise ValidationError("A rejection reason is required", field="reason")
        offer = offer_repo.update(
            offer,
            status=Offer.Status.ARCHIVED,
            rejected_at=timezone.now(),
            rejection_reason=reason.strip(),
            featured_on_homepage=False,
        )
        NotificationService.send(
            offer.company.user,
            NotificationType.OFFER_REJECTED,
            "Offer rejected",
            f'Your offer "{offer.title}" was not approved: {reason.strip()}',
            {"offer_id": offer.pk},
        )
        return offer

    @classmethod
    def request_edits(cls, offer: Offer, admin, notes: str) -> Offer:
        if not notes.strip():
            raise ValidationError("Describe the edits you need", field="notes")
        edit_requests = list(offer.edit_requests or [])
        edit_requests.append({
            "notes": notes.strip(),
            "requested_by": admin.pk,
            "requested_at": timezone.now().isoformat(),
        })
        offer = offer_repo.update(offer, edit_requests=edit_requests)
        NotificationService.send(
            offer.company.user,
            NotificationType.OFFER_EDIT_REQUESTED,
            "Edits requested on your offer",
            f'An admin asked for changes to "{offer.title}": {notes.strip()}',
            {"offer_id": offer.pk},
        )
        return offer

    @classmethod
    def set_featured(cls, offer: Offer, featured: bool) -> Offer:
        if featured and offer.status != Offer.Status.APPROVED:
            raise ConflictError("Only live offers can be featured", resource="offer")
        return offer_repo.update(offer, featured_on_homepage=featured)

    @classmethod
    def remove(cls, offer: Offer, reason: str = "") -> Offer:
        offer = offer_repo.update(offer, status=Offer.Status.ARCHIVED, featured_on_homepage=False)
        NotificationService.send(
            offer.company.user,
            NotificationType.OFFER_REMOVED,
            "Offer removed",
            f'Your offer "{offer.title}" was removed from the marketplace.'
            + (f" Reason: {reason}" if reason else ""),
            {"offer_id": offer.pk},
        )
        return offer

    # ── Discovery ────────────────────────────────────────────────────

    @classmethod
    def recommended_for(cls, creator, limit: int = 10):
        profile = getattr(creator, "creator_profile", None)
        niches = [n.lower() for n in (profile.niches if profile else [])]
        qs = offer_repo.live().exclude(applications__creator=creator)
        if not niches:
            return qs.order_by("-application_count", "-created_at")[:limit]

        matches = [offer for offer in qs.order_by("-created_at")[:200] if _niche_overlap(offer, niches)]
        return matches[:limit]

    @classmethod
    def _notify_admins_for_review(cls, offer: Offer) -> None:
        NotificationService.notify_admins(
            NotificationType.NEW_APPLICATION,
            "Offer awaiting review",
            f'{offer.company.display_name} submitted "{offer.title}" for review.',
            {"offer_id": offer.pk},
        )


def _niche_overlap(offer: Offer, niches: list) -> bool:
    offer_niches = {offer.primary_niche.lower(), *(n.lower() for n in offer.additional_niches or [])}
    return bool(offer_niches & set(niches))

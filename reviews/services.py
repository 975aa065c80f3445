"""
Review Services
===============

Creators rate the companies they worked with; companies answer
publicly; admins curate.
"""

from django.db import IntegrityError
from django.utils import timezone

from core.exceptions import ConflictError, ValidationError
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from .models import Review
from .repositories import review_repo

RATING_FIELDS = (
    "overall_rating", "payment_speed_rating", "communication_rating",
    "offer_quality_rating", "support_rating",
)


class ReviewService(BaseService):

    @classmethod
    def create(cls, creator, application, data: dict) -> Review:
        from applications.models import Application

        cls.ensure_owner(application.creator_id, creator, "You can only review your own work")
        if application.status not in (Application.Status.COMPLETED, Application.Status.APPROVED, Application.Status.ACTIVE):
            raise ValidationError("You can only review completed or approved work", field="application")
        if review_repo.exists(application=application):
            raise ConflictError("You have already reviewed this application", resource="review")

        company = application.offer.company
        try:
            with cls.atomic():
                review = review_repo.create(application=application, creator=creator, company=company, **data)
        except IntegrityError:
            raise ConflictError("You have already reviewed this application", resource="review")

        cls.logger.info("Creator %s reviewed company %s (%s stars)", creator.pk, company.pk, review.overall_rating)
        NotificationService.send(
            company.user,
            NotificationType.REVIEW_RECEIVED,
            "New review received",
            f"{creator.display_name} left a {review.overall_rating}-star review.",
            {"review_id": review.pk},
        )
        cls._screen(review)
        return review

    @classmethod
    def respond(cls, review: Review, user, response: str) -> Review:
        cls.ensure_owner(review.company.user_id, user, "You can only respond to reviews of your company")
        if not (response or "").strip():
            raise ValidationError("Response cannot be empty", field="response")
        return review_repo.update(
            review, company_response=response.strip(), company_responded_at=timezone.now(),
        )

    # ── Admin ────────────────────────────────────────────────────────

    @classmethod
    def admin_edit(cls, review: Review, data: dict) -> Review:
        changes = {k: v for k, v in data.items() if k in RATING_FIELDS or k == "review_text"}
        if not changes:
            raise ValidationError("Nothing to update", field="review_text")
        review = review_repo.update(review, is_edited=True, **changes)
        if "review_text" in changes:
            cls._screen(review)
        return review

    @classmethod
    def set_hidden(cls, review: Review, hidden: bool) -> Review:
        return review_repo.update(review, is_hidden=hidden)

    @classmethod
    def set_approved(cls, review: Review, approved: bool = True) -> Review:
        return review_repo.update(review, is_approved=approved)

    @classmethod
    def add_note(cls, review: Review, note: str) -> Review:
        return review_repo.update(review, admin_note=(note or "").strip())

    @classmethod
    def admin_respond(cls, review: Review, response: str) -> Review:
        if not (response or "").strip():
            raise ValidationError("Response cannot be empty", field="response")
        return review_repo.update(review, admin_response=response.strip())

    @classmethod
    def _screen(cls, review: Review) -> None:
        from moderation.services import ModerationService

        ModerationService.moderate("review", review.pk, review.creator, review.review_text)

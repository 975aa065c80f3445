"""
Reviews Repositories
"""

from django.db.models import Avg, Count, QuerySet

from core.repositories import BaseRepository
from .models import Review


class ReviewRepository(BaseRepository[Review]):
    model = Review

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("creator", "company", "application", "application__offer")

    @classmethod
    def public_for_company(cls, company) -> QuerySet:
        return cls._base().filter(company=company, is_hidden=False, is_approved=True)

    @classmethod
    def for_company(cls, company) -> QuerySet:
        return cls._base().filter(company=company)

    @classmethod
    def for_creator(cls, creator) -> QuerySet:
        return cls._base().filter(creator=creator)

    @classmethod
    def admin_list(cls, hidden=None, approved=None) -> QuerySet:
        qs = cls._base()
        if hidden is not None:
            qs = qs.filter(is_hidden=hidden)
        if approved is not None:
            qs = qs.filter(is_approved=approved)
        return qs

    @classmethod
    def rating_summary(cls, company) -> dict:
        summary = cls.public_for_company(company).aggregate(
            average_rating=Avg("overall_rating"),
            review_count=Count("id"),
            payment_speed=Avg("payment_speed_rating"),
            communication=Avg("communication_rating"),
            offer_quality=Avg("offer_quality_rating"),
            support=Avg("support_rating"),
        )
        return {
            key: round(value, 2) if isinstance(value, float) else value
            for key, value in summary.items()
        }


review_repo = ReviewRepository()

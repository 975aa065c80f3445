"""
Analytics Repositories
======================

Data-access layer for the per-application daily counters.
"""

from datetime import timedelta
from decimal import Decimal

from django.db.models import QuerySet, Sum
from django.utils import timezone

from core.repositories import BaseRepository
from .models import DailyAnalytics

COUNTERS = ("clicks", "unique_clicks", "conversions", "earnings")


class DailyAnalyticsRepository(BaseRepository[DailyAnalytics]):
    model = DailyAnalytics

    @classmethod
    def row_for(cls, application, day) -> DailyAnalytics:
        row, _ = cls.get_or_create(
            application=application,
            date=day,
            defaults={"offer_id": application.offer_id, "creator_id": application.creator_id},
        )
        return row

    @classmethod
    def for_application(cls, application) -> QuerySet:
        return cls.model.objects.filter(application=application)

    @classmethod
    def for_creator(cls, creator) -> QuerySet:
        return cls.model.objects.filter(creator=creator)

    @classmethod
    def for_company(cls, company) -> QuerySet:
        return cls.model.objects.filter(offer__company=company)

    @staticmethod
    def since(qs: QuerySet, days=None) -> QuerySet:
        """Rows from the last ``days`` days; None keeps everything."""
        if days is None:
            return qs
        return qs.filter(date__gte=timezone.localdate() - timedelta(days=days))

    @staticmethod
    def totals(qs: QuerySet) -> dict:
        summed = qs.order_by().aggregate(**{name: Sum(name) for name in COUNTERS})
        return {
            "clicks": summed["clicks"] or 0,
            "unique_clicks": summed["unique_clicks"] or 0,
            "conversions": summed["conversions"] or 0,
            "earnings": summed["earnings"] or Decimal("0.00"),
        }

    @staticmethod
    def daily_series(qs: QuerySet) -> list:
        return list(
            qs.order_by("date")
            .values("date")
            .annotate(clicks=Sum("clicks"), conversions=Sum("conversions"), earnings=Sum("earnings"))
        )

    @staticmethod
    def by_offer(qs: QuerySet) -> list:
        """Totals per offer, busiest first; offers with no activity are left out."""
        rows = (
            qs.order_by()
            .values("offer_id", "offer__title", "offer__company__trade_name", "offer__company__legal_name")
            .annotate(clicks=Sum("clicks"), conversions=Sum("conversions"), earnings=Sum("earnings"))
            .order_by("-clicks", "offer_id")
        )
        return [
            {
                "offer_id": row["offer_id"],
                "offer_title": row["offer__title"],
                "company_name": row["offer__company__trade_name"] or row["offer__company__legal_name"],
                "clicks": row["clicks"],
                "conversions": row["conversions"],
                "earnings": row["earnings"],
            }
            for row in rows
            if row["clicks"] or row["conversions"] or row["earnings"]
        ]


analytics_repo = DailyAnalyticsRepository()

"""
Applications Repositories
=========================

Data-access layer for Application and ClickEvent models.
"""

from datetime import timedelta

from django.db.models import Count, QuerySet
from django.utils import timezone

from core.repositories import BaseRepository
from .models import Application, ClickEvent


class ApplicationRepository(BaseRepository[Application]):
    model = Application

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("creator", "offer", "offer__company")

    @classmethod
    def for_creator(cls, creator, status: str = None) -> QuerySet:
        qs = cls._base().filter(creator=creator)
        return qs.filter(status=status) if status else qs

    @classmethod
    def for_company(cls, company, status: str = None, offer_id=None) -> QuerySet:
        qs = cls._base().filter(offer__company=company)
        if status:
            qs = qs.filter(status=status)
        if offer_id:
            qs = qs.filter(offer_id=offer_id)
        return qs

    @classmethod
    def get_by_tracking_code(cls, code: str):
        return cls._base().filter(tracking_code=code).first()

    @classmethod
    def due_for_auto_approval(cls, now=None) -> QuerySet:
        return cls._base().filter(
            status=Application.Status.PENDING,
            auto_approval_scheduled_at__lte=now or timezone.now(),
        )

    @classmethod
    def completed_between(cls, creator, company) -> QuerySet:
        return cls.model.objects.filter(
            creator=creator,
            offer__company=company,
            status=Application.Status.COMPLETED,
        )


class ClickEventRepository(BaseRepository[ClickEvent]):
    model = ClickEvent

    @classmethod
    def recent_from_ip(cls, application, ip: str, seconds: int) -> int:
        since = timezone.now() - timedelta(seconds=seconds)
        return cls.model.objects.filter(application=application, ip_address=ip, created_at__gte=since).count()

    @classmethod
    def unique_ips_on(cls, application, day) -> int:
        """Distinct visitor IPs for ``day``, not counting suspicious clicks."""
        return (
            cls.model.objects.filter(
                application=application,
                created_at__date=day,
                fraud_score__lt=ClickEvent.SUSPICIOUS_SCORE,
            )
            .order_by()
            .values("ip_address")
            .distinct()
            .count()
        )

    @classmethod
    def stats_for(cls, application) -> dict:
        clicks = cls.model.objects.filter(application=application)
        return {
            "total_clicks": clicks.count(),
            "unique_clicks": clicks.order_by().values("ip_address").distinct().count(),
            "suspicious_clicks": clicks.filter(fraud_score__gte=ClickEvent.SUSPICIOUS_SCORE).count(),
            "by_source": list(
                clicks.exclude(utm_source="").values("utm_source").annotate(clicks=Count("id")).order_by("-clicks")
            ),
        }


application_repo = ApplicationRepository()
click_event_repo = ClickEventRepository()

"""
Analytics Services
==================

Daily per-application counters and the dashboards built on them.

Clicks arrive from the ``/go/<code>`` redirect, conversions from the
company that owns the offer. A conversion also raises the commission
``Payment`` for the creator, priced by the offer's commission type.
"""

from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from applications.models import Application, ClickEvent
from applications.repositories import application_repo, click_event_repo
from core.exceptions import AuthorizationError, ValidationError
from core.services import BaseService
from messaging.repositories import conversation_repo
from offers.models import Offer
from offers.repositories import offer_repo
from payments.fees import to_cents
from payments.models import PaymentStatus
from payments.repositories import retainer_payment_repo
from payments.services import PaymentService
from users.repositories import company_profile_repo
from .repositories import analytics_repo

RANGES = {"7d": 7, "30d": 30, "90d": 90, "all": None}
DEFAULT_RANGE = "30d"

WORKING_STATUSES = (Application.Status.APPROVED, Application.Status.ACTIVE)


def _money(value) -> str:
    return str(to_cents(value or 0))


def _rate(conversions: int, clicks: int) -> float:
    return round(conversions / clicks * 100, 1) if clicks else 0.0


def _series(qs) -> list:
    return [
        {
            "date": row["date"].isoformat(),
            "clicks": row["clicks"],
            "conversions": row["conversions"],
            "earnings": _money(row["earnings"]),
        }
        for row in analytics_repo.daily_series(qs)
    ]


def _breakdown(qs) -> list:
    rows = analytics_repo.by_offer(qs)
    for row in rows:
        row["earnings"] = _money(row["earnings"])
    return rows


def _summary(totals: dict) -> dict:
    return {
        "total_clicks": totals["clicks"],
        "unique_clicks": totals["unique_clicks"],
        "conversions": totals["conversions"],
        "conversion_rate": _rate(totals["conversions"], totals["clicks"]),
    }


class AnalyticsService(BaseService):

    # ── Recording ────────────────────────────────────────────────────

    @classmethod
    def record_click(cls, click: ClickEvent) -> None:
        """Count a stored click toward today's row, unless it looks fraudulent."""
        if click.fraud_score >= ClickEvent.SUSPICIOUS_SCORE:
            cls.logger.info("Click %s left out of analytics (fraud score %d)", click.pk, click.fraud_score)
            return
        application = click.application
        day = timezone.localdate(click.created_at)
        with cls.atomic():
            row = analytics_repo.row_for(application, day)
            analytics_repo.increment(row.pk, "clicks")
            analytics_repo.filter(pk=row.pk).update(
                unique_clicks=click_event_repo.unique_ips_on(application, day),
            )

    @staticmethod
    def conversion_earnings(offer, sale_amount=None) -> Decimal:
        """
        Gross commission for one conversion.

        per_sale          sale_amount x commission percentage (sale required)
        per_lead/click    the fixed commission amount
        hybrid            the fixed amount when set, else the percentage
        monthly_retainer  never: retainers are paid per deliverable
        """
        sale = Decimal(str(sale_amount)) if sale_amount not in (None, "") else None
        kind = offer.commission_type
        percentage = offer.commission_percentage

        if kind == Offer.CommissionType.MONTHLY_RETAINER:
            raise ValidationError("Retainer offers are paid through deliverables, not conversions", field="offer")
        if kind in (Offer.CommissionType.PER_LEAD, Offer.CommissionType.PER_CLICK):
            if not offer.commission_amount:
                raise ValidationError("This offer has no commission amount set", field="offer")
            return to_cents(offer.commission_amount)
        if kind == Offer.CommissionType.HYBRID and offer.commission_amount:
            return to_cents(offer.commission_amount)
        if sale is None or not percentage:
            raise ValidationError("A sale amount is required for this offer", field="sale_amount")
        return to_cents(sale * Decimal(percentage) / 100)

    @classmethod
    def record_conversion(cls, application: Application, user, sale_amount=None) -> dict:
        """Returns ``{"analytics", "payment", "earnings"}``."""
        cls.ensure_owner(
            application.offer.company.user_id, user, "You can only record conversions for your own offers",
        )
        if application.status not in WORKING_STATUSES:
            raise ValidationError(
                "Conversions can only be recorded for approved applications", field="application",
            )
        earnings = cls.conversion_earnings(application.offer, sale_amount)

        with cls.atomic():
            row = analytics_repo.row_for(application, timezone.localdate())
            analytics_repo.increment(row.pk, "conversions")
            analytics_repo.increment(row.pk, "earnings", earnings)
            payment = PaymentService.create_for_conversion(application, earnings)
        row.refresh_from_db()

        cls.logger.info(
            "Conversion on application %s: gross %s, payment %s", application.pk, earnings, payment.pk,
        )
        return {"analytics": row, "payment": payment, "earnings": earnings}

    # ── Reading ──────────────────────────────────────────────────────

    @staticmethod
    def parse_range(value) -> str:
        value = value or DEFAULT_RANGE
        if value not in RANGES:
            raise ValidationError(f"Range must be one of: {', '.join(RANGES)}", field="range")
        return value

    @classmethod
    def for_application(cls, application: Application, user, date_range: str = None) -> dict:
        date_range = cls.parse_range(date_range)
        company = application.offer.company
        if not (user.is_admin or user.id in (application.creator_id, company.user_id)):
            raise AuthorizationError("You cannot view analytics for this application")

        rows = analytics_repo.for_application(application)
        totals = analytics_repo.totals(rows)
        return {
            "range": date_range,
            "application_id": application.pk,
            "offer_title": application.offer.title,
            "company_name": company.display_name,
            "total_earnings": _money(totals["earnings"]),
            **_summary(totals),
            "chart": _series(analytics_repo.since(rows, RANGES[date_range])),
        }

    @classmethod
    def for_creator(cls, creator, date_range: str = None) -> dict:
        date_range = cls.parse_range(date_range)
        rows = analytics_repo.for_creator(creator)
        totals = analytics_repo.totals(rows)
        retainer = cls._retainer_total(retainer_payment_repo.filter(creator=creator), "net_amount")
        return {
            "range": date_range,
            "total_earnings": _money(totals["earnings"] + retainer),
            "affiliate_earnings": _money(totals["earnings"]),
            "retainer_earnings": _money(retainer),
            "active_offers": application_repo.filter(creator=creator, status__in=WORKING_STATUSES).count(),
            **_summary(totals),
            "chart": _series(analytics_repo.since(rows, RANGES[date_range])),
            "offer_breakdown": _breakdown(rows.filter(application__status__in=WORKING_STATUSES)),
        }

    @classmethod
    def for_company(cls, user, date_range: str = None) -> dict:
        date_range = cls.parse_range(date_range)
        company = company_profile_repo.get_for_user(user)
        rows = analytics_repo.for_company(company)
        totals = analytics_repo.totals(rows)
        retainer = cls._retainer_total(retainer_payment_repo.filter(company=company), "gross_amount")
        return {
            "range": date_range,
            "total_spent": _money(totals["earnings"] + retainer),
            "affiliate_spent": _money(totals["earnings"]),
            "retainer_spent": _money(retainer),
            "active_offers": offer_repo.filter(company=company, status=Offer.Status.APPROVED).count(),
            "active_creators": cls._active_creators(company),
            **_summary(totals),
            "chart": _series(analytics_repo.since(rows, RANGES[date_range])),
            "offer_breakdown": _breakdown(rows),
        }

    # ── Dashboards ───────────────────────────────────────────────────

    @classmethod
    def creator_stats(cls, creator) -> dict:
        month_start = timezone.localdate().replace(day=1)
        rows = analytics_repo.for_creator(creator)
        totals = analytics_repo.totals(rows)
        monthly = analytics_repo.totals(rows.filter(date__gte=month_start))
        payouts = retainer_payment_repo.filter(creator=creator)
        retainer = cls._retainer_total(payouts, "net_amount")
        retainer_monthly = cls._retainer_total(payouts.filter(completed_at__date__gte=month_start), "net_amount")
        applications = application_repo.filter(creator=creator)
        unread = conversation_repo.filter(creator=creator).aggregate(total=Sum("creator_unread_count"))["total"]
        return {
            "total_earnings": _money(totals["earnings"] + retainer),
            "monthly_earnings": _money(monthly["earnings"] + retainer_monthly),
            "active_offers": applications.filter(status__in=WORKING_STATUSES).count(),
            "pending_applications": applications.filter(status=Application.Status.PENDING).count(),
            "total_clicks": totals["clicks"],
            "monthly_clicks": monthly["clicks"],
            "unread_messages": unread or 0,
        }

    @classmethod
    def company_stats(cls, user) -> dict:
        company = company_profile_repo.get_for_user(user)
        offers = offer_repo.filter(company=company)
        applications = application_repo.filter(offer__company=company)
        totals = analytics_repo.totals(analytics_repo.for_company(company))
        return {
            "active_creators": cls._active_creators(company),
            "pending_applications": applications.filter(status=Application.Status.PENDING).count(),
            "live_offers": offers.filter(status=Offer.Status.APPROVED).count(),
            "draft_offers": offers.filter(status=Offer.Status.DRAFT).count(),
            "total_applications": applications.count(),
            "total_clicks": totals["clicks"],
            "conversions": totals["conversions"],
        }

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _retainer_total(payments, column: str) -> Decimal:
        total = payments.filter(status=PaymentStatus.COMPLETED).aggregate(total=Sum(column))["total"]
        return total or Decimal("0")

    @staticmethod
    def _active_creators(company) -> int:
        return (
            application_repo.filter(offer__company=company, status__in=WORKING_STATUSES)
            .order_by()
            .values("creator_id")
            .distinct()
            .count()
        )

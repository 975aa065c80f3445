"""
Tests for click counting, conversions and the analytics dashboards

Run with: python -m pytest analytics/tests -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from analytics.models import DailyAnalytics
from analytics.services import AnalyticsService
from applications.models import Application
from applications.services import ApplicationService
from core.exceptions import AuthorizationError, ValidationError
from messaging.services import MessagingService
from offers.models import Offer
from payments.models import Payment, PaymentStatus


@pytest.fixture
def approved(application, company_user):
    return ApplicationService.approve(application, company_user)


def _click(client, application, ip, agent="Mozilla/5.0"):
    return client.get(f"/go/{application.tracking_code}", HTTP_USER_AGENT=agent, REMOTE_ADDR=ip)


@pytest.mark.django_db
class TestClickCounting:

    def test_clean_clicks_fill_todays_row(self, client, approved):
        for ip in ("203.0.113.1", "203.0.113.2", "203.0.113.1"):
            _click(client, approved, ip)
        row = DailyAnalytics.objects.get(application=approved)
        assert row.date == timezone.localdate()
        assert row.clicks == 3
        assert row.unique_clicks == 2
        assert row.offer_id == approved.offer_id
        assert row.creator_id == approved.creator_id

    def test_bot_clicks_are_stored_but_not_counted(self, client, approved):
        _click(client, approved, "203.0.113.5", agent="curl/8.0")
        assert approved.clicks.count() == 1
        assert not DailyAnalytics.objects.filter(application=approved).exists()


@pytest.mark.django_db
class TestConversions:

    def test_per_sale_conversion_pays_percentage(self, approved, company_user):
        result = AnalyticsService.record_conversion(approved, company_user, Decimal("250"))
        assert result["earnings"] == Decimal("25.00")

        row = result["analytics"]
        assert row.conversions == 1
        assert row.earnings == Decimal("25.00")

        payment = Payment.objects.get(application=approved)
        assert payment.gross_amount == Decimal("25.00")
        assert payment.net_amount == Decimal("23.25")
        assert payment.status == PaymentStatus.PENDING

    def test_conversions_accumulate_on_the_same_day(self, approved, company_user):
        AnalyticsService.record_conversion(approved, company_user, Decimal("100"))
        AnalyticsService.record_conversion(approved, company_user, Decimal("50"))
        row = DailyAnalytics.objects.get(application=approved)
        assert row.conversions == 2
        assert row.earnings == Decimal("15.00")
        assert Payment.objects.filter(application=approved).count() == 2

    def test_per_sale_needs_a_sale_amount(self, approved, company_user):
        with pytest.raises(ValidationError) as excinfo:
            AnalyticsService.record_conversion(approved, company_user)
        assert excinfo.value.details["field"] == "sale_amount"
        assert not DailyAnalytics.objects.exists()

    def test_per_lead_pays_fixed_amount(self, creator, company_user, make_offer):
        offer = make_offer(
            title="Acme Newsletter",
            commission_type=Offer.CommissionType.PER_LEAD,
            commission_amount=Decimal("15.00"),
            commission_percentage=None,
        )
        application = Application.objects.create(creator=creator, offer=offer, status=Application.Status.ACTIVE)
        result = AnalyticsService.record_conversion(application, company_user)
        assert result["earnings"] == Decimal("15.00")

    def test_hybrid_falls_back_to_percentage(self, make_offer):
        offer = make_offer(commission_type=Offer.CommissionType.HYBRID, commission_percentage=Decimal("5"))
        assert AnalyticsService.conversion_earnings(offer, "80") == Decimal("4.00")

    def test_retainer_offers_have_no_conversions(self, make_offer):
        offer = make_offer(commission_type=Offer.CommissionType.MONTHLY_RETAINER, commission_percentage=None)
        with pytest.raises(ValidationError):
            AnalyticsService.conversion_earnings(offer, "100")

    def test_pending_application_is_rejected(self, application, company_user):
        with pytest.raises(ValidationError):
            AnalyticsService.record_conversion(application, company_user, Decimal("100"))

    def test_other_company_cannot_record(self, approved, make_company):
        other = make_company(email="rival@example.com")
        with pytest.raises(AuthorizationError):
            AnalyticsService.record_conversion(approved, other, Decimal("100"))

    def test_endpoint(self, client_for, approved, company_user):
        response = client_for(company_user).post(
            f"/api/v1/conversions/{approved.pk}/", {"sale_amount": "100.00"}, format="json",
        )
        assert response.status_code == 201
        assert response.data["earnings"] == "10.00"
        assert response.data["analytics"]["conversions"] == 1
        assert response.data["payment"]["status"] == "pending"

    def test_creator_cannot_record(self, client_for, approved, creator):
        response = client_for(creator).post(f"/api/v1/conversions/{approved.pk}/", {}, format="json")
        assert response.status_code == 403


@pytest.mark.django_db
class TestAnalyticsOverview:

    @pytest.fixture
    def busy(self, client, approved, company_user):
        for ip in ("198.51.100.1", "198.51.100.2", "198.51.100.3", "198.51.100.4"):
            _click(client, approved, ip)
        AnalyticsService.record_conversion(approved, company_user, Decimal("250"))
        return approved

    def test_creator_totals(self, client_for, busy, creator):
        response = client_for(creator).get("/api/v1/analytics/")
        assert response.status_code == 200
        data = response.data
        assert data["range"] == "30d"
        assert data["total_clicks"] == 4
        assert data["unique_clicks"] == 4
        assert data["conversions"] == 1
        assert data["conversion_rate"] == 25.0
        assert data["affiliate_earnings"] == "25.00"
        assert data["retainer_earnings"] == "0.00"
        assert data["active_offers"] == 1
        assert data["chart"] == [{
            "date": timezone.localdate().isoformat(), "clicks": 4, "conversions": 1, "earnings": "25.00",
        }]
        assert data["offer_breakdown"][0]["offer_title"] == busy.offer.title

    def test_company_totals(self, client_for, busy, company_user):
        data = client_for(company_user).get("/api/v1/analytics/").data
        assert data["total_clicks"] == 4
        assert data["affiliate_spent"] == "25.00"
        assert data["total_spent"] == "25.00"
        assert data["active_creators"] == 1
        assert data["active_offers"] == 1
        assert data["offer_breakdown"][0]["company_name"] == "Acme"

    def test_single_application(self, client_for, busy, creator):
        data = client_for(creator).get("/api/v1/analytics/", {"application": busy.pk}).data
        assert data["application_id"] == busy.pk
        assert data["offer_title"] == busy.offer.title
        assert data["company_name"] == "Acme"
        assert data["total_earnings"] == "25.00"

    def test_stranger_cannot_read_application(self, client_for, busy, make_creator):
        stranger = make_creator(email="stranger@example.com")
        response = client_for(stranger).get("/api/v1/analytics/", {"application": busy.pk})
        assert response.status_code == 403

    def test_range_limits_the_chart_only(self, approved, creator):
        today = timezone.localdate()
        for day, clicks in ((today, 2), (today - timedelta(days=40), 5)):
            DailyAnalytics.objects.create(
                application=approved, offer=approved.offer, creator=creator, date=day, clicks=clicks,
            )
        recent = AnalyticsService.for_creator(creator, "30d")
        everything = AnalyticsService.for_creator(creator, "all")
        assert [point["clicks"] for point in recent["chart"]] == [2]
        assert [point["clicks"] for point in everything["chart"]] == [5, 2]
        assert recent["total_clicks"] == everything["total_clicks"] == 7

    def test_unknown_range(self, client_for, creator):
        response = client_for(creator).get("/api/v1/analytics/", {"range": "1y"})
        assert response.status_code == 400


@pytest.mark.django_db
class TestDashboardStats:

    def test_creator_stats(self, client_for, approved, creator, company_user, make_offer):
        other = make_offer(title="Acme Desk")
        Application.objects.create(creator=creator, offer=other)
        conversation, _ = MessagingService.start_conversation(creator, approved.pk)
        MessagingService.send_message(conversation, company_user, "Welcome aboard")
        AnalyticsService.record_conversion(approved, company_user, Decimal("100"))

        data = client_for(creator).get("/api/v1/creator/stats/").data
        assert data["active_offers"] == 1
        assert data["pending_applications"] == 1
        assert data["unread_messages"] == 1
        assert data["total_earnings"] == "10.00"
        assert data["monthly_earnings"] == "10.00"
        assert data["total_clicks"] == 0

    def test_company_stats(self, client_for, approved, company_user, make_offer):
        make_offer(title="Acme Draft", status=Offer.Status.DRAFT)
        data = client_for(company_user).get("/api/v1/company/stats/").data
        assert data == {
            "active_creators": 1,
            "pending_applications": 0,
            "live_offers": 1,
            "draft_offers": 1,
            "total_applications": 1,
            "total_clicks": 0,
            "conversions": 0,
        }

    def test_roles_are_enforced(self, client_for, creator, company_user):
        assert client_for(company_user).get("/api/v1/creator/stats/").status_code == 403
        assert client_for(creator).get("/api/v1/company/stats/").status_code == 403

"""
Tests for the admin console: approvals, enforcement, settings and audit trail

Run with: python -m pytest administration/tests -v
"""

from decimal import Decimal

import pytest

from administration.models import AuditLog, PlatformSetting
from administration.services import AdminService, AuditService
from core.exceptions import ConflictError, ValidationError
from notifications.models import Notification, NotificationType
from offers.models import Offer
from payments import fees
from users.models import CompanyProfile


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def pending_company(make_company):
    return make_company(email="pending@example.com", status=CompanyProfile.Status.PENDING).company_profile


@pytest.mark.django_db
class TestAdminService:

    def test_approve_company_notifies(self, pending_company):
        company = AdminService.approve_company(pending_company)
        assert company.status == CompanyProfile.Status.APPROVED
        assert company.approved_at is not None
        assert Notification.objects.filter(
            user=company.user, type=NotificationType.REGISTRATION_APPROVED,
        ).exists()

    def test_approve_twice_conflicts(self, company):
        with pytest.raises(ConflictError):
            AdminService.approve_company(company)

    def test_reject_requires_reason(self, pending_company):
        with pytest.raises(ValidationError):
            AdminService.reject_company(pending_company, "  ")

    def test_suspend_and_unsuspend(self, company):
        company = AdminService.suspend_company(company, "Chargebacks")
        assert company.status == CompanyProfile.Status.SUSPENDED
        with pytest.raises(ConflictError):
            AdminService.suspend_company(company)
        assert AdminService.unsuspend_company(company).status == CompanyProfile.Status.APPROVED

    def test_company_fee_bounds(self, company):
        assert AdminService.set_company_fee(company, "0.05").custom_platform_fee_percentage == Decimal("0.05")
        with pytest.raises(ValidationError):
            AdminService.set_company_fee(company, "0.75")
        assert AdminService.set_company_fee(company, None).custom_platform_fee_percentage is None

    def test_admin_accounts_cannot_be_banned(self, admin_user):
        with pytest.raises(ConflictError):
            AdminService.set_account_status(admin_user, "banned")

    def test_fee_setting_is_validated_and_categorised(self, admin_user):
        setting, created, old = AdminService.upsert_setting(admin_user, fees.PLATFORM_FEE_KEY, "5%")
        assert created is True
        assert old is None
        assert setting.category == "fees"
        with pytest.raises(ValidationError):
            AdminService.upsert_setting(admin_user, fees.PLATFORM_FEE_KEY, "80")

    def test_upsert_keeps_description(self, admin_user):
        AdminService.upsert_setting(admin_user, "support_email", "help@example.com", "Where users write to", "general")
        setting, created, old = AdminService.upsert_setting(admin_user, "support_email", "team@example.com")
        assert created is False
        assert old == "help@example.com"
        assert setting.description == "Where users write to"

    def test_audit_log_stringifies_values(self, admin_user):
        entry = AuditService.log(admin_user, "set_company_fee", "company", 7, {"new": Decimal("0.05")})
        assert entry.changes == {"new": "0.05"}
        assert entry.entity_id == "7"

    def test_dashboard_stats(self, pending_company, offer, creator):
        stats = AdminService.dashboard_stats()
        assert stats["pending_companies"] == 1
        assert stats["live_offers"] == 1
        assert stats["users"]["creators"] == 1


@pytest.mark.django_db
class TestAdminAPI:

    def test_non_admin_forbidden(self, client_for, creator):
        assert client_for(creator).get("/api/v1/admin/stats/").status_code == 403

    def test_approve_company_is_audited(self, admin_client, admin_user, pending_company):
        response = admin_client.post(f"/api/v1/admin/companies/{pending_company.pk}/approve/")
        assert response.status_code == 200
        assert response.data["status"] == "approved"
        entry = AuditLog.objects.get(action="approve_company")
        assert entry.actor == admin_user
        assert entry.entity_id == str(pending_company.pk)

    def test_reject_company_needs_reason(self, admin_client, pending_company):
        response = admin_client.post(f"/api/v1/admin/companies/{pending_company.pk}/reject/", {}, format="json")
        assert response.status_code == 400
        assert not AuditLog.objects.exists()

    def test_set_company_fee(self, admin_client, company):
        response = admin_client.patch(
            f"/api/v1/admin/companies/{company.pk}/fee/", {"platform_fee_percentage": "0.0250"}, format="json",
        )
        assert response.status_code == 200
        assert response.data["custom_platform_fee_percentage"] == "0.0250"
        assert AuditLog.objects.get(action="set_company_fee").changes == {"old": None, "new": "0.0250"}

    def test_offer_moderation(self, admin_client, make_offer):
        offer = make_offer(status=Offer.Status.PENDING_REVIEW)
        response = admin_client.post(f"/api/v1/admin/offers/{offer.pk}/approve/")
        assert response.data["status"] == "approved"

        response = admin_client.post(
            f"/api/v1/admin/offers/{offer.pk}/request-edits/", {"notes": "Add a return policy"}, format="json",
        )
        assert response.data["edit_requests"][0]["notes"] == "Add a return policy"

        response = admin_client.post(f"/api/v1/admin/offers/{offer.pk}/remove/", {"reason": "Counterfeit"}, format="json")
        assert response.data["status"] == "archived"
        assert AuditLog.objects.filter(entity_type="offer").count() == 3

    def test_ban_creator(self, admin_client, creator):
        response = admin_client.post(f"/api/v1/admin/creators/{creator.pk}/ban/", {"reason": "Fake clicks"}, format="json")
        assert response.status_code == 200
        assert response.data["account_status"] == "banned"
        entry = AuditLog.objects.get(action="ban_creator")
        assert entry.changes == {"old": "active", "new": "banned"}
        assert entry.reason == "Fake clicks"

    def test_ban_rejects_non_creators(self, admin_client, company_user):
        assert admin_client.post(f"/api/v1/admin/creators/{company_user.pk}/ban/").status_code == 404

    def test_settings_round_trip(self, admin_client):
        response = admin_client.put("/api/v1/admin/settings/", {
            "key": "platform_fee_percentage", "value": "5", "reason": "Promo month",
        }, format="json")
        assert response.status_code == 201
        assert PlatformSetting.objects.get(key="platform_fee_percentage").value == "5"

        response = admin_client.put("/api/v1/admin/settings/", {"key": "platform_fee_percentage", "value": "6"}, format="json")
        assert response.status_code == 200
        assert AuditLog.objects.filter(entity_type="platform_setting").count() == 2

        listed = admin_client.get("/api/v1/admin/settings/?category=fees")
        assert [s["key"] for s in listed.data] == ["platform_fee_percentage"]
        assert admin_client.get("/api/v1/admin/settings/missing_key/").status_code == 404

    def test_broadcast_by_role(self, admin_client, creator, company_user):
        response = admin_client.post("/api/v1/admin/broadcast/", {
            "title": "Maintenance", "message": "Down at midnight", "role": "creator",
        }, format="json")
        assert response.data == {"sent": 1}
        assert Notification.objects.filter(type=NotificationType.SYSTEM_ANNOUNCEMENT, user=creator).exists()
        assert not Notification.objects.filter(type=NotificationType.SYSTEM_ANNOUNCEMENT, user=company_user).exists()

    def test_audit_log_listing(self, admin_client, pending_company):
        admin_client.post(f"/api/v1/admin/companies/{pending_company.pk}/approve/")
        response = admin_client.get("/api/v1/admin/audit-logs/?entity_type=company")
        assert response.data["count"] == 1
        assert response.data["results"][0]["action"] == "approve_company"

"""
Tests for the offer lifecycle, discovery and favourites

Run with: python -m pytest offers/tests -v
"""

from decimal import Decimal

import pytest

from core.exceptions import AuthorizationError, ConflictError, ValidationError
from notifications.models import Notification
from offers.models import Offer
from offers.services import OfferService
from users.models import CompanyProfile

OFFER_DATA = {
    "title": "Acme Desk Fan",
    "product_name": "Desk Fan",
    "short_description": "Quiet USB fan",
    "full_description": "A quiet USB desk fan with three speeds.",
    "primary_niche": "tech",
    "product_url": "https://acme.example.com/fan",
    "commission_type": Offer.CommissionType.PER_SALE,
    "commission_percentage": Decimal("12.50"),
}


class TestCommissionValidation:

    @pytest.mark.parametrize("commission_type,amount,percentage", [
        (Offer.CommissionType.PER_SALE, None, Decimal("10")),
        (Offer.CommissionType.PER_LEAD, Decimal("5"), None),
        (Offer.CommissionType.HYBRID, None, Decimal("5")),
        (Offer.CommissionType.MONTHLY_RETAINER, Decimal("500"), None),
    ])
    def test_valid(self, commission_type, amount, percentage):
        OfferService.validate_commission(commission_type, amount, percentage)

    @pytest.mark.parametrize("commission_type,amount,percentage", [
        (Offer.CommissionType.PER_SALE, Decimal("5"), None),
        (Offer.CommissionType.PER_CLICK, None, None),
        (Offer.CommissionType.PER_SALE, None, Decimal("101")),
        (Offer.CommissionType.PER_LEAD, Decimal("-1"), None),
        ("barter", Decimal("5"), None),
    ])
    def test_invalid(self, commission_type, amount, percentage):
        with pytest.raises(ValidationError):
            OfferService.validate_commission(commission_type, amount, percentage)


@pytest.mark.django_db
class TestOfferLifecycle:

    def test_create_goes_to_review_and_alerts_admins(self, company, admin_user):
        offer = OfferService.create(company, dict(OFFER_DATA))
        assert offer.status == Offer.Status.PENDING_REVIEW
        assert Notification.objects.filter(user=admin_user, title="Offer awaiting review").exists()

    def test_draft_then_submit(self, company, company_user):
        offer = OfferService.create(company, dict(OFFER_DATA), as_draft=True)
        assert offer.status == Offer.Status.DRAFT
        offer = OfferService.submit_for_review(offer, company_user)
        assert offer.status == Offer.Status.PENDING_REVIEW
        with pytest.raises(ConflictError):
            OfferService.submit_for_review(offer, company_user)

    def test_editing_reviewed_field_requires_new_review(self, offer, company_user):
        offer = OfferService.update(offer, company_user, {"commission_percentage": Decimal("15")})
        assert offer.status == Offer.Status.PENDING_REVIEW

    def test_editing_other_field_keeps_offer_live(self, offer, company_user):
        offer = OfferService.update(offer, company_user, {"minimum_followers": 1000})
        assert offer.status == Offer.Status.APPROVED

    def test_other_company_cannot_edit(self, offer, make_company):
        rival = make_company(email="rival@example.com")
        with pytest.raises(AuthorizationError):
            OfferService.update(offer, rival, {"title": "Mine now"})

    def test_pause_and_resume(self, offer, company_user):
        assert OfferService.pause(offer, company_user).status == Offer.Status.PAUSED
        with pytest.raises(ConflictError):
            OfferService.pause(offer, company_user)
        assert OfferService.resume(offer, company_user).status == Offer.Status.APPROVED

    def test_cannot_delete_with_active_creators(self, offer, application, company_user):
        application.status = application.Status.APPROVED
        application.save()
        with pytest.raises(ConflictError):
            OfferService.delete(offer, company_user)

    def test_reject_archives(self, make_offer):
        offer = OfferService.reject(make_offer(status=Offer.Status.PENDING_REVIEW), "Misleading claims")
        assert offer.status == Offer.Status.ARCHIVED
        assert offer.rejection_reason == "Misleading claims"

    def test_only_live_offers_can_be_featured(self, make_offer):
        with pytest.raises(ConflictError):
            OfferService.set_featured(make_offer(status=Offer.Status.PAUSED), True)

    def test_first_video_is_primary(self, offer, company_user):
        first = OfferService.add_video(offer, company_user, {"title": "Demo", "video_url": "https://youtu.be/1"})
        second = OfferService.add_video(offer, company_user, {"title": "Unboxing", "video_url": "https://youtu.be/2"})
        assert first.is_primary is True
        assert second.is_primary is False
        OfferService.delete_video(first, company_user)
        second.refresh_from_db()
        assert second.is_primary is True


@pytest.mark.django_db
class TestDiscovery:

    def test_recommended_by_niche(self, creator, make_offer):
        tech = make_offer(title="Gadget")
        make_offer(title="Lipstick", primary_niche="beauty")
        assert [o.pk for o in OfferService.recommended_for(creator)] == [tech.pk]

    def test_browse_hides_suspended_companies(self, client_for, creator, offer, company):
        company.status = CompanyProfile.Status.SUSPENDED
        company.save()
        response = client_for(creator).get("/api/v1/offers/")
        assert response.data["count"] == 0
        assert client_for(creator).get(f"/api/v1/offers/{offer.pk}/").status_code == 404

    def test_browse_filters(self, client_for, creator, make_offer):
        make_offer(title="Gaming Chair", primary_niche="gaming", allowed_platforms=["youtube"])
        make_offer(title="Smart Lamp", allowed_platforms=["tiktok"])
        client = client_for(creator)
        assert client.get("/api/v1/offers/?niche=gaming").data["count"] == 1
        assert client.get("/api/v1/offers/?platform=TikTok").data["results"][0]["title"] == "Smart Lamp"
        assert client.get("/api/v1/offers/?min_commission=abc").status_code == 400

    def test_detail_counts_views(self, client_for, creator, offer):
        response = client_for(creator).get(f"/api/v1/offers/{offer.pk}/")
        assert response.data["view_count"] == 1
        assert response.data["is_favorite"] is False
        assert response.data["application_status"] is None

    def test_owner_view_is_not_counted(self, client_for, company_user, offer):
        assert client_for(company_user).get(f"/api/v1/offers/{offer.pk}/").data["view_count"] == 0


@pytest.mark.django_db
class TestOfferAPI:

    def test_company_creates_draft(self, client_for, company_user):
        response = client_for(company_user).post("/api/v1/company/offers/", {**OFFER_DATA, "draft": True}, format="json")
        assert response.status_code == 201
        assert response.data["status"] == "draft"

    def test_pending_company_cannot_publish(self, client_for, make_company):
        pending = make_company(email="new@example.com", status=CompanyProfile.Status.PENDING)
        client = client_for(pending)
        assert client.post("/api/v1/company/offers/", OFFER_DATA, format="json").status_code == 403
        assert client.get("/api/v1/company/offers/").status_code == 200

    def test_creator_cannot_create(self, client_for, creator):
        assert client_for(creator).post("/api/v1/company/offers/", OFFER_DATA, format="json").status_code == 403

    def test_favorite_toggle(self, client_for, creator, offer):
        client = client_for(creator)
        assert client.post(f"/api/v1/favorites/{offer.pk}/").status_code == 201
        assert client.post(f"/api/v1/favorites/{offer.pk}/").status_code == 200
        assert client.get(f"/api/v1/favorites/{offer.pk}/").data == {"is_favorite": True}
        assert client.delete(f"/api/v1/favorites/{offer.pk}/").status_code == 204
        assert client.delete(f"/api/v1/favorites/{offer.pk}/").status_code == 404

"""
Tests for offer applications, approval and completion

Run with: python -m pytest applications/tests -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from applications.models import Application
from applications.services import ApplicationService, build_tracking_code
from applications.tasks import auto_approve_applications
from core.exceptions import AuthorizationError, ConflictError, ValidationError
from notifications.models import Notification, NotificationType
from offers.models import Offer
from payments.models import Payment, PaymentStatus
from reviews.models import Review


@pytest.mark.django_db
class TestApply:

    def test_apply_creates_pending_application(self, creator, offer, company_user):
        application = ApplicationService.apply(creator, offer.pk, message="Love this lamp")
        assert application.status == Application.Status.PENDING
        assert application.auto_approval_scheduled_at > timezone.now()
        offer.refresh_from_db()
        assert offer.application_count == 1
        assert Notification.objects.filter(user=company_user, type=NotificationType.NEW_APPLICATION).exists()

    def test_creator_without_platform_is_rejected(self, make_creator, offer):
        creator = make_creator(email="novideo@example.com", youtube_url="")
        with pytest.raises(ValidationError) as exc:
            ApplicationService.apply(creator, offer.pk)
        assert "Video platform required" in exc.value.message

    def test_offer_must_be_live(self, creator, make_offer):
        draft = make_offer(status=Offer.Status.DRAFT)
        with pytest.raises(ValidationError):
            ApplicationService.apply(creator, draft.pk)

    def test_one_application_per_offer(self, creator, offer):
        ApplicationService.apply(creator, offer.pk)
        with pytest.raises(ConflictError):
            ApplicationService.apply(creator, offer.pk)


@pytest.mark.django_db
class TestReview:

    def test_approve_issues_tracking_link(self, application, company_user, creator):
        application = ApplicationService.approve(application, company_user)
        assert application.status == Application.Status.APPROVED
        assert application.tracking_code == f"CR-{creator.pk}-{application.offer_id}-{application.pk}"
        assert application.tracking_link.endswith(f"/go/{application.tracking_code}")
        assert Notification.objects.filter(user=creator, type=NotificationType.APPLICATION_STATUS_CHANGE).exists()

    def test_tracking_code_segments_are_truncated(self, application):
        application.creator_id = 1234567890123
        assert build_tracking_code(application).split("-")[1] == "12345678"

    def test_other_company_cannot_approve(self, application, make_company):
        with pytest.raises(AuthorizationError):
            ApplicationService.approve(application, make_company(email="rival@example.com"))

    def test_reject_stores_reason(self, application, company_user):
        application = ApplicationService.reject(application, company_user, "Audience mismatch")
        assert application.status == Application.Status.REJECTED
        assert application.rejection_reason == "Audience mismatch"

    def test_cannot_approve_rejected(self, application, company_user):
        ApplicationService.reject(application, company_user)
        with pytest.raises(ConflictError):
            ApplicationService.approve(application, company_user)

    def test_auto_approval_task(self, application):
        Application.objects.filter(pk=application.pk).update(
            auto_approval_scheduled_at=timezone.now() - timedelta(minutes=1),
        )
        assert auto_approve_applications() == 1
        application.refresh_from_db()
        assert application.status == Application.Status.APPROVED
        assert application.tracking_code

    def test_auto_approval_waits_for_schedule(self, application):
        assert ApplicationService.auto_approve_due() == 0

    def test_auto_approval_skips_paused_offers(self, application, offer):
        Offer.objects.filter(pk=offer.pk).update(status=Offer.Status.PAUSED)
        assert ApplicationService.auto_approve_due(timezone.now() + timedelta(hours=1)) == 0


@pytest.mark.django_db
class TestComplete:

    def test_complete_creates_payment_and_prompts_review(self, application, company_user):
        ApplicationService.approve(application, company_user)
        result = ApplicationService.complete(application, company_user, Decimal("500"))
        assert result["application"].status == Application.Status.COMPLETED
        assert result["payment"].gross_amount == Decimal("50.00")
        assert result["payment"].status == PaymentStatus.PENDING
        assert result["prompt_review"] is True

    def test_no_prompt_when_already_reviewed(self, application, company_user, creator, company):
        ApplicationService.approve(application, company_user)
        Review.objects.create(
            application=application, creator=creator, company=company, review_text="Great", overall_rating=5,
        )
        result = ApplicationService.complete(application, company_user)
        assert result["prompt_review"] is False

    def test_pending_cannot_complete(self, application, company_user):
        with pytest.raises(ValidationError):
            ApplicationService.complete(application, company_user)
        assert not Payment.objects.exists()

    def test_status_patch_pauses_and_resumes(self, application, company_user):
        ApplicationService.approve(application, company_user)
        application = ApplicationService.set_status(application, company_user, "paused")
        assert application.status == Application.Status.PAUSED
        application = ApplicationService.set_status(application, company_user, "active")
        assert application.status == Application.Status.ACTIVE


@pytest.mark.django_db
class TestTrackingRedirect:

    @pytest.fixture
    def approved(self, application, company_user):
        return ApplicationService.approve(application, company_user)

    def test_redirects_to_product_and_records_click(self, client, approved, offer):
        response = client.get(
            f"/go/{approved.tracking_code}",
            {"utm_source": "youtube"},
            HTTP_USER_AGENT="Mozilla/5.0",
            REMOTE_ADDR="::ffff:203.0.113.9",
        )
        assert response.status_code == 302
        assert response["Location"] == offer.product_url
        click = approved.clicks.get()
        assert click.ip_address == "203.0.113.9"
        assert click.utm_source == "youtube"
        assert click.fraud_score == 0

    def test_unknown_code_is_404(self, client, db):
        response = client.get("/go/CR-nope")
        assert response.status_code == 404

    def test_bot_and_rapid_clicks_are_scored(self, client, approved):
        for _ in range(4):
            client.get(f"/go/{approved.tracking_code}", HTTP_USER_AGENT="curl/8.0")
        latest = approved.clicks.order_by("-id").first()
        assert latest.fraud_score == 100
        assert "bot_user_agent" in latest.fraud_flags
        assert "rapid_repeat" in latest.fraud_flags

    def test_third_click_from_one_ip_is_rapid(self, client, approved):
        for _ in range(3):
            client.get(f"/go/{approved.tracking_code}", HTTP_USER_AGENT="Mozilla/5.0", REMOTE_ADDR="203.0.113.9")
        first, second, third = approved.clicks.order_by("id")
        assert "rapid_repeat" not in second.fraud_flags
        assert second.fraud_score == 0
        assert third.fraud_flags == "rapid_repeat"
        assert third.fraud_score == 40


@pytest.mark.django_db
class TestApplicationAPI:

    def test_creator_applies(self, client_for, creator, offer):
        response = client_for(creator).post(
            "/api/v1/applications/", {"offer_id": offer.pk, "message": "Hi"}, format="json",
        )
        assert response.status_code == 201
        assert response.data["status"] == "pending"

    def test_company_cannot_apply(self, client_for, company_user, offer):
        response = client_for(company_user).post("/api/v1/applications/", {"offer_id": offer.pk}, format="json")
        assert response.status_code == 403

    def test_duplicate_is_conflict(self, client_for, creator, offer, application):
        response = client_for(creator).post("/api/v1/applications/", {"offer_id": offer.pk}, format="json")
        assert response.status_code == 409

    def test_company_lists_applications(self, client_for, company_user, application):
        response = client_for(company_user).get("/api/v1/company/applications/")
        assert response.status_code == 200

    def test_complete_endpoint(self, client_for, company_user, application):
        client = client_for(company_user)
        client.post(f"/api/v1/applications/{application.pk}/approve/")
        response = client.post(f"/api/v1/applications/{application.pk}/complete/", {}, format="json")
        assert response.status_code == 200
        assert response.data["payment"]["status"] == "pending"
        assert response.data["prompt_review"] is True

"""
Tests for company reviews
"""

import pytest

from applications.models import Application
from core.exceptions import AuthorizationError, ConflictError, ValidationError
from moderation.models import ContentFlag
from notifications.models import Notification, NotificationType
from reviews.models import Review
from reviews.services import ReviewService


@pytest.fixture
def completed(application):
    Application.objects.filter(pk=application.pk).update(status=Application.Status.COMPLETED)
    application.refresh_from_db()
    return application


@pytest.mark.django_db
class TestReviewService:

    def test_create_notifies_company(self, creator, completed, company_user):
        review = ReviewService.create(creator, completed, {"review_text": "Paid on time", "overall_rating": 5})
        assert review.company == completed.offer.company
        assert Notification.objects.filter(user=company_user, type=NotificationType.REVIEW_RECEIVED).exists()

    def test_pending_application_cannot_be_reviewed(self, creator, application):
        with pytest.raises(ValidationError):
            ReviewService.create(creator, application, {"overall_rating": 4})

    def test_one_review_per_application(self, creator, completed):
        ReviewService.create(creator, completed, {"overall_rating": 4})
        with pytest.raises(ConflictError):
            ReviewService.create(creator, completed, {"overall_rating": 2})

    def test_only_own_application(self, make_creator, completed):
        with pytest.raises(AuthorizationError):
            ReviewService.create(make_creator(email="x@example.com"), completed, {"overall_rating": 1})

    def test_flagged_text_is_still_published(self, creator, completed):
        review = ReviewService.create(
            creator, completed, {"review_text": "Total SCAM, never paid", "overall_rating": 1},
        )
        flag = ContentFlag.objects.get(content_type="review", content_id=str(review.pk))
        assert "scam" in flag.matched_keywords
        assert Review.objects.filter(pk=review.pk, is_hidden=False).exists()

    def test_company_responds(self, creator, completed, company_user):
        review = ReviewService.create(creator, completed, {"overall_rating": 3})
        review = ReviewService.respond(review, company_user, "Thanks for the feedback")
        assert review.company_response == "Thanks for the feedback"
        assert review.company_responded_at is not None

    def test_admin_edit_marks_edited(self, creator, completed):
        review = ReviewService.create(creator, completed, {"overall_rating": 3})
        review = ReviewService.admin_edit(review, {"overall_rating": 4, "company": None})
        assert review.overall_rating == 4
        assert review.is_edited is True


@pytest.mark.django_db
class TestReviewAPI:

    def test_create_over_api(self, client_for, creator, completed):
        response = client_for(creator).post("/api/v1/reviews/", {
            "application_id": completed.pk, "overall_rating": 5, "review_text": "Great partner",
        }, format="json")
        assert response.status_code == 201

    def test_rating_out_of_range(self, client_for, creator, completed):
        response = client_for(creator).post("/api/v1/reviews/", {
            "application_id": completed.pk, "overall_rating": 6,
        }, format="json")
        assert response.status_code == 400

    def test_public_list_hides_hidden_reviews(self, client_for, creator, completed, company):
        review = ReviewService.create(creator, completed, {"overall_rating": 2})
        ReviewService.set_hidden(review, True)
        response = client_for(creator).get(f"/api/v1/companies/{company.pk}/reviews/")
        assert response.status_code == 200
        assert response.data["reviews"] == []
        assert response.data["summary"]["review_count"] == 0

    def test_summary_averages_visible_reviews(self, client_for, make_creator, make_offer, company):
        for i, rating in enumerate((5, 4)):
            author = make_creator(email=f"author{i}@example.com")
            app = Application.objects.create(
                creator=author, offer=make_offer(title=f"Offer {i}"), status=Application.Status.COMPLETED,
            )
            ReviewService.create(author, app, {"overall_rating": rating})
        response = client_for(author).get(f"/api/v1/companies/{company.pk}/reviews/")
        assert response.data["summary"]["average_rating"] == 4.5
        assert response.data["summary"]["review_count"] == 2

    def test_offer_reviews_list_the_company_reviews(self, client_for, creator, completed, make_offer):
        ReviewService.create(creator, completed, {"overall_rating": 4, "review_text": "Paid on time"})
        other_offer = make_offer(title="Acme Desk")
        response = client_for(creator).get(f"/api/v1/offers/{other_offer.pk}/reviews/")
        assert response.status_code == 200
        assert [r["overall_rating"] for r in response.data["reviews"]] == [4]
        assert response.data["summary"]["review_count"] == 1

    def test_offer_reviews_unknown_offer(self, client_for, creator):
        response = client_for(creator).get("/api/v1/offers/999999/reviews/")
        assert response.status_code == 404

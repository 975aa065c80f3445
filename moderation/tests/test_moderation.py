"""
Tests for keyword screening and the flag review queue
"""

import pytest

from core.exceptions import ConflictError
from moderation.models import BannedKeyword, ContentFlag
from moderation.repositories import banned_keyword_repo
from moderation.services import ModerationService, keyword_pattern
from notifications.models import Notification, NotificationType


class TestKeywordPattern:

    def test_whole_word_only(self):
        assert keyword_pattern("scam").search("this is a scam!")
        assert not keyword_pattern("scam").search("scamper away")

    def test_phrase_tolerates_spacing_and_case(self):
        assert keyword_pattern("free money").search("Get FREE   money now")


@pytest.mark.django_db
class TestCheckContent:

    def test_defaults_are_seeded(self):
        result = ModerationService.check_content("Guaranteed money, no fraud here")
        assert result.is_flagged
        assert set(result.matched_keywords) == {"guaranteed money", "fraud"}
        assert result.severity == 5
        assert BannedKeyword.objects.count() == 5

    def test_clean_text(self):
        assert not ModerationService.check_content("Can you post on Friday?").is_flagged

    def test_inactive_keywords_are_ignored(self):
        banned_keyword_repo.seed_defaults()
        BannedKeyword.objects.filter(keyword="scam").update(is_active=False)
        assert not ModerationService.check_content("scam").is_flagged

    def test_empty_and_non_text(self):
        assert not ModerationService.check_content("").is_flagged
        assert not ModerationService.check_content(None).is_flagged


@pytest.mark.django_db
class TestFlagging:

    def test_high_severity_alerts_admins(self, creator, admin_user):
        flag = ModerationService.moderate("message", 10, creator, "This is fraud")
        assert flag.severity == 5
        assert flag.status == ContentFlag.Status.PENDING
        assert Notification.objects.filter(user=admin_user, type=NotificationType.CONTENT_FLAGGED).exists()

    def test_low_severity_only_queues(self, creator, admin_user):
        ModerationService.moderate("message", 11, creator, "get rich quick")
        assert ContentFlag.objects.count() == 1
        assert not Notification.objects.filter(user=admin_user).exists()

    def test_clean_text_creates_no_flag(self, creator):
        assert ModerationService.moderate("message", 12, creator, "hello") is None

    def test_review_notifies_author(self, creator, admin_user):
        flag = ModerationService.moderate("review", 3, creator, "scam")
        flag = ModerationService.review_flag(flag, admin_user, "action_taken", "Warned", "Content removed")
        assert flag.reviewed_by == admin_user
        assert Notification.objects.filter(user=creator, type=NotificationType.CONTENT_FLAGGED).exists()
        with pytest.raises(ConflictError):
            ModerationService.review_flag(flag, admin_user, "dismissed")


@pytest.mark.django_db
class TestModerationAPI:

    def test_admin_adds_keyword(self, client_for, admin_user):
        response = client_for(admin_user).post("/api/v1/admin/moderation/keywords/", {
            "keyword": "  Crypto   Pump ", "category": "spam", "severity": 4,
        }, format="json")
        assert response.status_code == 201
        assert response.data["keyword"] == "crypto pump"
        assert admin_user.audit_logs.filter(action="create_keyword").exists()

    def test_severity_bounds(self, client_for, admin_user):
        response = client_for(admin_user).post("/api/v1/admin/moderation/keywords/", {
            "keyword": "spammy", "severity": 9,
        }, format="json")
        assert response.status_code == 400

    def test_non_admin_forbidden(self, client_for, creator):
        response = client_for(creator).get("/api/v1/admin/moderation/flags/")
        assert response.status_code == 403

    def test_review_flag_endpoint(self, client_for, admin_user, creator):
        flag = ModerationService.moderate("message", 1, creator, "fraud")
        response = client_for(admin_user).post(
            f"/api/v1/admin/moderation/flags/{flag.pk}/review/", {"status": "dismissed"}, format="json",
        )
        assert response.status_code == 200
        assert response.data["status"] == "dismissed"

"""
Tests for notification delivery, deep links and preferences

Run with: python -m pytest notifications/tests -v
"""

import pytest
from django.core import mail

from notifications.links import build_link_url
from notifications.models import Notification, NotificationPreference, NotificationType
from notifications.services import NotificationService


class TestLinks:

    @pytest.mark.parametrize("notification_type,role,data,expected", [
        (NotificationType.NEW_MESSAGE, "company", {"conversation_id": 4}, "/company/messages/4"),
        (NotificationType.NEW_MESSAGE, "creator", {"application_id": 9}, "/messages?application=9"),
        (NotificationType.PAYMENT_PENDING, "admin", {"payment_id": 3}, "/admin/payments"),
        (NotificationType.PAYMENT_APPROVED, "creator", {"payment_id": 3}, "/payments/3"),
        (NotificationType.NEW_APPLICATION, "company", {"contract_id": 2}, "/company/retainers/2"),
        (NotificationType.REVISION_REQUESTED, "creator", {"contract_id": 2, "deliverable_id": 8},
         "/retainer-contracts/2/deliverables/8"),
        (NotificationType.OFFER_APPROVED, "company", {"offer_id": 5}, "/company/offers/5"),
        (NotificationType.CONTENT_FLAGGED, "admin", {}, "/admin/moderation"),
        (NotificationType.SYSTEM_ANNOUNCEMENT, "creator", {"link_url": "/news"}, "/news"),
    ])
    def test_build_link_url(self, notification_type, role, data, expected):
        assert build_link_url(notification_type, role, data) == expected


@pytest.mark.django_db
class TestNotificationService:

    def test_send_stores_metadata_and_link(self, creator):
        notification = NotificationService.send(
            creator, NotificationType.PAYMENT_APPROVED, "Paid", "Your payment was approved", {"payment_id": 12},
        )
        assert notification.link_url == "/payments/12"
        assert notification.metadata == {"payment_id": 12}
        assert notification.is_read is False

    def test_email_queued_after_commit(self, creator, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            NotificationService.send(creator, NotificationType.NEW_MESSAGE, "New message", "Hi")
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [creator.email]

    def test_category_switch_blocks_email(self, creator, django_capture_on_commit_callbacks):
        NotificationPreference.objects.create(user=creator, email_new_message=False)
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            NotificationService.send(creator, NotificationType.NEW_MESSAGE, "New message", "Hi")
        assert callbacks == []
        assert Notification.objects.filter(user=creator).count() == 1

    def test_in_app_off_still_emails(self, creator, django_capture_on_commit_callbacks):
        NotificationPreference.objects.create(user=creator, in_app_notifications=False)
        with django_capture_on_commit_callbacks(execute=True):
            result = NotificationService.send(creator, NotificationType.SYSTEM_ANNOUNCEMENT, "Hello", "World")
        assert result is None
        assert not Notification.objects.exists()
        assert len(mail.outbox) == 1

    def test_master_email_switch(self):
        prefs = NotificationPreference(email_notifications=False)
        assert NotificationService.should_email(NotificationType.NEW_MESSAGE, prefs) is False
        assert NotificationService.should_email(NotificationType.NEW_MESSAGE, None) is True

    def test_notify_admins(self, admin_user, creator):
        sent = NotificationService.notify_admins(NotificationType.CONTENT_FLAGGED, "Flag", "Check this")
        assert sent == 1
        assert Notification.objects.get().user == admin_user


@pytest.mark.django_db
class TestNotificationAPI:

    @pytest.fixture
    def notes(self, creator):
        return [
            NotificationService.send(creator, NotificationType.SYSTEM_ANNOUNCEMENT, f"Note {i}", "body")
            for i in range(3)
        ]

    def test_unread_count_and_read_all(self, client_for, creator, notes):
        client = client_for(creator)
        assert client.get("/api/v1/notifications/unread-count/").data == {"count": 3}
        client.post(f"/api/v1/notifications/{notes[0].pk}/read/")
        assert client.get("/api/v1/notifications/unread-count/").data == {"count": 2}
        assert client.post("/api/v1/notifications/read-all/").data == {"updated": 2}

    def test_list_is_cursor_paginated(self, client_for, creator, notes):
        response = client_for(creator).get("/api/v1/notifications/?unread=1")
        assert sorted(n["title"] for n in response.data["results"]) == ["Note 0", "Note 1", "Note 2"]
        assert response.data["next"] is None

    def test_other_users_notification_is_404(self, client_for, company_user, notes):
        assert client_for(company_user).get(f"/api/v1/notifications/{notes[0].pk}/").status_code == 404

    def test_clear(self, client_for, creator, notes):
        assert client_for(creator).delete("/api/v1/notifications/clear/").data == {"deleted": 3}

    def test_preferences_patch(self, client_for, creator):
        response = client_for(creator).patch(
            "/api/v1/notifications/preferences/", {"email_payment": False}, format="json",
        )
        assert response.status_code == 200
        assert NotificationPreference.objects.get(user=creator).email_payment is False

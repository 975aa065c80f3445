"""
Notification Services
=====================

Single entry point for telling a user that something happened. Stores
the in-app notification and queues the email, each gated by the
recipient's preferences.
"""

from django.contrib.auth import get_user_model

from core.services import BaseService
from .links import build_link_url, PAYMENT_TYPES
from .models import NotificationType
from .repositories import notification_repo, preference_repo

User = get_user_model()

# Notification type → preference switch for email delivery
EMAIL_CATEGORY = {
    NotificationType.APPLICATION_STATUS_CHANGE.value: "email_application_status",
    NotificationType.NEW_MESSAGE.value: "email_new_message",
    **{t: "email_payment" for t in PAYMENT_TYPES},
    NotificationType.OFFER_APPROVED.value: "email_offer",
    NotificationType.OFFER_REJECTED.value: "email_offer",
    NotificationType.OFFER_EDIT_REQUESTED.value: "email_offer",
    NotificationType.OFFER_REMOVED.value: "email_offer",
    NotificationType.NEW_APPLICATION.value: "email_offer",
    NotificationType.REVIEW_RECEIVED.value: "email_review",
    NotificationType.SYSTEM_ANNOUNCEMENT.value: "email_system",
    NotificationType.REGISTRATION_APPROVED.value: "email_system",
    NotificationType.REGISTRATION_REJECTED.value: "email_system",
    NotificationType.ACCOUNT_STATUS_CHANGE.value: "email_system",
}


class NotificationService(BaseService):

    @classmethod
    def send(cls, user, notification_type, title: str, message: str, data: dict = None):
        """
        Notify ``user``.

        ``data`` carries the ids used to build the deep link
        (``application_id``, ``conversation_id``, ``payment_id``...) and is
        stored as the notification metadata. Returns the stored
        notification, or None when in-app delivery is switched off.
        """
        data = dict(data or {})
        notification_type = str(notification_type)
        link_url = build_link_url(notification_type, user.role, data)
        prefs = preference_repo.find_for_user(user)

        notification = None
        if prefs is None or prefs.in_app_notifications:
            notification = notification_repo.create(
                user=user,
                type=notification_type,
                title=title[:200],
                message=message,
                link_url=link_url,
                metadata=_json_safe(data),
            )

        if cls.should_email(notification_type, prefs):
            from .tasks import send_notification_email

            if notification is not None:
                kwargs = {"notification_id": notification.pk}
            else:
                kwargs = {"user_id": user.pk, "title": title, "message": message, "link_url": link_url}
            cls.on_commit(lambda: send_notification_email.delay(**kwargs))

        cls.logger.debug("Notified user %s: %s -> %s", user.pk, notification_type, link_url)
        return notification

    @classmethod
    def notify_admins(cls, notification_type, title: str, message: str, data: dict = None) -> int:
        admins = User.objects.filter(role=User.Role.ADMIN, is_active=True)
        count = 0
        for admin in admins:
            cls.send(admin, notification_type, title, message, data)
            count += 1
        return count

    @classmethod
    def broadcast(cls, title: str, message: str, link_url: str = "", role: str = None) -> int:
        """System announcement to every active user, optionally one role only."""
        users = User.objects.filter(is_active=True, account_status=User.AccountStatus.ACTIVE)
        if role:
            users = users.filter(role=role)
        count = 0
        for user in users.iterator():
            cls.send(user, NotificationType.SYSTEM_ANNOUNCEMENT, title, message, {"link_url": link_url or "/"})
            count += 1
        cls.logger.info("Broadcast '%s' to %d users", title, count)
        return count

    @staticmethod
    def should_email(notification_type: str, prefs) -> bool:
        if prefs is None:
            return True
        if not prefs.email_notifications:
            return False
        field = EMAIL_CATEGORY.get(notification_type)
        return getattr(prefs, field) if field else True


def _json_safe(data: dict) -> dict:
    return {key: value if isinstance(value, (int, float, bool, type(None), list, dict)) else str(value)
            for key, value in data.items()}

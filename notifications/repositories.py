"""
Notifications Repositories
==========================
"""

from django.db.models import QuerySet
from django.utils import timezone

from core.exceptions import NotFoundError
from core.repositories import BaseRepository
from .models import Notification, NotificationPreference


class NotificationRepository(BaseRepository[Notification]):
    """Notification data access."""

    model = Notification

    @classmethod
    def for_user(cls, user, unread_only: bool = False) -> QuerySet:
        qs = cls.model.objects.filter(user=user)
        if unread_only:
            qs = qs.filter(is_read=False)
        return qs

    @classmethod
    def get_for_user(cls, user, pk):
        notification = cls.model.objects.filter(pk=pk, user=user).first()
        if notification is None:
            raise NotFoundError("Notification not found", resource="notification")
        return notification

    @classmethod
    def unread_count(cls, user) -> int:
        return cls.model.objects.filter(user=user, is_read=False).count()

    @classmethod
    def mark_read(cls, notification) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=["is_read", "read_at"])
        return notification

    @classmethod
    def mark_all_read(cls, user) -> int:
        return cls.model.objects.filter(user=user, is_read=False).update(
            is_read=True, read_at=timezone.now(),
        )

    @classmethod
    def clear(cls, user) -> int:
        deleted, _ = cls.model.objects.filter(user=user).delete()
        return deleted


class NotificationPreferenceRepository(BaseRepository[NotificationPreference]):
    model = NotificationPreference

    @classmethod
    def get_for_user(cls, user) -> NotificationPreference:
        prefs, _ = cls.model.objects.get_or_create(user=user)
        return prefs

    @classmethod
    def find_for_user(cls, user):
        return cls.model.objects.filter(user=user).first()


notification_repo = NotificationRepository()
preference_repo = NotificationPreferenceRepository()

"""
Celery tasks for email delivery.

Both tasks retry SMTP and network failures three times, a minute apart.
"""

import logging
import smtplib

from celery import shared_task
from django.contrib.auth import get_user_model

from . import emails
from .models import Notification

logger = logging.getLogger(__name__)

EMAIL_RETRY = {"bind": True, "max_retries": 3, "default_retry_delay": 60, "ignore_result": True}


def _deliver_or_retry(task, to_email: str, subject: str, html: str, text: str):
    try:
        emails.deliver(to_email, subject, html, text)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Email to %s failed (attempt %d): %s", to_email, task.request.retries + 1, exc)
        raise task.retry(exc=exc)


@shared_task(name="notifications.tasks.send_email", **EMAIL_RETRY)
def send_email(self, to_email: str, title: str, message: str, link_url: str = "",
               link_label: str = "View details", name: str = ""):
    """Account emails (verification, password reset): no preferences footer."""
    subject, html, text = emails.render(
        name or to_email, title, message, link_url, link_label, preferences_footer=False,
    )
    _deliver_or_retry(self, to_email, subject, html, text)


@shared_task(name="notifications.tasks.send_notification_email", **EMAIL_RETRY)
def send_notification_email(self, notification_id: int = None, user_id: int = None,
                            title: str = "", message: str = "", link_url: str = ""):
    """
    Email a notification to its recipient.

    Pass the stored ``notification_id``; when the recipient has in-app
    notifications switched off nothing is stored, so the raw
    ``user_id``/``title``/``message``/``link_url`` are passed instead.
    """
    if notification_id is not None:
        notification = Notification.objects.select_related("user").filter(pk=notification_id).first()
        if notification is None:
            logger.info("Notification %s was deleted before its email went out", notification_id)
            return
        user = notification.user
        title, message, link_url = notification.title, notification.message, notification.link_url
    else:
        user = get_user_model().objects.filter(pk=user_id).first()
        if user is None:
            return

    subject, html, text = emails.render(user.display_name, title, message, link_url)
    _deliver_or_retry(self, user.email, subject, html, text)

"""
Email rendering and delivery.

Every outgoing email (notifications, email verification, password reset)
uses the ``notifications/email.html`` layout, with a plain-text part
derived from it. Relative links are made absolute against ``SITE_URL``.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "AffiliateXchange: "


def absolute_url(link: str) -> str:
    if not link or link.startswith(("http://", "https://")):
        return link
    return f"{settings.SITE_URL.rstrip('/')}/{link.lstrip('/')}"


def render(name: str, title: str, message: str, link_url: str = "",
           link_label: str = "View details", preferences_footer: bool = True):
    """Return ``(subject, html, text)``."""
    html = render_to_string("notifications/email.html", {
        "name": name,
        "title": title,
        "message": message,
        "link_url": absolute_url(link_url),
        "link_label": link_label,
        "settings_url": absolute_url("/settings/notifications") if preferences_footer else "",
    })
    text = "\n".join(line.strip() for line in strip_tags(html).splitlines() if line.strip())
    if link_url:
        text += f"\n\n{link_label}: {absolute_url(link_url)}"
    return f"{SUBJECT_PREFIX}{title}", html, text


def deliver(to_email: str, subject: str, html: str, text: str) -> None:
    """Send one email. SMTP errors propagate so the calling task can retry."""
    message = EmailMultiAlternatives(subject=subject, body=text, from_email=settings.DEFAULT_FROM_EMAIL, to=[to_email])
    message.attach_alternative(html, "text/html")
    message.send()
    logger.info("Email '%s' sent to %s", subject, to_email)

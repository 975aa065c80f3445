from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from affiliatexchange.config import config


def default_auto_approval_time():
    return timezone.now() + timedelta(minutes=config.platform.auto_approval_delay_minutes)


class Application(models.Model):
    """A creator's request to promote an offer."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        ACTIVE = "active", "Active"
        PAUSED = "paused", "Paused"
        COMPLETED = "completed", "Completed"
        REJECTED = "rejected", "Rejected"

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="applications",
    )
    offer = models.ForeignKey("offers.Offer", on_delete=models.CASCADE, related_name="applications")
    message = models.TextField(blank=True)
    preferred_commission = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    tracking_code = models.CharField(max_length=100, unique=True, null=True, blank=True)
    tracking_link = models.URLField(max_length=500, blank=True)
    rejection_reason = models.TextField(blank=True)

    auto_approval_scheduled_at = models.DateTimeField(default=default_auto_approval_time)
    approved_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "applications"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["creator", "offer"], name="unique_application_per_offer"),
        ]
        indexes = [
            models.Index(fields=["status", "auto_approval_scheduled_at"]),
        ]

    def __str__(self):
        return f"{self.creator_id} → {self.offer_id} ({self.status})"

    @property
    def is_working(self) -> bool:
        """Approved or active: the creator has a live tracking link."""
        return self.status in (self.Status.APPROVED, self.Status.ACTIVE)


class ClickEvent(models.Model):
    """One visit through a creator's tracking link."""

    # Clicks at or above this fraud score are kept but left out of analytics
    SUSPICIOUS_SCORE = 50

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="clicks")
    ip_address = models.CharField(max_length=64)
    user_agent = models.TextField(blank=True)
    referer = models.TextField(blank=True)
    utm_source = models.CharField(max_length=255, blank=True)
    utm_medium = models.CharField(max_length=255, blank=True)
    utm_campaign = models.CharField(max_length=255, blank=True)
    utm_term = models.CharField(max_length=255, blank=True)
    utm_content = models.CharField(max_length=255, blank=True)
    fraud_score = models.PositiveSmallIntegerField(default=0)
    fraud_flags = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "click_events"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["application", "-created_at"]),
            models.Index(fields=["ip_address", "-created_at"]),
        ]

    def __str__(self):
        return f"Click {self.pk} on {self.application_id}"

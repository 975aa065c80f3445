from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    APPLICATION_STATUS_CHANGE = "application_status_change", "Application status change"
    NEW_MESSAGE = "new_message", "New message"
    PAYMENT_RECEIVED = "payment_received", "Payment received"
    PAYMENT_PENDING = "payment_pending", "Payment pending"
    PAYMENT_APPROVED = "payment_approved", "Payment approved"
    PAYMENT_DISPUTED = "payment_disputed", "Payment disputed"
    PAYMENT_DISPUTE_RESOLVED = "payment_dispute_resolved", "Payment dispute resolved"
    PAYMENT_REFUNDED = "payment_refunded", "Payment refunded"
    PAYMENT_FAILED = "payment_failed_insufficient_funds", "Payment failed"
    OFFER_APPROVED = "offer_approved", "Offer approved"
    OFFER_REJECTED = "offer_rejected", "Offer rejected"
    OFFER_EDIT_REQUESTED = "offer_edit_requested", "Offer edit requested"
    OFFER_REMOVED = "offer_removed", "Offer removed"
    NEW_APPLICATION = "new_application", "New application"
    REVIEW_RECEIVED = "review_received", "Review received"
    SYSTEM_ANNOUNCEMENT = "system_announcement", "System announcement"
    REGISTRATION_APPROVED = "registration_approved", "Registration approved"
    REGISTRATION_REJECTED = "registration_rejected", "Registration rejected"
    WORK_COMPLETION_APPROVAL = "work_completion_approval", "Work completion approval"
    DELIVERABLE_SUBMITTED = "deliverable_submitted", "Deliverable submitted"
    DELIVERABLE_REJECTED = "deliverable_rejected", "Deliverable rejected"
    REVISION_REQUESTED = "revision_requested", "Revision requested"
    CONTENT_FLAGGED = "content_flagged", "Content flagged"
    ACCOUNT_STATUS_CHANGE = "account_status_change", "Account status change"


class Notification(models.Model):
    """In-app notification shown in the bell menu."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=50, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    link_url = models.CharField(max_length=500, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"]),
            models.Index(fields=["user", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.type}: {self.title}"


class NotificationPreference(models.Model):
    """Per-user delivery switches; a missing row means everything is on."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_preferences",
    )
    email_notifications = models.BooleanField(default=True)
    in_app_notifications = models.BooleanField(default=True)
    email_application_status = models.BooleanField(default=True)
    email_new_message = models.BooleanField(default=True)
    email_payment = models.BooleanField(default=True)
    email_offer = models.BooleanField(default=True)
    email_review = models.BooleanField(default=True)
    email_system = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "notification_preferences"

    def __str__(self):
        return f"Notification preferences for {self.user_id}"

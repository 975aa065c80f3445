from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class BannedKeyword(models.Model):
    class Category(models.TextChoices):
        PROFANITY = "profanity", "Profanity"
        SPAM = "spam", "Spam"
        LEGAL = "legal", "Legal"
        HARASSMENT = "harassment", "Harassment"
        CUSTOM = "custom", "Custom"

    keyword = models.CharField(max_length=255, unique=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.CUSTOM)
    severity = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "banned_keywords"
        ordering = ["-severity", "keyword"]

    def __str__(self):
        return self.keyword


class ContentFlag(models.Model):
    """A message or review held for moderator review."""

    class ContentType(models.TextChoices):
        MESSAGE = "message", "Message"
        REVIEW = "review", "Review"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        REVIEWED = "reviewed", "Reviewed"
        DISMISSED = "dismissed", "Dismissed"
        ACTION_TAKEN = "action_taken", "Action taken"

    content_type = models.CharField(max_length=20, choices=ContentType.choices)
    content_id = models.CharField(max_length=64)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="content_flags",
    )
    flag_reason = models.TextField()
    matched_keywords = models.JSONField(default=list, blank=True)
    severity = models.PositiveSmallIntegerField(default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)
    action_taken = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "content_flags"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["content_type", "content_id"]),
        ]

    def __str__(self):
        return f"{self.content_type} {self.content_id} ({self.status})"

from django.conf import settings
from django.db import models


class Conversation(models.Model):
    """Chat thread between a creator and a company about one application."""

    application = models.OneToOneField(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="conversation",
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="creator_conversations",
    )
    company = models.ForeignKey(
        "users.CompanyProfile",
        on_delete=models.CASCADE,
        related_name="conversations",
    )
    offer = models.ForeignKey("offers.Offer", on_delete=models.CASCADE, related_name="conversations")
    last_message_at = models.DateTimeField(null=True, blank=True)
    creator_unread_count = models.PositiveIntegerField(default=0)
    company_unread_count = models.PositiveIntegerField(default=0)
    resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "conversations"
        ordering = ["-last_message_at", "-created_at"]

    def __str__(self):
        return f"Conversation {self.pk} (application {self.application_id})"

    @property
    def participant_ids(self) -> list:
        return [self.creator_id, self.company.user_id]

    def is_participant(self, user) -> bool:
        return user.id in self.participant_ids

    def other_participant_id(self, user_id):
        return self.company.user_id if user_id == self.creator_id else self.creator_id

    def unread_field_for(self, user_id) -> str:
        """Name of the unread counter belonging to ``user_id``'s side."""
        return "creator_unread_count" if user_id == self.creator_id else "company_unread_count"


class Message(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    content = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    is_read = models.BooleanField(default=False)
    deleted_for = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "messages"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["conversation", "created_at"]),
        ]

    def __str__(self):
        return f"Message {self.pk} in {self.conversation_id}"

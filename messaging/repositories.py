"""
Messaging Repositories
======================

Data-access layer for Conversation and Message.
"""

from django.db.models import F, QuerySet

from core.repositories import BaseRepository
from .models import Conversation, Message


class ConversationRepository(BaseRepository[Conversation]):
    model = Conversation

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("creator", "company", "company__user", "offer", "application")

    @classmethod
    def for_user(cls, user) -> QuerySet:
        """The user's conversations, most recent activity first."""
        qs = cls._base()
        if user.is_creator:
            qs = qs.filter(creator=user)
        elif user.is_company:
            qs = qs.filter(company__user=user)
        return qs.order_by(F("last_message_at").desc(nulls_last=True), "-created_at")

    @classmethod
    def get_for_application(cls, application):
        return cls._base().filter(application=application).first()

    @classmethod
    def for_company_with_messages(cls, company) -> QuerySet:
        return cls.model.objects.filter(company=company).select_related("company").prefetch_related("messages")


class MessageRepository(BaseRepository[Message]):
    model = Message

    @classmethod
    def visible_to(cls, conversation, user) -> list:
        """Oldest first, minus the ones ``user`` deleted for themselves."""
        messages = cls.model.objects.filter(conversation=conversation).select_related("sender").order_by("created_at")
        return [m for m in messages if user.id not in (m.deleted_for or [])]

    @classmethod
    def mark_read_from_others(cls, conversation, reader) -> int:
        return (
            cls.model.objects.filter(conversation=conversation, is_read=False)
            .exclude(sender=reader)
            .update(is_read=True)
        )


conversation_repo = ConversationRepository()
message_repo = MessageRepository()

"""
Messaging Services
==================

Creator/company conversations attached to an application. Messages sent
over REST or the WebSocket go through ``MessagingService.send_message``;
delivery to open sockets happens through the channel layer group
``user_<id>`` each connected user joins.
"""

import os
import uuid

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.files.storage import default_storage
from django.utils import timezone

from affiliatexchange.config import config
from applications.repositories import application_repo
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.services import BaseService
from moderation.services import ModerationService
from notifications.models import NotificationType
from notifications.services import NotificationService
from .models import Conversation, Message
from .repositories import conversation_repo, message_repo

ALLOWED_UPLOAD_PREFIXES = ("image/", "video/")
ALLOWED_UPLOAD_TYPES = {"application/pdf"}
MAX_ATTACHMENTS = 10


def user_group(user_id) -> str:
    return f"user_{user_id}"


def broadcast(user_ids, payload: dict) -> None:
    """Push ``payload`` to every open socket of ``user_ids``."""
    layer = get_channel_layer()
    if layer is None:
        return
    for user_id in user_ids:
        async_to_sync(layer.group_send)(user_group(user_id), {"type": "chat.event", "payload": payload})


class MessagingService(BaseService):

    @classmethod
    def get_conversation_for(cls, conversation_id, user) -> Conversation:
        """The conversation, provided ``user`` takes part in it (admins see all)."""
        conversation = conversation_repo.get_by_id_or_none(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found", resource="conversation")
        if not (user.is_admin or conversation.is_participant(user)):
            raise AuthorizationError("You are not part of this conversation")
        return conversation

    @classmethod
    def start_conversation(cls, user, application_id) -> tuple:
        """Open the conversation for an application; returns ``(conversation, created)``."""
        application = application_repo.get_by_id(application_id)
        company = application.offer.company
        if user.id not in (application.creator_id, company.user_id):
            raise AuthorizationError("You can only message about your own applications")

        existing = conversation_repo.get_for_application(application)
        if existing is not None:
            return existing, False

        conversation, created = conversation_repo.get_or_create(
            application=application,
            defaults={"creator_id": application.creator_id, "company": company, "offer_id": application.offer_id},
        )
        if created:
            cls.logger.info("Conversation %s opened for application %s", conversation.pk, application.pk)
        return conversation, created

    @classmethod
    def send_message(cls, conversation: Conversation, sender, content: str = "", attachments=None,
                     push: bool = True) -> Message:
        """
        Store a message from ``sender`` and tell the other participant.

        ``push`` broadcasts the new message over the channel layer; the
        socket consumer passes False and broadcasts from its own loop.
        """
        if not conversation.is_participant(sender):
            raise AuthorizationError("You are not part of this conversation")
        content = (content or "").strip()
        attachments = [str(url) for url in (attachments or []) if url]
        if not content and not attachments:
            raise ValidationError("Message must have content or an attachment", field="content")
        if len(attachments) > MAX_ATTACHMENTS:
            raise ValidationError(f"At most {MAX_ATTACHMENTS} attachments per message", field="attachments")

        recipient_id = conversation.other_participant_id(sender.id)
        with cls.atomic():
            message = message_repo.create(
                conversation=conversation, sender=sender, content=content, attachments=attachments,
            )
            conversation_repo.increment(conversation.pk, conversation.unread_field_for(recipient_id))
            conversation_repo.filter(pk=conversation.pk).update(
                last_message_at=message.created_at, updated_at=timezone.now(),
            )

        if content:
            ModerationService.moderate("message", message.pk, sender, content)

        recipient = conversation.creator if recipient_id == conversation.creator_id else conversation.company.user
        preview = content[:100] if content else "Sent an attachment"
        NotificationService.send(
            recipient,
            NotificationType.NEW_MESSAGE,
            f"New message from {sender.display_name}",
            preview,
            {"conversation_id": conversation.pk, "application_id": conversation.application_id},
        )

        if push:
            from .serializers import MessageSerializer

            broadcast(conversation.participant_ids, {
                "type": "new_message",
                "message": MessageSerializer(message).data,
            })
        return message

    @classmethod
    def mark_read(cls, conversation: Conversation, reader) -> int:
        """Reset the reader's unread counter and mark the other side's messages read."""
        if not conversation.is_participant(reader):
            raise AuthorizationError("You are not part of this conversation")
        with cls.atomic():
            updated = message_repo.mark_read_from_others(conversation, reader)
            conversation_repo.filter(pk=conversation.pk).update(**{conversation.unread_field_for(reader.id): 0})
        return updated

    @classmethod
    def delete_for_me(cls, message: Message, user) -> Message:
        if not message.conversation.is_participant(user):
            raise AuthorizationError("You are not part of this conversation")
        with cls.atomic():
            message = message_repo.get_for_update(message.pk)
            if user.id in message.deleted_for:
                return message
            return message_repo.update(message, deleted_for=message.deleted_for + [user.id])

    @classmethod
    def company_response_time(cls, company) -> dict:
        """
        Average delay between a creator's first message in a conversation
        and the company's first reply after it.
        """
        conversations = list(conversation_repo.for_company_with_messages(company))
        delays = []
        for conversation in conversations:
            asked_at = None
            for message in conversation.messages.all():
                if asked_at is None:
                    if message.sender_id == conversation.creator_id:
                        asked_at = message.created_at
                elif message.sender_id == company.user_id:
                    delays.append((message.created_at - asked_at).total_seconds())
                    break

        average = sum(delays) / len(delays) if delays else None
        return {
            "average_response_seconds": round(average) if average is not None else None,
            "average_response_hours": round(average / 3600, 1) if average is not None else None,
            "conversation_count": len(conversations),
            "response_count": len(delays),
        }

    @classmethod
    def upload_attachment(cls, user, upload) -> dict:
        """Save an image, video or PDF through the default storage; returns its URL."""
        if upload is None:
            raise ValidationError("No file provided", field="file")
        content_type = getattr(upload, "content_type", "") or ""
        if not (content_type.startswith(ALLOWED_UPLOAD_PREFIXES) or content_type in ALLOWED_UPLOAD_TYPES):
            raise ValidationError("Only images, videos and PDF files can be attached", field="file")
        if upload.size > config.platform.max_upload_bytes:
            limit_mb = config.platform.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File exceeds the {limit_mb} MB limit", field="file")

        extension = os.path.splitext(upload.name)[1].lower()
        path = default_storage.save(f"message-attachments/{user.pk}/{uuid.uuid4().hex}{extension}", upload)
        cls.logger.info("User %s uploaded %s (%d bytes)", user.pk, path, upload.size)
        return {
            "url": default_storage.url(path),
            "name": upload.name,
            "content_type": content_type,
            "size": upload.size,
        }

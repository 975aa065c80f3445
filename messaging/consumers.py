"""
Chat WebSocket consumer.

Each authenticated socket joins the group ``user_<id>``. Client frames:

    {"type": "chat_message", "conversationId": 3, "content": "hi", "attachments": []}
    {"type": "typing_start", "conversationId": 3}
    {"type": "typing_stop",  "conversationId": 3}
    {"type": "mark_read",    "conversationId": 3}

Server frames: ``new_message``, ``user_typing``, ``typing_stop``,
``messages_read`` and ``error``.
"""

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from core.exceptions import AffiliateXchangeError
from .serializers import MessageSerializer
from .services import MessagingService, user_group

logger = logging.getLogger(__name__)

UNAUTHORIZED_CLOSE_CODE = 4401


@database_sync_to_async
def _participants(conversation_id, user):
    conversation = MessagingService.get_conversation_for(conversation_id, user)
    if not conversation.is_participant(user):
        # Admins may read any conversation over REST but do not chat in it
        raise AffiliateXchangeError("You are not part of this conversation")
    return conversation.participant_ids


@database_sync_to_async
def _send(conversation_id, user, content, attachments):
    conversation = MessagingService.get_conversation_for(conversation_id, user)
    message = MessagingService.send_message(conversation, user, content, attachments, push=False)
    return conversation.participant_ids, MessageSerializer(message).data


@database_sync_to_async
def _mark_read(conversation_id, user):
    conversation = MessagingService.get_conversation_for(conversation_id, user)
    MessagingService.mark_read(conversation, user)
    return conversation.participant_ids


class ChatConsumer(AsyncJsonWebsocketConsumer):

    async def connect(self):
        self.user = self.scope.get("user")
        await self.accept()
        if self.user is None or not self.user.is_authenticated:
            await self.close(code=UNAUTHORIZED_CLOSE_CODE)
            return
        self.group_name = user_group(self.user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        logger.debug("Socket connected for user %s", self.user.id)

    async def disconnect(self, code):
        if getattr(self, "group_name", None):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive_json(self, content, **kwargs):
        if not isinstance(content, dict):
            await self.send_error("Malformed frame")
            return
        handler = self.handlers.get(content.get("type"))
        conversation_id = content.get("conversationId")
        if handler is None or not isinstance(conversation_id, int) or isinstance(conversation_id, bool):
            await self.send_error("Malformed frame")
            return
        try:
            await handler(self, conversation_id, content)
        except AffiliateXchangeError as e:
            await self.send_error(e.message)

    async def decode_json(self, text_data):
        try:
            return await super().decode_json(text_data)
        except ValueError:
            return None

    # ── Client frames ────────────────────────────────────────────────

    async def on_chat_message(self, conversation_id, content):
        text = content.get("content")
        attachments = content.get("attachments") or []
        if (
            not isinstance(text, (str, type(None)))
            or not isinstance(attachments, list)
            or not all(isinstance(url, str) for url in attachments)
        ):
            await self.send_error("Malformed frame")
            return
        participants, message = await _send(conversation_id, self.user, text or "", attachments)
        await self.broadcast(participants, {"type": "new_message", "message": message})

    async def on_typing_start(self, conversation_id, content):
        participants = await _participants(conversation_id, self.user)
        await self.broadcast(self.others(participants), {
            "type": "user_typing", "conversationId": conversation_id, "userId": self.user.id,
        })

    async def on_typing_stop(self, conversation_id, content):
        participants = await _participants(conversation_id, self.user)
        await self.broadcast(self.others(participants), {
            "type": "typing_stop", "conversationId": conversation_id, "userId": self.user.id,
        })

    async def on_mark_read(self, conversation_id, content):
        participants = await _mark_read(conversation_id, self.user)
        await self.broadcast(self.others(participants), {
            "type": "messages_read", "conversationId": conversation_id, "readBy": self.user.id,
        })

    handlers = {
        "chat_message": on_chat_message,
        "typing_start": on_typing_start,
        "typing_stop": on_typing_stop,
        "mark_read": on_mark_read,
    }

    # ── Helpers ──────────────────────────────────────────────────────

    def others(self, participants):
        return [pk for pk in participants if pk != self.user.id]

    async def broadcast(self, user_ids, payload):
        for user_id in user_ids:
            await self.channel_layer.group_send(user_group(user_id), {"type": "chat.event", "payload": payload})

    async def send_error(self, message):
        await self.send_json({"type": "error", "message": message})

    async def chat_event(self, event):
        await self.send_json(event["payload"])

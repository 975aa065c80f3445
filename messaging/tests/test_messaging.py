"""
Tests for conversations, messages and the chat socket

Run with: python -m pytest messaging/tests -v
"""

from datetime import timedelta

import pytest
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import AuthorizationError, ValidationError
from messaging.auth import JWTAuthMiddleware
from messaging.models import Conversation, Message
from messaging.routing import websocket_urlpatterns
from messaging.services import MessagingService
from moderation.models import ContentFlag
from notifications.models import Notification, NotificationType


@pytest.fixture
def conversation(application, creator):
    conversation, _ = MessagingService.start_conversation(creator, application.pk)
    return conversation


@pytest.fixture
def outsider(make_creator):
    return make_creator(email="outsider@example.com")


class TestConversations:

    @pytest.mark.django_db
    def test_start_is_idempotent(self, application, creator, company_user):
        first, created = MessagingService.start_conversation(creator, application.pk)
        second, created_again = MessagingService.start_conversation(company_user, application.pk)
        assert created is True
        assert created_again is False
        assert first.pk == second.pk
        assert Conversation.objects.count() == 1

    @pytest.mark.django_db
    def test_stranger_cannot_start(self, application, make_creator):
        with pytest.raises(AuthorizationError):
            MessagingService.start_conversation(make_creator(email="other@example.com"), application.pk)

    @pytest.mark.django_db
    def test_admin_can_read_any_conversation(self, conversation, admin_user):
        assert MessagingService.get_conversation_for(conversation.pk, admin_user) == conversation


@pytest.mark.django_db
class TestMessages:

    def test_send_bumps_recipient_unread_and_notifies(self, conversation, creator, company_user):
        MessagingService.send_message(conversation, creator, "  Hello there  ")
        conversation.refresh_from_db()
        assert conversation.company_unread_count == 1
        assert conversation.creator_unread_count == 0
        assert conversation.last_message_at is not None
        notification = Notification.objects.get(user=company_user, type=NotificationType.NEW_MESSAGE)
        assert notification.message == "Hello there"

    def test_empty_message_rejected(self, conversation, creator):
        with pytest.raises(ValidationError):
            MessagingService.send_message(conversation, creator, "   ", [])

    def test_attachment_only_message(self, conversation, creator):
        message = MessagingService.send_message(conversation, creator, "", ["/media/a.png"])
        assert message.attachments == ["/media/a.png"]

    def test_outsider_cannot_send(self, conversation, make_creator):
        with pytest.raises(AuthorizationError):
            MessagingService.send_message(conversation, make_creator(email="x@example.com"), "hi")

    def test_flagged_keyword_is_recorded(self, conversation, creator):
        message = MessagingService.send_message(conversation, creator, "This is free money, trust me")
        assert ContentFlag.objects.filter(content_type="message", content_id=message.pk).exists()

    def test_mark_read_resets_counter(self, conversation, creator, company_user):
        MessagingService.send_message(conversation, creator, "one")
        MessagingService.send_message(conversation, creator, "two")
        MessagingService.send_message(conversation, company_user, "reply")

        assert MessagingService.mark_read(conversation, company_user) == 2
        conversation.refresh_from_db()
        assert conversation.company_unread_count == 0
        assert conversation.creator_unread_count == 1
        assert Message.objects.filter(sender=company_user, is_read=False).count() == 1

    def test_delete_for_me_hides_only_for_caller(self, conversation, creator, company_user, client_for):
        message = MessagingService.send_message(conversation, creator, "oops")
        MessagingService.delete_for_me(message, creator)
        MessagingService.delete_for_me(message, creator)
        message.refresh_from_db()
        assert message.deleted_for == [creator.id]

        mine = client_for(creator).get(f"/api/v1/conversations/{conversation.pk}/messages/")
        theirs = client_for(company_user).get(f"/api/v1/conversations/{conversation.pk}/messages/")
        assert mine.data == []
        assert len(theirs.data) == 1

    def test_delete_for_me_from_both_sides_keeps_both(self, conversation, creator, company_user):
        message = MessagingService.send_message(conversation, creator, "hello")
        stale = Message.objects.get(pk=message.pk)
        MessagingService.delete_for_me(message, creator)
        MessagingService.delete_for_me(stale, company_user)
        message.refresh_from_db()
        assert sorted(message.deleted_for) == sorted([creator.id, company_user.id])


@pytest.mark.django_db
class TestMessagingAPI:

    def test_start_then_reopen(self, client_for, creator, application):
        client = client_for(creator)
        assert client.post("/api/v1/conversations/", {"application_id": application.pk}).status_code == 201
        assert client.post("/api/v1/conversations/", {"application_id": application.pk}).status_code == 200

    def test_list_shows_own_unread_count(self, client_for, conversation, creator, company_user):
        MessagingService.send_message(conversation, creator, "hi")
        response = client_for(company_user).get("/api/v1/conversations/")
        assert response.status_code == 200
        assert response.data[0]["unread_count"] == 1

    def test_post_message(self, client_for, conversation, company_user):
        response = client_for(company_user).post(
            f"/api/v1/conversations/{conversation.pk}/messages/", {"content": "Welcome aboard"}, format="json",
        )
        assert response.status_code == 201
        assert response.data["sender_id"] == company_user.id

    def test_stranger_gets_403(self, client_for, conversation, make_creator):
        response = client_for(make_creator(email="nosy@example.com")).get(
            f"/api/v1/conversations/{conversation.pk}/messages/",
        )
        assert response.status_code == 403

    def test_mark_read_endpoint(self, client_for, conversation, creator, company_user):
        MessagingService.send_message(conversation, creator, "hi")
        response = client_for(company_user).post(f"/api/v1/conversations/{conversation.pk}/read/")
        assert response.data == {"marked_read": 1}

    def test_upload_image(self, client_for, creator, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path
        upload = SimpleUploadedFile("shot.PNG", b"\x89PNG fake", content_type="image/png")
        response = client_for(creator).post("/api/v1/conversations/attachments/", {"file": upload}, format="multipart")
        assert response.status_code == 201
        assert response.data["url"].endswith(".png")
        assert response.data["size"] == len(b"\x89PNG fake")

    def test_upload_rejects_other_types(self, client_for, creator, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        response = client_for(creator).post("/api/v1/conversations/attachments/", {"file": upload}, format="multipart")
        assert response.status_code == 400

    def test_company_response_time(self, client_for, conversation, creator, company_user, company):
        question = MessagingService.send_message(conversation, creator, "Is there a promo code?")
        answer = MessagingService.send_message(conversation, company_user, "Yes, ACME10")
        MessagingService.send_message(conversation, company_user, "It works until Friday")
        now = timezone.now()
        Message.objects.filter(pk=question.pk).update(created_at=now - timedelta(hours=3))
        Message.objects.filter(pk=answer.pk).update(created_at=now - timedelta(hours=1))

        response = client_for(creator).get(f"/api/v1/companies/{company.pk}/response-time/")
        assert response.status_code == 200
        assert response.data == {
            "average_response_seconds": 7200,
            "average_response_hours": 2.0,
            "conversation_count": 1,
            "response_count": 1,
        }

    def test_response_time_without_replies(self, client_for, conversation, creator, company):
        MessagingService.send_message(conversation, creator, "Hello?")
        data = client_for(creator).get(f"/api/v1/companies/{company.pk}/response-time/").data
        assert data["average_response_seconds"] is None
        assert data["conversation_count"] == 1
        assert data["response_count"] == 0


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------

def _communicator(user=None, token=None):
    if user is not None:
        token = str(AccessToken.for_user(user))
    path = f"/ws/?token={token}" if token else "/ws/"
    return WebsocketCommunicator(JWTAuthMiddleware(URLRouter(websocket_urlpatterns)), path)


@pytest.mark.django_db(transaction=True)
class TestChatSocket:

    async def test_unauthenticated_socket_is_closed(self):
        communicator = _communicator(token="not-a-jwt")
        connected, _ = await communicator.connect()
        assert connected
        output = await communicator.receive_output()
        assert output["type"] == "websocket.close"
        assert output["code"] == 4401

    async def test_chat_message_reaches_both_participants(self, conversation, creator, company_user):
        sender = _communicator(creator)
        receiver = _communicator(company_user)
        assert (await sender.connect())[0]
        assert (await receiver.connect())[0]

        await sender.send_json_to({"type": "chat_message", "conversationId": conversation.pk, "content": "Hi!"})

        received = await receiver.receive_json_from(timeout=2)
        echoed = await sender.receive_json_from(timeout=2)
        assert received["type"] == "new_message"
        assert received["message"]["content"] == "Hi!"
        assert echoed["message"]["id"] == received["message"]["id"]

        await sender.disconnect()
        await receiver.disconnect()

    async def test_typing_goes_to_the_other_side_only(self, conversation, creator, company_user):
        sender = _communicator(creator)
        receiver = _communicator(company_user)
        await sender.connect()
        await receiver.connect()

        await sender.send_json_to({"type": "typing_start", "conversationId": conversation.pk})

        frame = await receiver.receive_json_from(timeout=2)
        assert frame == {"type": "user_typing", "conversationId": conversation.pk, "userId": creator.id}
        assert await sender.receive_nothing()

        await sender.disconnect()
        await receiver.disconnect()

    async def test_malformed_frame(self, creator):
        communicator = _communicator(creator)
        await communicator.connect()
        await communicator.send_json_to({"type": "typing_start", "conversationId": "3"})
        assert await communicator.receive_json_from(timeout=2) == {"type": "error", "message": "Malformed frame"}
        await communicator.send_to(text_data="{not json")
        assert await communicator.receive_json_from(timeout=2) == {"type": "error", "message": "Malformed frame"}
        await communicator.disconnect()

    async def test_chat_message_with_wrong_field_types(self, conversation, creator):
        communicator = _communicator(creator)
        await communicator.connect()
        bad_frames = [
            {"type": "chat_message", "conversationId": conversation.pk, "content": 5},
            {"type": "chat_message", "conversationId": conversation.pk, "content": "hi", "attachments": [7]},
            {"type": "mark_read", "conversationId": True},
        ]
        for frame in bad_frames:
            await communicator.send_json_to(frame)
            assert await communicator.receive_json_from(timeout=2) == {"type": "error", "message": "Malformed frame"}
        assert await communicator.receive_nothing()
        await communicator.disconnect()

    async def test_outsider_gets_error_frame(self, conversation, outsider):
        communicator = _communicator(outsider)
        await communicator.connect()
        await communicator.send_json_to({"type": "chat_message", "conversationId": conversation.pk, "content": "hey"})
        frame = await communicator.receive_json_from(timeout=2)
        assert frame == {"type": "error", "message": "You are not part of this conversation"}
        await communicator.disconnect()

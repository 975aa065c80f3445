"""
Messaging Views

REST side of chat. Sockets carry the same events; see consumers.py.
"""

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from users.repositories import company_profile_repo
from .repositories import conversation_repo, message_repo
from .serializers import (
    ConversationSerializer,
    ConversationStartSerializer,
    MessageSerializer,
    MessageCreateSerializer,
)
from .services import MessagingService


class ConversationListView(APIView):
    """
    GET  /api/v1/conversations/
    POST /api/v1/conversations/   {"application_id": 12}
    """

    def get(self, request):
        conversations = conversation_repo.for_user(request.user)
        return Response(ConversationSerializer(conversations, many=True, context={"request": request}).data)

    def post(self, request):
        serializer = ConversationStartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        conversation, created = MessagingService.start_conversation(
            request.user, serializer.validated_data["application_id"],
        )
        return Response(
            ConversationSerializer(conversation, context={"request": request}).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class MessageListView(APIView):
    """
    GET  /api/v1/conversations/<id>/messages/
    POST /api/v1/conversations/<id>/messages/
    """

    def get(self, request, pk):
        conversation = MessagingService.get_conversation_for(pk, request.user)
        messages = message_repo.visible_to(conversation, request.user)
        return Response(MessageSerializer(messages, many=True).data)

    def post(self, request, pk):
        conversation = MessagingService.get_conversation_for(pk, request.user)
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = MessagingService.send_message(
            conversation,
            request.user,
            serializer.validated_data["content"],
            serializer.validated_data["attachments"],
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
def mark_read(request, pk):
    conversation = MessagingService.get_conversation_for(pk, request.user)
    updated = MessagingService.mark_read(conversation, request.user)
    return Response({"marked_read": updated})


@api_view(["DELETE"])
def delete_message(request, pk):
    """Hide a message for the requesting user only."""
    message = message_repo.get_by_id(pk)
    MessagingService.delete_for_me(message, request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@parser_classes([MultiPartParser, FormParser])
def upload_attachment(request):
    """POST /api/v1/conversations/attachments/ (multipart, field ``file``)"""
    result = MessagingService.upload_attachment(request.user, request.FILES.get("file"))
    return Response(result, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def company_response_time(request, company_id):
    """GET /api/v1/companies/<id>/response-time/"""
    company = company_profile_repo.get_by_id(company_id)
    return Response(MessagingService.company_response_time(company))

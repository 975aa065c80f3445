from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import Conversation, Message


class MessageSerializer(serializers.ModelSerializer):
    conversation_id = serializers.IntegerField(read_only=True)
    sender_id = serializers.IntegerField(read_only=True)
    sender_name = serializers.CharField(source="sender.display_name", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id", "conversation_id", "sender_id", "sender_name",
            "content", "attachments", "is_read", "created_at",
        ]
        read_only_fields = fields


class ConversationSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    company_name = serializers.CharField(source="company.display_name", read_only=True)
    offer_title = serializers.CharField(source="offer.title", read_only=True)
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            "id", "application", "creator", "company", "company_name", "offer", "offer_title",
            "last_message_at", "unread_count", "resolved", "created_at",
        ]
        read_only_fields = fields

    def get_unread_count(self, obj):
        request = self.context.get("request")
        if request is None or not obj.is_participant(request.user):
            return obj.creator_unread_count + obj.company_unread_count
        return getattr(obj, obj.unread_field_for(request.user.id))


class ConversationStartSerializer(serializers.Serializer):
    application_id = serializers.IntegerField()


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    attachments = serializers.ListField(child=serializers.CharField(max_length=500), required=False, default=list)

    def validate(self, attrs):
        if not attrs["content"].strip() and not attrs["attachments"]:
            raise serializers.ValidationError("Message must have content or an attachment")
        return attrs

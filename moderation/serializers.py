from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import BannedKeyword, ContentFlag


class BannedKeywordSerializer(serializers.ModelSerializer):
    class Meta:
        model = BannedKeyword
        fields = ["id", "keyword", "category", "severity", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_keyword(self, value):
        value = " ".join(value.lower().split())
        if not value:
            raise serializers.ValidationError("Keyword cannot be blank")
        return value


class ContentFlagSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    reviewed_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ContentFlag
        fields = [
            "id", "content_type", "content_id", "user", "flag_reason", "matched_keywords",
            "severity", "status", "reviewed_by", "reviewed_at", "admin_notes",
            "action_taken", "created_at",
        ]
        read_only_fields = fields


class FlagReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        ContentFlag.Status.REVIEWED, ContentFlag.Status.DISMISSED, ContentFlag.Status.ACTION_TAKEN,
    ])
    admin_notes = serializers.CharField(required=False, allow_blank=True)
    action_taken = serializers.CharField(required=False, allow_blank=True)

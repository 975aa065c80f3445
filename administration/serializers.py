from rest_framework import serializers

from offers.models import Offer
from offers.serializers import OfferCardSerializer
from payments.models import PaymentStatus
from users.serializers import UserSummarySerializer, UserSerializer
from .models import AuditLog, PlatformSetting


class AuditLogSerializer(serializers.ModelSerializer):
    actor = UserSummarySerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            "id", "actor", "action", "entity_type", "entity_id", "changes",
            "reason", "ip_address", "user_agent", "created_at",
        ]
        read_only_fields = fields


class PlatformSettingSerializer(serializers.ModelSerializer):
    updated_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = PlatformSetting
        fields = ["id", "key", "value", "description", "category", "updated_by", "updated_at"]
        read_only_fields = fields


class SettingUpsertSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=100)
    value = serializers.CharField(allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.CharField(required=False, allow_blank=True, default="")
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class RequiredReasonSerializer(serializers.Serializer):
    reason = serializers.CharField()


class CompanyFeeSerializer(serializers.Serializer):
    """``platform_fee_percentage`` as a fraction; null resets to the platform default."""

    platform_fee_percentage = serializers.DecimalField(max_digits=5, decimal_places=4, allow_null=True)


class AdminCreatorSerializer(UserSerializer):
    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["is_active", "last_login"]
        read_only_fields = fields


class AdminOfferSerializer(OfferCardSerializer):
    class Meta(OfferCardSerializer.Meta):
        model = Offer
        fields = OfferCardSerializer.Meta.fields + [
            "product_url", "rejection_reason", "edit_requests", "approved_at", "rejected_at", "updated_at",
        ]
        read_only_fields = fields


class EditRequestSerializer(serializers.Serializer):
    notes = serializers.CharField()


class FeatureSerializer(serializers.Serializer):
    featured = serializers.BooleanField()


class BroadcastSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    message = serializers.CharField()
    link_url = serializers.CharField(required=False, allow_blank=True, default="")
    role = serializers.ChoiceField(
        choices=["creator", "company", "admin"], required=False, allow_null=True, default=None,
    )


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED,
    ])


class DisputeResolutionSerializer(serializers.Serializer):
    resolution = serializers.ChoiceField(choices=["refund", "requeue"])
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReviewVisibilitySerializer(serializers.Serializer):
    hidden = serializers.BooleanField(required=False, default=True)

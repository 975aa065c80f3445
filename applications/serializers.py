from rest_framework import serializers

from offers.serializers import OfferCardSerializer
from users.serializers import UserSummarySerializer
from .models import Application, ClickEvent


class ApplicationSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    offer = OfferCardSerializer(read_only=True)
    click_count = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            "id", "creator", "offer", "message", "preferred_commission", "status",
            "tracking_code", "tracking_link", "rejection_reason",
            "auto_approval_scheduled_at", "approved_at", "completed_at",
            "click_count", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_click_count(self, obj):
        return obj.clicks.count()


class ApplicationCreateSerializer(serializers.Serializer):
    offer_id = serializers.IntegerField()
    message = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    preferred_commission = serializers.CharField(required=False, allow_blank=True, max_length=50)


class ApplicationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Application.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    sale_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)


class CompleteApplicationSerializer(serializers.Serializer):
    sale_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)


class RejectApplicationSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class ClickEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClickEvent
        fields = [
            "id", "ip_address", "user_agent", "referer", "utm_source", "utm_medium",
            "utm_campaign", "utm_term", "utm_content", "fraud_score", "fraud_flags", "created_at",
        ]

from rest_framework import serializers

from users.serializers import PublicCompanySerializer, UserSummarySerializer
from .models import PaymentSetting, Payment, RetainerPayment

_PAYMENT_FIELDS = [
    "id", "creator", "company", "gross_amount", "platform_fee_amount",
    "processing_fee_amount", "net_amount", "status", "payment_method",
    "provider_transaction_id", "description", "dispute_reason",
    "initiated_at", "completed_at", "failed_at", "refunded_at", "created_at",
]


class PaymentSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentSetting
        fields = [
            "id", "payout_method", "payout_email", "bank_routing_number",
            "bank_account_number", "paypal_email", "crypto_wallet_address",
            "crypto_network", "tax_information", "is_default", "created_at",
        ]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {"bank_account_number": {"write_only": True}}

    def validate(self, attrs):
        method = attrs.get("payout_method")
        required = {
            PaymentSetting.Method.ETRANSFER: ["payout_email"],
            PaymentSetting.Method.WIRE: ["bank_routing_number", "bank_account_number"],
            PaymentSetting.Method.PAYPAL: ["paypal_email"],
            PaymentSetting.Method.CRYPTO: ["crypto_wallet_address", "crypto_network"],
        }.get(method, [])
        missing = [name for name in required if not attrs.get(name)]
        if missing:
            raise serializers.ValidationError({name: "This field is required for this payout method." for name in missing})
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.bank_account_number:
            data["bank_account_last4"] = instance.bank_account_number[-4:]
        return data


class PaymentSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    company = PublicCompanySerializer(read_only=True)
    offer_title = serializers.CharField(source="offer.title", read_only=True)

    class Meta:
        model = Payment
        fields = _PAYMENT_FIELDS + ["application", "offer", "offer_title"]
        read_only_fields = fields


class RetainerPaymentSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    company = PublicCompanySerializer(read_only=True)
    contract_title = serializers.CharField(source="contract.title", read_only=True)

    class Meta:
        model = RetainerPayment
        fields = _PAYMENT_FIELDS + ["contract", "contract_title", "deliverable", "month_number", "payment_type"]
        read_only_fields = fields


class DisputeSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)


class FeePreviewSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

from rest_framework import serializers

from users.serializers import PublicCompanySerializer, UserSummarySerializer
from .models import RetainerContract, RetainerApplication, RetainerDeliverable


class RetainerContractSerializer(serializers.ModelSerializer):
    company = PublicCompanySerializer(read_only=True)
    assigned_creator = UserSummarySerializer(read_only=True)
    application_count = serializers.SerializerMethodField()

    class Meta:
        model = RetainerContract
        fields = [
            "id", "company", "title", "description", "monthly_amount", "videos_per_month",
            "duration_months", "required_platform", "platform_account_details",
            "content_guidelines", "brand_safety_requirements", "content_approval_required",
            "exclusivity_required", "minimum_video_length_seconds", "posting_schedule",
            "retainer_tiers", "minimum_followers", "niches", "status", "assigned_creator",
            "start_date", "end_date", "application_count", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_application_count(self, obj):
        return obj.applications.count()


class RetainerContractWriteSerializer(serializers.ModelSerializer):
    # Validated and normalised by RetainerService
    niches = serializers.JSONField(required=False)
    retainer_tiers = serializers.JSONField(required=False)

    class Meta:
        model = RetainerContract
        fields = [
            "title", "description", "monthly_amount", "videos_per_month", "duration_months",
            "required_platform", "platform_account_details", "content_guidelines",
            "brand_safety_requirements", "content_approval_required", "exclusivity_required",
            "minimum_video_length_seconds", "posting_schedule", "retainer_tiers",
            "minimum_followers", "niches",
        ]
        extra_kwargs = {
            "monthly_amount": {"min_value": 0},
            "videos_per_month": {"min_value": 1},
            "duration_months": {"min_value": 1},
        }


class RetainerApplicationSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    contract_title = serializers.CharField(source="contract.title", read_only=True)

    class Meta:
        model = RetainerApplication
        fields = [
            "id", "contract", "contract_title", "creator", "message", "portfolio_links",
            "proposed_start_date", "status", "created_at",
        ]
        read_only_fields = ["id", "contract", "contract_title", "creator", "status", "created_at"]

    def validate_portfolio_links(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("Portfolio links must be a list of URLs")
        return [v.strip() for v in value if v.strip()]


class RetainerDeliverableSerializer(serializers.ModelSerializer):
    class Meta:
        model = RetainerDeliverable
        fields = [
            "id", "contract", "creator", "month_number", "video_number", "video_url",
            "platform_url", "title", "description", "view_count", "status",
            "submitted_at", "reviewed_at", "review_notes",
        ]
        read_only_fields = ["id", "contract", "creator", "status", "submitted_at", "reviewed_at", "review_notes"]


class DeliverableResubmitSerializer(serializers.Serializer):
    video_url = serializers.URLField(max_length=500)
    platform_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class ReviewNotesSerializer(serializers.Serializer):
    review_notes = serializers.CharField(required=False, allow_blank=True)


class ContractStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RetainerContract.Status.choices)

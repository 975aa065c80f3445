from rest_framework import serializers

from users.serializers import PublicCompanySerializer
from .models import Niche, Offer, OfferVideo, Favorite


class NicheSerializer(serializers.ModelSerializer):
    class Meta:
        model = Niche
        fields = ["id", "name", "description", "is_active"]


class OfferVideoSerializer(serializers.ModelSerializer):
    class Meta:
        model = OfferVideo
        fields = [
            "id", "title", "description", "creator_credit", "original_platform",
            "video_url", "thumbnail_url", "is_primary", "order_index", "created_at",
        ]
        read_only_fields = ["id", "created_at"]


class OfferCardSerializer(serializers.ModelSerializer):
    """Compact offer for browse lists."""

    company = PublicCompanySerializer(read_only=True)

    class Meta:
        model = Offer
        fields = [
            "id", "title", "product_name", "short_description", "primary_niche",
            "additional_niches", "featured_image_url", "commission_type",
            "commission_amount", "commission_percentage", "allowed_platforms",
            "featured_on_homepage", "view_count", "application_count", "status",
            "company", "created_at",
        ]
        read_only_fields = fields


class OfferDetailSerializer(serializers.ModelSerializer):
    company = PublicCompanySerializer(read_only=True)
    videos = OfferVideoSerializer(many=True, read_only=True)

    class Meta:
        model = Offer
        exclude = ["listing_fee"]
        read_only_fields = [
            "company", "status", "view_count", "application_count", "approved_at",
            "rejected_at", "rejection_reason", "featured_on_homepage", "edit_requests",
        ]


class OfferWriteSerializer(serializers.ModelSerializer):
    """Fields a company may set on its own offer."""

    class Meta:
        model = Offer
        fields = [
            "title", "product_name", "short_description", "full_description",
            "primary_niche", "additional_niches", "product_url", "featured_image_url",
            "commission_type", "commission_amount", "commission_percentage",
            "cookie_duration", "average_order_value", "minimum_payout", "retainer_amount",
            "payment_schedule", "minimum_followers", "allowed_platforms",
            "geographic_restrictions", "age_restriction", "content_style_requirements",
            "brand_safety_requirements", "custom_terms", "creator_requirements",
            "exclusivity_required", "content_approval_required",
        ]

    def _validate_str_list(self, value, name):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError(f"{name} must be a list of strings")
        return [v.strip() for v in value if v.strip()]

    def validate_additional_niches(self, value):
        return self._validate_str_list(value, "Additional niches")

    def validate_allowed_platforms(self, value):
        return [v.lower() for v in self._validate_str_list(value, "Allowed platforms")]

    def validate_geographic_restrictions(self, value):
        return self._validate_str_list(value, "Geographic restrictions")


class FavoriteSerializer(serializers.ModelSerializer):
    offer = OfferCardSerializer(read_only=True)

    class Meta:
        model = Favorite
        fields = ["id", "offer", "created_at"]

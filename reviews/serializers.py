from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    company_name = serializers.CharField(source="company.display_name", read_only=True)
    offer_title = serializers.CharField(source="application.offer.title", read_only=True)

    class Meta:
        model = Review
        fields = [
            "id", "application", "creator", "company", "company_name", "offer_title",
            "review_text", "overall_rating", "payment_speed_rating", "communication_rating",
            "offer_quality_rating", "support_rating", "company_response",
            "company_responded_at", "admin_response", "is_edited", "created_at", "updated_at",
        ]
        read_only_fields = fields


class AdminReviewSerializer(ReviewSerializer):
    class Meta(ReviewSerializer.Meta):
        fields = ReviewSerializer.Meta.fields + ["admin_note", "is_approved", "is_hidden"]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.ModelSerializer):
    application_id = serializers.IntegerField(write_only=True)

    class Meta:
        model = Review
        fields = [
            "application_id", "review_text", "overall_rating", "payment_speed_rating",
            "communication_rating", "offer_quality_rating", "support_rating",
        ]


class ReviewEditSerializer(serializers.ModelSerializer):
    class Meta:
        model = Review
        fields = [
            "review_text", "overall_rating", "payment_speed_rating",
            "communication_rating", "offer_quality_rating", "support_rating",
        ]


class ReviewResponseSerializer(serializers.Serializer):
    response = serializers.CharField()


class ReviewNoteSerializer(serializers.Serializer):
    note = serializers.CharField(allow_blank=True)

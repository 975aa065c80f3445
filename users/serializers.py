"""
User Serializers
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

from .models import CreatorProfile, CompanyProfile

User = get_user_model()


class CreatorProfileSerializer(serializers.ModelSerializer):
    has_video_platform = serializers.BooleanField(read_only=True)
    platforms = serializers.ListField(read_only=True)

    class Meta:
        model = CreatorProfile
        fields = [
            "bio", "youtube_url", "tiktok_url", "instagram_url",
            "youtube_followers", "tiktok_followers", "instagram_followers",
            "niches", "has_video_platform", "platforms", "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def validate_niches(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Niches must be a list")
        return [str(v).strip() for v in value if str(v).strip()]


def _platform_url():
    return serializers.URLField(
        required=False, allow_blank=True, max_length=500,
        error_messages={"invalid": "Enter a full link to your channel, starting with https://"},
    )


def _followers():
    return serializers.IntegerField(
        required=False, allow_null=True, min_value=0,
        error_messages={
            "invalid": "Follower counts must be whole numbers",
            "min_value": "Follower counts cannot be negative",
        },
    )


class CreatorPlatformsSerializer(serializers.Serializer):
    """Onboarding "platforms" step: channel links and follower counts."""
    youtube_url = _platform_url()
    tiktok_url = _platform_url()
    instagram_url = _platform_url()
    youtube_followers = _followers()
    tiktok_followers = _followers()
    instagram_followers = _followers()


class CompanyProfileSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = CompanyProfile
        fields = [
            "id", "display_name", "legal_name", "trade_name", "industry", "website_url",
            "company_size", "year_founded", "logo_url", "description",
            "contact_name", "contact_job_title", "phone_number", "business_address",
            "linkedin_url", "twitter_url", "facebook_url", "instagram_url",
            "website_verified", "website_verification_method", "website_verified_at",
            "custom_platform_fee_percentage",
            "status", "approved_at", "rejection_reason", "created_at",
        ]
        read_only_fields = [
            "id", "website_verified", "website_verification_method", "website_verified_at",
            "custom_platform_fee_percentage",
            "status", "approved_at", "rejection_reason", "created_at",
        ]


class PublicCompanySerializer(serializers.ModelSerializer):
    """Company card shown to creators on offers and retainers."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = CompanyProfile
        fields = ["id", "display_name", "industry", "website_url", "logo_url", "description", "website_verified"]


class UserSerializer(serializers.ModelSerializer):
    """Serializer for user details."""

    creator_profile = CreatorProfileSerializer(read_only=True)
    company_profile = CompanyProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id", "email", "username", "first_name", "last_name", "role",
            "account_status", "email_verified", "profile_image_url", "created_at",
            "creator_profile", "company_profile",
        ]
        read_only_fields = ["id", "email", "role", "account_status", "email_verified", "created_at"]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.role != User.Role.CREATOR:
            data.pop("creator_profile", None)
        if instance.role != User.Role.COMPANY:
            data.pop("company_profile", None)
        return data


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "first_name", "last_name", "role", "profile_image_url"]


class RegisterSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField()
    username = serializers.CharField(max_length=150, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=[User.Role.CREATOR, User.Role.COMPANY])
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": "Passwords do not match"})
        return attrs


class LoginSerializer(serializers.Serializer):
    """Serializer for login."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for password change."""

    old_password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])
    new_password_confirm = serializers.CharField(write_only=True)

    def validate(self, attrs):
        if attrs["new_password"] != attrs["new_password_confirm"]:
            raise serializers.ValidationError({"new_password_confirm": "Passwords do not match"})
        return attrs


class GoogleAuthSerializer(serializers.Serializer):
    code = serializers.CharField()
    redirect_uri = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(
        choices=[User.Role.CREATOR, User.Role.COMPANY], required=False, default=User.Role.CREATOR,
    )


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField(write_only=True, validators=[validate_password])


class TokenConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()

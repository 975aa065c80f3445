from rest_framework import serializers

from .models import Notification, NotificationPreference


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "type", "title", "message", "link_url", "metadata", "is_read", "read_at", "created_at"]
        read_only_fields = fields


class NotificationPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationPreference
        fields = [
            "email_notifications", "in_app_notifications",
            "email_application_status", "email_new_message", "email_payment",
            "email_offer", "email_review", "email_system", "updated_at",
        ]
        read_only_fields = ["updated_at"]

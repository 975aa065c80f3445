from rest_framework import serializers

from .models import DailyAnalytics


class DailyAnalyticsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DailyAnalytics
        fields = ["id", "application", "offer", "date", "clicks", "unique_clicks", "conversions", "earnings"]
        read_only_fields = fields


class ConversionSerializer(serializers.Serializer):
    sale_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True,
    )

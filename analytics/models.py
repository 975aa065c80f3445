from decimal import Decimal

from django.conf import settings
from django.db import models


class DailyAnalytics(models.Model):
    """
    One application's counters for one UTC day.

    Clicks scoring 50 or more on the fraud check are stored as
    ``ClickEvent`` rows but never counted here.
    """

    application = models.ForeignKey(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="daily_analytics",
    )
    offer = models.ForeignKey("offers.Offer", on_delete=models.CASCADE, related_name="+")
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    date = models.DateField()
    clicks = models.PositiveIntegerField(default=0)
    unique_clicks = models.PositiveIntegerField(default=0)
    conversions = models.PositiveIntegerField(default=0)
    earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "analytics"
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(fields=["application", "date"], name="unique_analytics_per_day"),
        ]
        indexes = [
            models.Index(fields=["creator", "date"]),
            models.Index(fields=["offer", "date"]),
        ]

    def __str__(self):
        return f"Application {self.application_id} on {self.date}"

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Review(models.Model):
    """A creator's rating of a company, one per application."""

    application = models.OneToOneField(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="review",
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_written",
    )
    company = models.ForeignKey(
        "users.CompanyProfile",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    review_text = models.TextField(blank=True)
    overall_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    payment_speed_rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    communication_rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    offer_quality_rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    support_rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)

    company_response = models.TextField(blank=True)
    company_responded_at = models.DateTimeField(null=True, blank=True)
    admin_response = models.TextField(blank=True)
    admin_note = models.TextField(blank=True)
    is_edited = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=True)
    is_hidden = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reviews"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "is_hidden"]),
        ]

    def __str__(self):
        return f"{self.overall_rating}★ {self.company_id} by {self.creator_id}"

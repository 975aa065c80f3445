from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Niche(models.Model):
    """Content category used to tag offers, retainers and creators."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "niches"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Offer(models.Model):
    """A company's affiliate promotion."""

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PENDING_REVIEW = "pending_review", "Pending review"
        APPROVED = "approved", "Approved"
        PAUSED = "paused", "Paused"
        ARCHIVED = "archived", "Archived"

    class CommissionType(models.TextChoices):
        PER_SALE = "per_sale", "Per sale"
        PER_LEAD = "per_lead", "Per lead"
        PER_CLICK = "per_click", "Per click"
        MONTHLY_RETAINER = "monthly_retainer", "Monthly retainer"
        HYBRID = "hybrid", "Hybrid"

    company = models.ForeignKey(
        "users.CompanyProfile",
        on_delete=models.CASCADE,
        related_name="offers",
    )
    title = models.CharField(max_length=100)
    product_name = models.CharField(max_length=255)
    short_description = models.CharField(max_length=200)
    full_description = models.TextField()
    primary_niche = models.CharField(max_length=100)
    additional_niches = models.JSONField(default=list, blank=True)
    product_url = models.URLField(max_length=500)
    featured_image_url = models.URLField(max_length=500, blank=True)

    commission_type = models.CharField(max_length=20, choices=CommissionType.choices)
    commission_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    commission_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    cookie_duration = models.PositiveIntegerField(null=True, blank=True, help_text="Days")
    average_order_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    minimum_payout = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    retainer_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_schedule = models.CharField(max_length=50, blank=True)

    minimum_followers = models.PositiveIntegerField(null=True, blank=True)
    allowed_platforms = models.JSONField(default=list, blank=True)
    geographic_restrictions = models.JSONField(default=list, blank=True)
    age_restriction = models.CharField(max_length=20, blank=True)
    content_style_requirements = models.TextField(blank=True)
    brand_safety_requirements = models.TextField(blank=True)
    custom_terms = models.TextField(blank=True)
    creator_requirements = models.TextField(blank=True)
    exclusivity_required = models.BooleanField(default=False)
    content_approval_required = models.BooleanField(default=False)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_REVIEW)
    view_count = models.PositiveIntegerField(default=0)
    application_count = models.PositiveIntegerField(default=0)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    featured_on_homepage = models.BooleanField(default=False)
    listing_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    edit_requests = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "offers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["company", "status"]),
            models.Index(fields=["primary_niche"]),
        ]

    def __str__(self):
        return self.title

    @property
    def is_live(self) -> bool:
        return self.status == self.Status.APPROVED and self.company.status == "approved"


class OfferVideo(models.Model):
    """Example creative shown on an offer page."""

    offer = models.ForeignKey(Offer, on_delete=models.CASCADE, related_name="videos")
    title = models.CharField(max_length=100)
    description = models.CharField(max_length=300, blank=True)
    creator_credit = models.CharField(max_length=255, blank=True)
    original_platform = models.CharField(max_length=50, blank=True)
    video_url = models.URLField(max_length=500)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    is_primary = models.BooleanField(default=False)
    order_index = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "offer_videos"
        ordering = ["order_index", "created_at"]

    def __str__(self):
        return f"{self.offer_id}: {self.title}"


class Favorite(models.Model):
    """A creator's saved offer, one per creator per offer."""

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="favorites",
    )
    offer = models.ForeignKey(Offer, on_delete=models.CASCADE, related_name="favorites")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "favorites"
        unique_together = ["creator", "offer"]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.creator_id} ♥ {self.offer_id}"

from django.conf import settings
from django.db import models


class RetainerContract(models.Model):
    """A company's monthly video retainer, open for creators to apply."""

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"
        PAUSED = "paused", "Paused"

    company = models.ForeignKey(
        "users.CompanyProfile",
        on_delete=models.CASCADE,
        related_name="retainer_contracts",
    )
    title = models.CharField(max_length=150)
    description = models.TextField()
    monthly_amount = models.DecimalField(max_digits=10, decimal_places=2)
    videos_per_month = models.PositiveIntegerField()
    duration_months = models.PositiveIntegerField()
    required_platform = models.CharField(max_length=50)
    platform_account_details = models.TextField(blank=True)
    content_guidelines = models.TextField(blank=True)
    brand_safety_requirements = models.TextField(blank=True)
    content_approval_required = models.BooleanField(default=False)
    exclusivity_required = models.BooleanField(default=False)
    minimum_video_length_seconds = models.PositiveIntegerField(null=True, blank=True)
    posting_schedule = models.TextField(blank=True)
    retainer_tiers = models.JSONField(default=list, blank=True)
    minimum_followers = models.PositiveIntegerField(null=True, blank=True)
    niches = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    assigned_creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_retainers",
    )
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "retainer_contracts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
        ]

    def __str__(self):
        return self.title


class RetainerApplication(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    contract = models.ForeignKey(RetainerContract, on_delete=models.CASCADE, related_name="applications")
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="retainer_applications",
    )
    message = models.TextField()
    portfolio_links = models.JSONField(default=list, blank=True)
    proposed_start_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "retainer_applications"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.creator_id} → contract {self.contract_id} ({self.status})"


class RetainerDeliverable(models.Model):
    """One video submitted against a contract month."""

    class Status(models.TextChoices):
        PENDING_REVIEW = "pending_review", "Pending review"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        REVISION_REQUESTED = "revision_requested", "Revision requested"

    contract = models.ForeignKey(RetainerContract, on_delete=models.CASCADE, related_name="deliverables")
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="retainer_deliverables",
    )
    month_number = models.PositiveIntegerField()
    video_number = models.PositiveIntegerField()
    video_url = models.URLField(max_length=500)
    platform_url = models.URLField(max_length=500, blank=True)
    title = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    view_count = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_REVIEW)
    submitted_at = models.DateTimeField(auto_now_add=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "retainer_deliverables"
        ordering = ["month_number", "video_number", "-created_at"]
        indexes = [
            models.Index(fields=["contract", "month_number", "video_number"]),
        ]

    def __str__(self):
        return f"Contract {self.contract_id} M{self.month_number}V{self.video_number} ({self.status})"

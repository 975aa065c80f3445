from django.conf import settings
from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentSetting(models.Model):
    """A creator's (or company's) payout destination."""

    class Method(models.TextChoices):
        ETRANSFER = "etransfer", "E-transfer"
        WIRE = "wire", "Wire / ACH"
        PAYPAL = "paypal", "PayPal"
        CRYPTO = "crypto", "Crypto"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payment_settings",
    )
    payout_method = models.CharField(max_length=20, choices=Method.choices)
    payout_email = models.EmailField(blank=True)
    bank_routing_number = models.CharField(max_length=50, blank=True)
    bank_account_number = models.CharField(max_length=50, blank=True)
    paypal_email = models.EmailField(blank=True)
    crypto_wallet_address = models.CharField(max_length=255, blank=True)
    crypto_network = models.CharField(max_length=50, blank=True)
    tax_information = models.JSONField(null=True, blank=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "payment_settings"
        ordering = ["-is_default", "-created_at"]

    def __str__(self):
        return f"{self.user_id} via {self.payout_method}"


class _PaymentBase(models.Model):
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    company = models.ForeignKey("users.CompanyProfile", on_delete=models.CASCADE, related_name="+")
    gross_amount = models.DecimalField(max_digits=10, decimal_places=2)
    platform_fee_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    processing_fee_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    net_amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, blank=True)
    provider_transaction_id = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    dispute_reason = models.TextField(blank=True)

    initiated_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


class Payment(_PaymentBase):
    """Commission owed for a completed affiliate application."""

    application = models.ForeignKey(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    offer = models.ForeignKey("offers.Offer", on_delete=models.CASCADE, related_name="payments")

    class Meta(_PaymentBase.Meta):
        db_table = "payments"
        indexes = [
            models.Index(fields=["creator", "status"]),
            models.Index(fields=["company", "status"]),
        ]

    def __str__(self):
        return f"Payment {self.pk} ({self.status}) {self.net_amount}"


class RetainerPayment(_PaymentBase):
    """Payout for a retainer deliverable, a contract month, or a bonus."""

    class Type(models.TextChoices):
        DELIVERABLE = "deliverable", "Deliverable"
        MONTHLY = "monthly", "Monthly"
        BONUS = "bonus", "Bonus"

    contract = models.ForeignKey(
        "retainers.RetainerContract",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    deliverable = models.ForeignKey(
        "retainers.RetainerDeliverable",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="payments",
    )
    month_number = models.PositiveIntegerField(null=True, blank=True)
    payment_type = models.CharField(max_length=20, choices=Type.choices, default=Type.DELIVERABLE)

    class Meta(_PaymentBase.Meta):
        db_table = "retainer_payments"
        indexes = [
            models.Index(fields=["contract", "payment_type", "month_number"]),
            models.Index(fields=["creator", "status"]),
        ]

    def __str__(self):
        return f"RetainerPayment {self.pk} ({self.payment_type}, {self.status})"

"""
Users Models

Marketplace accounts. Every user has exactly one role; creators and
companies each get a profile that the onboarding wizard fills in.
"""

import secrets

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """Email-keyed user manager."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email address must be set")
        email = self.normalize_email(email)
        extra_fields.setdefault("username", email.split("@")[0])
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Marketplace account: creator, company or admin."""

    class Role(models.TextChoices):
        CREATOR = "creator", "Creator"
        COMPANY = "company", "Company"
        ADMIN = "admin", "Admin"

    class AccountStatus(models.TextChoices):
        ACTIVE = "active", "Active"
        SUSPENDED = "suspended", "Suspended"
        BANNED = "banned", "Banned"

    email = models.EmailField(unique=True)
    username = models.CharField(max_length=150, unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CREATOR)
    account_status = models.CharField(
        max_length=20,
        choices=AccountStatus.choices,
        default=AccountStatus.ACTIVE,
    )
    email_verified = models.BooleanField(default=False)
    google_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    profile_image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_creator(self) -> bool:
        return self.role == self.Role.CREATOR

    @property
    def is_company(self) -> bool:
        return self.role == self.Role.COMPANY

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    @property
    def is_account_active(self) -> bool:
        return self.is_active and self.account_status == self.AccountStatus.ACTIVE

    @property
    def display_name(self) -> str:
        full = self.get_full_name()
        return full or self.username


class CreatorProfile(models.Model):
    """Creator channel details used for eligibility and recommendations."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="creator_profile")
    bio = models.TextField(blank=True)
    youtube_url = models.URLField(blank=True)
    tiktok_url = models.URLField(blank=True)
    instagram_url = models.URLField(blank=True)
    youtube_followers = models.PositiveIntegerField(null=True, blank=True)
    tiktok_followers = models.PositiveIntegerField(null=True, blank=True)
    instagram_followers = models.PositiveIntegerField(null=True, blank=True)
    niches = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "creator_profiles"

    def __str__(self):
        return f"Creator profile: {self.user.username}"

    @property
    def has_video_platform(self) -> bool:
        return bool(self.youtube_url or self.tiktok_url or self.instagram_url)

    @property
    def platforms(self) -> list:
        mapping = {
            "youtube": self.youtube_url,
            "tiktok": self.tiktok_url,
            "instagram": self.instagram_url,
        }
        return [name for name, url in mapping.items() if url]

    @property
    def total_followers(self) -> int:
        return sum(
            count or 0
            for count in (self.youtube_followers, self.tiktok_followers, self.instagram_followers)
        )


class CompanyProfile(models.Model):
    """Advertiser details; must be approved before offers go live."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        SUSPENDED = "suspended", "Suspended"

    class CompanySize(models.TextChoices):
        SOLO = "1-10", "1-10"
        SMALL = "11-50", "11-50"
        MEDIUM = "51-200", "51-200"
        LARGE = "201-500", "201-500"
        ENTERPRISE = "500+", "500+"

    class VerificationMethod(models.TextChoices):
        META_TAG = "meta_tag", "Meta tag"
        DNS_TXT = "dns_txt", "DNS TXT record"

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="company_profile")
    legal_name = models.CharField(max_length=255, blank=True)
    trade_name = models.CharField(max_length=255, blank=True)
    industry = models.CharField(max_length=100, blank=True)
    website_url = models.URLField(blank=True)
    company_size = models.CharField(max_length=20, choices=CompanySize.choices, blank=True)
    year_founded = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1800)])
    logo_url = models.URLField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    contact_name = models.CharField(max_length=255, blank=True)
    contact_job_title = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=50, blank=True)
    business_address = models.TextField(blank=True)
    linkedin_url = models.URLField(blank=True)
    twitter_url = models.URLField(blank=True)
    facebook_url = models.URLField(blank=True)
    instagram_url = models.URLField(blank=True)

    website_verification_token = models.CharField(max_length=100, blank=True)
    website_verified = models.BooleanField(default=False)
    website_verification_method = models.CharField(
        max_length=20, choices=VerificationMethod.choices, blank=True,
    )
    website_verified_at = models.DateTimeField(null=True, blank=True)

    # Fraction, e.g. 0.0300 for 3 %; overrides the platform fee when set
    custom_platform_fee_percentage = models.DecimalField(
        max_digits=5, decimal_places=4, null=True, blank=True,
    )

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "company_profiles"
        ordering = ["-created_at"]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name or self.user.username

    @property
    def is_approved(self) -> bool:
        return self.status == self.Status.APPROVED

    def issue_verification_token(self) -> str:
        self.website_verification_token = f"affiliatexchange-verify-{secrets.token_hex(16)}"
        self.website_verified = False
        self.website_verified_at = None
        self.save(update_fields=[
            "website_verification_token", "website_verified", "website_verified_at", "updated_at",
        ])
        return self.website_verification_token

    def mark_website_verified(self, method: str) -> None:
        self.website_verified = True
        self.website_verification_method = method
        self.website_verified_at = timezone.now()
        self.save(update_fields=[
            "website_verified", "website_verification_method", "website_verified_at", "updated_at",
        ])

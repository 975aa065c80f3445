"""
Users Repositories
==================

Data-access layer for User, CreatorProfile and CompanyProfile models.
"""

from django.contrib.auth import get_user_model
from django.db.models import QuerySet

from core.repositories import BaseRepository
from .models import CreatorProfile, CompanyProfile

User = get_user_model()


class UserRepository(BaseRepository[User]):
    """User data access."""

    model = User

    @classmethod
    def get_by_email(cls, email: str):
        """Get user by email (case-insensitive), or None."""
        return cls.model.objects.filter(email__iexact=email).first()

    @classmethod
    def get_by_google_id(cls, google_id: str):
        return cls.model.objects.filter(google_id=google_id).first()

    @classmethod
    def username_taken(cls, username: str) -> bool:
        return cls.model.objects.filter(username__iexact=username).exists()

    @classmethod
    def create_user(cls, email: str, password=None, **extra_fields):
        """Create a new user through the custom UserManager."""
        return cls.model.objects.create_user(email, password, **extra_fields)

    @classmethod
    def get_admins(cls) -> QuerySet:
        return cls.model.objects.filter(role=User.Role.ADMIN, is_active=True)

    @classmethod
    def get_creators(cls, status: str = None) -> QuerySet:
        qs = cls.model.objects.filter(role=User.Role.CREATOR).select_related("creator_profile")
        if status:
            qs = qs.filter(account_status=status)
        return qs


class CreatorProfileRepository(BaseRepository[CreatorProfile]):
    """Creator profile data access."""

    model = CreatorProfile

    @classmethod
    def get_for_user(cls, user):
        profile, _ = cls.model.objects.get_or_create(user=user)
        return profile


class CompanyProfileRepository(BaseRepository[CompanyProfile]):
    """Company profile data access."""

    model = CompanyProfile

    @classmethod
    def get_for_user(cls, user):
        profile, _ = cls.model.objects.get_or_create(user=user)
        return profile

    @classmethod
    def get_by_status(cls, status: str = None) -> QuerySet:
        qs = cls.model.objects.select_related("user")
        if status:
            qs = qs.filter(status=status)
        return qs


# Singleton instances for convenience
user_repo = UserRepository()
creator_profile_repo = CreatorProfileRepository()
company_profile_repo = CompanyProfileRepository()

"""
Moderation Repositories
=======================

Data-access layer for BannedKeyword and ContentFlag.
"""

from django.db.models import QuerySet

from core.repositories import BaseRepository
from .models import BannedKeyword, ContentFlag

DEFAULT_KEYWORDS = [
    {"keyword": "scam", "category": "spam", "severity": 4, "description": "Potential scam-related content"},
    {"keyword": "fraud", "category": "legal", "severity": 5, "description": "Fraud-related term"},
    {"keyword": "guaranteed money", "category": "spam", "severity": 3, "description": "Misleading financial claims"},
    {"keyword": "get rich quick", "category": "spam", "severity": 3, "description": "Misleading financial claims"},
    {"keyword": "free money", "category": "spam", "severity": 3, "description": "Spam-like promotional content"},
]


class BannedKeywordRepository(BaseRepository[BannedKeyword]):
    model = BannedKeyword

    @classmethod
    def active(cls) -> QuerySet:
        return cls.model.objects.filter(is_active=True)

    @classmethod
    def seed_defaults(cls) -> int:
        """Insert the default keyword list when the table is empty."""
        if cls.model.objects.exists():
            return 0
        cls.model.objects.bulk_create([cls.model(**kw) for kw in DEFAULT_KEYWORDS])
        return len(DEFAULT_KEYWORDS)


class ContentFlagRepository(BaseRepository[ContentFlag]):
    model = ContentFlag

    @classmethod
    def by_status(cls, status: str = None, content_type: str = None) -> QuerySet:
        qs = cls.model.objects.select_related("user", "reviewed_by")
        if status:
            qs = qs.filter(status=status)
        if content_type:
            qs = qs.filter(content_type=content_type)
        return qs

    @classmethod
    def pending_count(cls) -> int:
        return cls.model.objects.filter(status=ContentFlag.Status.PENDING).count()


banned_keyword_repo = BannedKeywordRepository()
content_flag_repo = ContentFlagRepository()

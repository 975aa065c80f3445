"""
Administration Repositories
===========================

Data-access layer for AuditLog and PlatformSetting.
"""

from django.db.models import QuerySet

from core.repositories import BaseRepository
from .models import AuditLog, PlatformSetting


class AuditLogRepository(BaseRepository[AuditLog]):
    model = AuditLog

    @classmethod
    def search(cls, action: str = None, entity_type: str = None, entity_id: str = None) -> QuerySet:
        qs = cls.model.objects.select_related("actor")
        if action:
            qs = qs.filter(action=action)
        if entity_type:
            qs = qs.filter(entity_type=entity_type)
        if entity_id:
            qs = qs.filter(entity_id=str(entity_id))
        return qs


class PlatformSettingRepository(BaseRepository[PlatformSetting]):
    model = PlatformSetting

    @classmethod
    def get_by_key(cls, key: str):
        return cls.model.objects.filter(key=key).first()

    @classmethod
    def values_for_category(cls, category: str) -> dict:
        return dict(cls.model.objects.filter(category=category).values_list("key", "value"))

    @classmethod
    def upsert(cls, key: str, value: str, **fields) -> tuple:
        return cls.model.objects.update_or_create(key=key, defaults={"value": value, **fields})


audit_log_repo = AuditLogRepository()
platform_setting_repo = PlatformSettingRepository()

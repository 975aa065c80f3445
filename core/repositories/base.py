"""
Data-access base class.

Each app declares a repository per model and uses a module-level
instance (``offer_repo``, ``payment_repo``...) from its services and
views. Queries that belong to one model live on its repository so the
services read as business rules::

    class OfferRepository(BaseRepository[Offer]):
        model = Offer

        @classmethod
        def live(cls):
            return cls.model.objects.filter(status=Offer.Status.APPROVED)

    offer_repo = OfferRepository()
"""

from typing import Any, Generic, Optional, Type, TypeVar

from django.db import models
from django.db.models import F, QuerySet

from core.exceptions import NotFoundError

T = TypeVar("T", bound=models.Model)


class BaseRepository(Generic[T]):
    model: Type[T]

    @classmethod
    def _not_found(cls) -> NotFoundError:
        meta = cls.model._meta
        return NotFoundError(f"{meta.verbose_name.capitalize()} not found", resource=meta.model_name)

    @classmethod
    def get_by_id(cls, pk: Any) -> T:
        """Fetch by primary key or raise ``NotFoundError`` (404)."""
        instance = cls.get_by_id_or_none(pk)
        if instance is None:
            raise cls._not_found()
        return instance

    @classmethod
    def get_by_id_or_none(cls, pk: Any) -> Optional[T]:
        try:
            return cls.model.objects.filter(pk=pk).first()
        except (TypeError, ValueError):
            # A non-numeric id in the URL or a socket frame
            return None

    @classmethod
    def get_for_update(cls, pk: Any) -> T:
        """Re-read a row with a lock held; call inside ``transaction.atomic()``."""
        try:
            return cls.model.objects.select_for_update().get(pk=pk)
        except cls.model.DoesNotExist:
            raise cls._not_found()

    @classmethod
    def get_all(cls) -> QuerySet:
        return cls.model.objects.all()

    @classmethod
    def filter(cls, **lookups) -> QuerySet:
        return cls.model.objects.filter(**lookups)

    @classmethod
    def exists(cls, **lookups) -> bool:
        return cls.model.objects.filter(**lookups).exists()

    @classmethod
    def count(cls, **lookups) -> int:
        return cls.model.objects.filter(**lookups).count()

    @classmethod
    def create(cls, **fields) -> T:
        return cls.model.objects.create(**fields)

    @classmethod
    def get_or_create(cls, defaults: Optional[dict] = None, **lookups) -> tuple:
        return cls.model.objects.get_or_create(defaults=defaults or {}, **lookups)

    @classmethod
    def update(cls, instance: T, **fields) -> T:
        """Assign ``fields`` and save only those columns (plus ``updated_at``)."""
        for name, value in fields.items():
            setattr(instance, name, value)
        columns = list(fields)
        if "updated_at" not in columns and any(f.name == "updated_at" for f in instance._meta.concrete_fields):
            columns.append("updated_at")
        instance.save(update_fields=columns)
        return instance

    @classmethod
    def increment(cls, pk: Any, column: str, by: int = 1) -> int:
        # F() keeps concurrent bumps (view counts, clicks) from losing updates
        return cls.model.objects.filter(pk=pk).update(**{column: F(column) + by})

    @classmethod
    def delete(cls, instance: T) -> None:
        instance.delete()

"""
Retainers Repositories
======================

Data-access layer for retainer contracts, applications and deliverables.
"""

from django.db.models import Q, QuerySet
from django.utils import timezone

from core.repositories import BaseRepository
from .models import RetainerContract, RetainerApplication, RetainerDeliverable


class RetainerContractRepository(BaseRepository[RetainerContract]):
    model = RetainerContract

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("company", "assigned_creator")

    @classmethod
    def for_company(cls, company, status: str = None) -> QuerySet:
        qs = cls._base().filter(company=company)
        return qs.filter(status=status) if status else qs

    @classmethod
    def browse_for_creator(cls, creator) -> QuerySet:
        """Open contracts plus the ones assigned to ``creator``, each once."""
        return cls._base().filter(
            Q(status=RetainerContract.Status.OPEN) | Q(assigned_creator=creator)
        ).distinct()

    @classmethod
    def payable(cls, now=None) -> QuerySet:
        """In-progress contracts with an assigned creator, started and not ended."""
        now = now or timezone.now()
        return cls._base().filter(
            status=RetainerContract.Status.IN_PROGRESS,
            assigned_creator__isnull=False,
            start_date__isnull=False,
            start_date__lte=now,
        ).filter(Q(end_date__isnull=True) | Q(end_date__gte=now))

    @classmethod
    def by_status(cls, status: str = None) -> QuerySet:
        qs = cls._base()
        return qs.filter(status=status) if status else qs


class RetainerApplicationRepository(BaseRepository[RetainerApplication]):
    model = RetainerApplication

    @classmethod
    def for_contract(cls, contract) -> QuerySet:
        return cls.model.objects.filter(contract=contract).select_related("creator", "creator__creator_profile")

    @classmethod
    def for_creator(cls, creator) -> QuerySet:
        return cls.model.objects.filter(creator=creator).select_related("contract", "contract__company")

    @classmethod
    def has_open_application(cls, contract, creator) -> bool:
        return cls.model.objects.filter(
            contract=contract,
            creator=creator,
            status__in=[RetainerApplication.Status.PENDING, RetainerApplication.Status.APPROVED],
        ).exists()

    @classmethod
    def reject_other_pending(cls, contract, keep_pk) -> list:
        others = list(
            cls.model.objects.filter(contract=contract, status=RetainerApplication.Status.PENDING)
            .exclude(pk=keep_pk)
            .select_related("creator")
        )
        cls.model.objects.filter(pk__in=[a.pk for a in others]).update(
            status=RetainerApplication.Status.REJECTED, updated_at=timezone.now(),
        )
        return others


class RetainerDeliverableRepository(BaseRepository[RetainerDeliverable]):
    model = RetainerDeliverable

    @classmethod
    def for_contract(cls, contract, month_number=None) -> QuerySet:
        qs = cls.model.objects.filter(contract=contract).select_related("creator")
        return qs.filter(month_number=month_number) if month_number else qs

    @classmethod
    def for_creator(cls, creator) -> QuerySet:
        return cls.model.objects.filter(creator=creator).select_related("contract")

    @classmethod
    def slot_taken(cls, contract, month_number: int, video_number: int) -> bool:
        """A non-rejected deliverable already fills this month/video slot."""
        return cls.model.objects.filter(
            contract=contract, month_number=month_number, video_number=video_number,
        ).exclude(status=RetainerDeliverable.Status.REJECTED).exists()


retainer_contract_repo = RetainerContractRepository()
retainer_application_repo = RetainerApplicationRepository()
retainer_deliverable_repo = RetainerDeliverableRepository()

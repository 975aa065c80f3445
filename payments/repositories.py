"""
Payments Repositories
=====================

Data-access layer for PaymentSetting, Payment and RetainerPayment.
"""

from django.db.models import QuerySet

from core.repositories import BaseRepository
from .models import PaymentSetting, Payment, PaymentStatus, RetainerPayment


class PaymentSettingRepository(BaseRepository[PaymentSetting]):
    model = PaymentSetting

    @classmethod
    def for_user(cls, user) -> QuerySet:
        return cls.model.objects.filter(user=user)

    @classmethod
    def has_payment_method(cls, user) -> bool:
        return cls.model.objects.filter(user=user).exists()

    @classmethod
    def clear_default(cls, user) -> None:
        cls.model.objects.filter(user=user, is_default=True).update(is_default=False)


class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("creator", "company", "offer", "application")

    @classmethod
    def for_creator(cls, creator, status: str = None) -> QuerySet:
        qs = cls._base().filter(creator=creator)
        return qs.filter(status=status) if status else qs

    @classmethod
    def for_company(cls, company, status: str = None) -> QuerySet:
        qs = cls._base().filter(company=company)
        return qs.filter(status=status) if status else qs

    @classmethod
    def by_status(cls, status: str = None) -> QuerySet:
        qs = cls._base()
        return qs.filter(status=status) if status else qs

    @classmethod
    def disputed(cls) -> QuerySet:
        return cls._base().filter(status=PaymentStatus.FAILED).exclude(dispute_reason="")


class RetainerPaymentRepository(BaseRepository[RetainerPayment]):
    model = RetainerPayment

    @classmethod
    def _base(cls) -> QuerySet:
        return cls.model.objects.select_related("creator", "company", "contract", "deliverable")

    @classmethod
    def for_creator(cls, creator, status: str = None) -> QuerySet:
        qs = cls._base().filter(creator=creator)
        return qs.filter(status=status) if status else qs

    @classmethod
    def for_company(cls, company, status: str = None) -> QuerySet:
        qs = cls._base().filter(company=company)
        return qs.filter(status=status) if status else qs

    @classmethod
    def by_status(cls, status: str = None) -> QuerySet:
        qs = cls._base()
        return qs.filter(status=status) if status else qs

    @classmethod
    def disputed(cls) -> QuerySet:
        return cls._base().filter(status=PaymentStatus.FAILED).exclude(dispute_reason="")

    @classmethod
    def monthly_exists(cls, contract, month_number: int) -> bool:
        return cls.model.objects.filter(
            contract=contract,
            payment_type=RetainerPayment.Type.MONTHLY,
            month_number=month_number,
        ).exists()


payment_setting_repo = PaymentSettingRepository()
payment_repo = PaymentRepository()
retainer_payment_repo = RetainerPaymentRepository()

"""
Payment Services
================

Creates payout records and moves them through their lifecycle. No money
moves here: "processing" means the company signed off and the payout is
queued for the finance team.

    pending ──company approve──▶ processing ──admin──▶ completed
       │                                        └────▶ failed / refunded
       └──company dispute──▶ failed (dispute_reason set)
                                 └──admin resolve──▶ refunded | pending
"""

from decimal import Decimal

from django.utils import timezone

from affiliatexchange.config import config
from core.exceptions import ConflictError, ValidationError
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from .fees import calculate_fees
from .models import Payment, PaymentStatus, RetainerPayment
from .repositories import payment_setting_repo, payment_repo, retainer_payment_repo

# Admin-settable terminal states and the notification each one sends
ADMIN_STATUS_NOTIFICATIONS = {
    PaymentStatus.COMPLETED.value: (NotificationType.PAYMENT_RECEIVED, "Payment sent"),
    PaymentStatus.FAILED.value: (NotificationType.PAYMENT_FAILED, "Payment failed"),
    PaymentStatus.REFUNDED.value: (NotificationType.PAYMENT_REFUNDED, "Payment refunded"),
}


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


class PaymentService(BaseService):

    # ── Creation ─────────────────────────────────────────────────────

    @staticmethod
    def commission_for(offer, sale_amount=None) -> Decimal:
        """
        Gross commission for one completed application.

        Per-sale offers with a percentage pay ``sale_amount`` × percentage
        (``sale_amount`` defaults to the configured placeholder sale);
        every other type pays the fixed commission amount.
        """
        if offer.commission_type == "per_sale" and offer.commission_percentage:
            base = Decimal(str(sale_amount)) if sale_amount not in (None, "") else config.platform.default_sale_amount
            if base < 0:
                raise ValidationError("Sale amount cannot be negative", field="sale_amount")
            return base * Decimal(offer.commission_percentage) / 100
        if offer.commission_type != "per_sale" and offer.commission_amount:
            return Decimal(offer.commission_amount)
        return Decimal("0")

    @classmethod
    def create_for_application(cls, application, sale_amount=None) -> Payment:
        offer = application.offer
        return cls._commission_payment(
            application,
            cls.commission_for(offer, sale_amount),
            description=f"Payment for {offer.title}",
            title="Work completed - payment pending",
            lead=f'Your work for "{offer.title}" has been marked as complete.',
        )

    @classmethod
    def create_for_conversion(cls, application, gross) -> Payment:
        offer = application.offer
        return cls._commission_payment(
            application,
            gross,
            description=f"Commission for {offer.get_commission_type_display().lower()} conversion",
            title="Conversion recorded - payment pending",
            lead=f'{offer.company.display_name} recorded a conversion on "{offer.title}".',
        )

    @classmethod
    def _commission_payment(cls, application, gross, description: str, title: str, lead: str) -> Payment:
        offer = application.offer
        fees = calculate_fees(gross, offer.company)
        payment = payment_repo.create(
            application=application,
            creator=application.creator,
            company=offer.company,
            offer=offer,
            gross_amount=fees.gross_amount,
            platform_fee_amount=fees.platform_fee_amount,
            processing_fee_amount=fees.processing_fee_amount,
            net_amount=fees.net_amount,
            status=PaymentStatus.PENDING,
            description=description,
        )
        cls.logger.info("Created payment %s for application %s (net %s)", payment.pk, application.pk, fees.net_amount)

        NotificationService.send(
            application.creator,
            NotificationType.PAYMENT_PENDING,
            title,
            f"{lead} Payment of {_money(fees.net_amount)} is pending company approval.",
            {"payment_id": payment.pk, "application_id": application.pk},
        )
        NotificationService.notify_admins(
            NotificationType.PAYMENT_PENDING,
            "New payment pending",
            f"A payment of {_money(fees.gross_amount)} for \"{offer.title}\" is awaiting processing.",
            {"payment_id": payment.pk},
        )
        return payment

    @classmethod
    def create_for_deliverable(cls, deliverable) -> RetainerPayment:
        contract = deliverable.contract
        gross = Decimal(contract.monthly_amount) / max(contract.videos_per_month, 1)
        fees = calculate_fees(gross, contract.company)
        payment = retainer_payment_repo.create(
            contract=contract,
            deliverable=deliverable,
            creator=deliverable.creator,
            company=contract.company,
            month_number=deliverable.month_number,
            payment_type=RetainerPayment.Type.DELIVERABLE,
            gross_amount=fees.gross_amount,
            platform_fee_amount=fees.platform_fee_amount,
            processing_fee_amount=fees.processing_fee_amount,
            net_amount=fees.net_amount,
            description=(
                f"Retainer payment for {contract.title} - "
                f"month {deliverable.month_number}, video {deliverable.video_number}"
            ),
        )
        cls.logger.info("Created retainer payment %s for deliverable %s", payment.pk, deliverable.pk)

        NotificationService.send(
            deliverable.creator,
            NotificationType.PAYMENT_PENDING,
            "Deliverable approved - payment pending",
            f'Your video for "{contract.title}" was approved. '
            f"Payment of {_money(fees.net_amount)} is being processed.",
            {"payment_id": payment.pk, "contract_id": contract.pk},
        )
        NotificationService.notify_admins(
            NotificationType.PAYMENT_PENDING,
            "New retainer payment pending",
            f'A retainer payment of {_money(fees.gross_amount)} for "{contract.title}" is awaiting processing.',
            {"payment_id": payment.pk},
        )
        return payment

    @classmethod
    def create_monthly(cls, contract, month_number: int) -> RetainerPayment:
        fees = calculate_fees(contract.monthly_amount, contract.company)
        return retainer_payment_repo.create(
            contract=contract,
            creator=contract.assigned_creator,
            company=contract.company,
            month_number=month_number,
            payment_type=RetainerPayment.Type.MONTHLY,
            gross_amount=fees.gross_amount,
            platform_fee_amount=fees.platform_fee_amount,
            processing_fee_amount=fees.processing_fee_amount,
            net_amount=fees.net_amount,
            description=f"Monthly retainer payment for {contract.title} - month {month_number}",
        )

    # ── Company actions ──────────────────────────────────────────────

    @classmethod
    def approve(cls, payment, user):
        """Company signs off on a pending payment."""
        cls.ensure_owner(payment.company.user_id, user, "You can only approve your own payments")
        if payment.status != PaymentStatus.PENDING:
            raise ConflictError(f"Cannot approve a {payment.status} payment", resource="payment")
        payment = _repo_for(payment).update(
            payment, status=PaymentStatus.PROCESSING, initiated_at=timezone.now(),
        )
        cls._notify_creator(
            payment,
            NotificationType.PAYMENT_APPROVED,
            "Payment approved",
            f"Your payment of {_money(payment.net_amount)} was approved and is being processed.",
        )
        return payment

    @classmethod
    def dispute(cls, payment, user, reason: str):
        cls.ensure_owner(payment.company.user_id, user, "You can only dispute your own payments")
        if not (reason or "").strip():
            raise ValidationError("A dispute reason is required", field="reason")
        if payment.status != PaymentStatus.PENDING:
            raise ConflictError(f"Cannot dispute a {payment.status} payment", resource="payment")
        payment = _repo_for(payment).update(
            payment,
            status=PaymentStatus.FAILED,
            dispute_reason=reason.strip(),
            failed_at=timezone.now(),
        )
        cls.logger.warning("Payment %s disputed by company %s", payment.pk, payment.company_id)
        cls._notify_creator(
            payment,
            NotificationType.PAYMENT_DISPUTED,
            "Payment disputed",
            f"The company disputed your payment of {_money(payment.net_amount)}: {reason.strip()}",
        )
        NotificationService.notify_admins(
            NotificationType.PAYMENT_DISPUTED,
            "Payment disputed",
            f"{payment.company.display_name} disputed payment {payment.pk}: {reason.strip()}",
            {"payment_id": payment.pk},
        )
        return payment

    # ── Admin actions ────────────────────────────────────────────────

    @classmethod
    def set_status(cls, payment, status: str):
        status = str(status)
        if status not in ADMIN_STATUS_NOTIFICATIONS and status != PaymentStatus.PROCESSING:
            raise ValidationError(f"Unsupported payment status: {status}", field="status")
        if payment.status == status:
            return payment

        now = timezone.now()
        changes = {"status": status}
        if status == PaymentStatus.PROCESSING:
            changes["initiated_at"] = now
        elif status == PaymentStatus.COMPLETED:
            changes["completed_at"] = now
        elif status == PaymentStatus.FAILED:
            changes["failed_at"] = now
        elif status == PaymentStatus.REFUNDED:
            changes["refunded_at"] = now
        payment = _repo_for(payment).update(payment, **changes)
        cls.logger.info("Payment %s -> %s", payment.pk, status)

        if status in ADMIN_STATUS_NOTIFICATIONS:
            notification_type, title = ADMIN_STATUS_NOTIFICATIONS[status]
            cls._notify_creator(
                payment, notification_type, title,
                f"Your payment of {_money(payment.net_amount)} is now {status}.",
            )
        return payment

    @classmethod
    def resolve_dispute(cls, payment, resolution: str, notes: str = ""):
        """``resolution`` is ``refund`` (close it out) or ``requeue`` (back to pending)."""
        if not payment.dispute_reason:
            raise ConflictError("This payment is not disputed", resource="payment")
        if resolution == "refund":
            payment = _repo_for(payment).update(
                payment, status=PaymentStatus.REFUNDED, refunded_at=timezone.now(),
            )
        elif resolution == "requeue":
            payment = _repo_for(payment).update(
                payment, status=PaymentStatus.PENDING, dispute_reason="", failed_at=None,
            )
        else:
            raise ValidationError("Resolution must be 'refund' or 'requeue'", field="resolution")

        message = f"The dispute on your payment of {_money(payment.net_amount)} was resolved ({resolution})."
        if notes:
            message += f" {notes}"
        cls._notify_creator(payment, NotificationType.PAYMENT_DISPUTE_RESOLVED, "Payment dispute resolved", message)
        return payment

    # ── Payout settings ──────────────────────────────────────────────

    @classmethod
    def add_payment_setting(cls, user, data: dict):
        with cls.atomic():
            first = not payment_setting_repo.has_payment_method(user)
            if data.get("is_default") or first:
                payment_setting_repo.clear_default(user)
                data["is_default"] = True
            return payment_setting_repo.create(user=user, **data)

    @classmethod
    def _notify_creator(cls, payment, notification_type, title: str, message: str) -> None:
        NotificationService.send(payment.creator, notification_type, title, message, {"payment_id": payment.pk})


def _repo_for(payment):
    return retainer_payment_repo if isinstance(payment, RetainerPayment) else payment_repo

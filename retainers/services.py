"""
Retainer Services
=================

Monthly retainer contracts between a company and a single creator.

Contract:     open ──approve application──▶ in_progress ⇄ paused ──▶ completed | cancelled
Deliverable:  pending_review ──▶ approved | rejected | revision_requested
              revision_requested ──resubmit──▶ pending_review

Approving a deliverable raises a per-video RetainerPayment; the monthly
job raises one "monthly" payment per contract month.
"""

import calendar
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from affiliatexchange.config import config
from core.exceptions import ConflictError, ValidationError
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from payments.repositories import payment_setting_repo, retainer_payment_repo
from payments.services import PaymentService
from users.services import creator_is_eligible
from .models import RetainerContract, RetainerApplication, RetainerDeliverable
from .repositories import retainer_contract_repo, retainer_application_repo, retainer_deliverable_repo

TIER_FIELDS = ("name", "monthly_amount", "videos_per_month", "duration_months")

# Company-driven contract status changes: target → allowed current statuses
CONTRACT_TRANSITIONS = {
    RetainerContract.Status.PAUSED.value: {RetainerContract.Status.IN_PROGRESS.value},
    RetainerContract.Status.IN_PROGRESS.value: {RetainerContract.Status.PAUSED.value},
    RetainerContract.Status.COMPLETED.value: {
        RetainerContract.Status.IN_PROGRESS.value, RetainerContract.Status.PAUSED.value,
    },
    RetainerContract.Status.CANCELLED.value: {
        RetainerContract.Status.OPEN.value,
        RetainerContract.Status.IN_PROGRESS.value,
        RetainerContract.Status.PAUSED.value,
    },
}


def add_months(moment, months: int):
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def contract_month_number(contract, now=None) -> int:
    """1-based month of the contract ``now`` falls in."""
    if not contract.start_date:
        return 1
    now = now or timezone.now()
    start = contract.start_date
    elapsed = (now.year - start.year) * 12 + (now.month - start.month) + 1
    return max(1, elapsed)


def normalize_niches(value) -> list:
    """Accept a list or a comma-separated string."""
    if value in (None, ""):
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Niches must be a list or a comma-separated string", field="niches")
    return [str(v).strip() for v in value if str(v).strip()]


def validate_tiers(tiers) -> list:
    if tiers in (None, ""):
        return []
    if not isinstance(tiers, list):
        raise ValidationError("Retainer tiers must be a list", field="retainer_tiers")
    if len(tiers) > config.platform.max_retainer_tiers:
        raise ValidationError(
            f"A contract can have at most {config.platform.max_retainer_tiers} tiers", field="retainer_tiers",
        )
    cleaned = []
    for index, tier in enumerate(tiers, start=1):
        if not isinstance(tier, dict) or any(tier.get(key) in (None, "") for key in TIER_FIELDS):
            raise ValidationError(
                f"Tier {index} needs {', '.join(TIER_FIELDS)}", field="retainer_tiers",
            )
        try:
            amount = Decimal(str(tier["monthly_amount"]))
            videos = int(tier["videos_per_month"])
            months = int(tier["duration_months"])
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Tier {index} has a non-numeric value", field="retainer_tiers")
        if amount <= 0 or videos < 1 or months < 1:
            raise ValidationError(f"Tier {index} values must be positive", field="retainer_tiers")
        cleaned.append({
            "name": str(tier["name"]).strip(),
            "monthly_amount": str(amount),
            "videos_per_month": videos,
            "duration_months": months,
        })
    return cleaned


class RetainerService(BaseService):

    # ── Contracts ────────────────────────────────────────────────────

    @classmethod
    def _clean(cls, data: dict) -> dict:
        data = dict(data)
        if "niches" in data:
            data["niches"] = normalize_niches(data["niches"])
        if "retainer_tiers" in data:
            data["retainer_tiers"] = validate_tiers(data["retainer_tiers"])
        return data

    @classmethod
    def create_contract(cls, company, data: dict) -> RetainerContract:
        contract = retainer_contract_repo.create(company=company, **cls._clean(data))
        cls.logger.info("Company %s opened retainer %s", company.pk, contract.pk)
        return contract

    @classmethod
    def update_contract(cls, contract: RetainerContract, user, data: dict) -> RetainerContract:
        cls.ensure_owner(contract.company.user_id, user, "You can only edit your own contracts")
        if contract.status in (RetainerContract.Status.COMPLETED, RetainerContract.Status.CANCELLED):
            raise ConflictError(f"Cannot edit a {contract.status} contract", resource="retainer_contract")
        return retainer_contract_repo.update(contract, **cls._clean(data))

    @classmethod
    def delete_contract(cls, contract: RetainerContract, user) -> None:
        cls.ensure_owner(contract.company.user_id, user, "You can only delete your own contracts")
        if contract.status in (RetainerContract.Status.IN_PROGRESS, RetainerContract.Status.PAUSED):
            raise ConflictError("Cancel the contract before deleting it", resource="retainer_contract")
        retainer_contract_repo.delete(contract)

    @classmethod
    def change_status(cls, contract: RetainerContract, user, status: str) -> RetainerContract:
        cls.ensure_owner(contract.company.user_id, user)
        status = str(status)
        allowed = CONTRACT_TRANSITIONS.get(status)
        if allowed is None:
            raise ValidationError(f"Unsupported contract status: {status}", field="status")
        if contract.status not in allowed:
            raise ConflictError(f"Cannot move a {contract.status} contract to {status}", resource="retainer_contract")
        contract = retainer_contract_repo.update(contract, status=status)
        if contract.assigned_creator:
            NotificationService.send(
                contract.assigned_creator,
                NotificationType.APPLICATION_STATUS_CHANGE,
                "Retainer contract updated",
                f'"{contract.title}" is now {contract.get_status_display().lower()}.',
                {"link_url": f"/retainer-contracts/{contract.pk}"},
            )
        return contract

    # ── Applications ─────────────────────────────────────────────────

    @classmethod
    def apply(cls, creator, contract: RetainerContract, data: dict) -> RetainerApplication:
        if not creator_is_eligible(creator):
            raise ValidationError(
                "Video platform required: add a YouTube, TikTok or Instagram account to your profile first",
                field="platforms",
            )
        if contract.status != RetainerContract.Status.OPEN:
            raise ConflictError("This contract is not accepting applications", resource="retainer_contract")
        if retainer_application_repo.has_open_application(contract, creator):
            raise ConflictError("You have already applied to this contract", resource="retainer_application")

        application = retainer_application_repo.create(contract=contract, creator=creator, **data)
        NotificationService.send(
            contract.company.user,
            NotificationType.NEW_APPLICATION,
            "New retainer application",
            f'{creator.display_name} applied to your retainer "{contract.title}".',
            {"contract_id": contract.pk},
        )
        return application

    @classmethod
    def approve_application(cls, application: RetainerApplication, user) -> RetainerApplication:
        contract = application.contract
        cls.ensure_owner(contract.company.user_id, user, "You can only review applications to your contracts")
        if application.status != RetainerApplication.Status.PENDING:
            raise ConflictError(f"Cannot approve a {application.status} application", resource="retainer_application")

        with cls.atomic():
            contract = retainer_contract_repo.get_for_update(contract.pk)
            if contract.status != RetainerContract.Status.OPEN or contract.assigned_creator_id:
                raise ConflictError("This contract already has a creator", resource="retainer_contract")

            start = timezone.now()
            retainer_contract_repo.update(
                contract,
                assigned_creator=application.creator,
                status=RetainerContract.Status.IN_PROGRESS,
                start_date=start,
                end_date=add_months(start, contract.duration_months),
            )
            application = retainer_application_repo.update(application, status=RetainerApplication.Status.APPROVED)
            rejected = retainer_application_repo.reject_other_pending(contract, application.pk)

        cls.logger.info("Retainer %s assigned to creator %s", contract.pk, application.creator_id)
        NotificationService.send(
            application.creator,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Retainer application approved",
            f'You were selected for "{contract.title}". The contract starts today.',
            {"link_url": f"/retainer-contracts/{contract.pk}"},
        )
        for other in rejected:
            cls._notify_rejected(other, contract)
        return application

    @classmethod
    def reject_application(cls, application: RetainerApplication, user) -> RetainerApplication:
        cls.ensure_owner(application.contract.company.user_id, user, "You can only review applications to your contracts")
        if application.status != RetainerApplication.Status.PENDING:
            raise ConflictError(f"Cannot reject a {application.status} application", resource="retainer_application")
        application = retainer_application_repo.update(application, status=RetainerApplication.Status.REJECTED)
        cls._notify_rejected(application, application.contract)
        return application

    @classmethod
    def _notify_rejected(cls, application, contract) -> None:
        NotificationService.send(
            application.creator,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Retainer application not selected",
            f'Your application for "{contract.title}" was not selected.',
            {"link_url": "/retainers"},
        )

    # ── Deliverables ─────────────────────────────────────────────────

    @classmethod
    def submit_deliverable(cls, contract: RetainerContract, creator, data: dict) -> RetainerDeliverable:
        if contract.assigned_creator_id != creator.id:
            raise ConflictError("Only the assigned creator can submit deliverables", resource="retainer_contract")
        if contract.status != RetainerContract.Status.IN_PROGRESS:
            raise ConflictError("Deliverables can only be submitted while the contract is in progress",
                                resource="retainer_contract")

        month, video = data.get("month_number"), data.get("video_number")
        if not month or not 1 <= month <= contract.duration_months:
            raise ValidationError(f"Month must be between 1 and {contract.duration_months}", field="month_number")
        if not video or not 1 <= video <= contract.videos_per_month:
            raise ValidationError(f"Video must be between 1 and {contract.videos_per_month}", field="video_number")
        if retainer_deliverable_repo.slot_taken(contract, month, video):
            raise ConflictError(f"Video {video} for month {month} was already submitted",
                                resource="retainer_deliverable")

        deliverable = retainer_deliverable_repo.create(contract=contract, creator=creator, **data)
        NotificationService.send(
            contract.company.user,
            NotificationType.DELIVERABLE_SUBMITTED,
            "New deliverable submitted",
            f'{creator.display_name} submitted video {video} for month {month} of "{contract.title}".',
            {"contract_id": contract.pk, "deliverable_id": deliverable.pk},
        )
        return deliverable

    @classmethod
    def _ensure_reviewable(cls, deliverable: RetainerDeliverable, user) -> None:
        cls.ensure_owner(deliverable.contract.company.user_id, user, "You can only review deliverables for your contracts")
        if deliverable.status != RetainerDeliverable.Status.PENDING_REVIEW:
            raise ConflictError(f"This deliverable is already {deliverable.status}", resource="retainer_deliverable")

    @classmethod
    def approve_deliverable(cls, deliverable: RetainerDeliverable, user, notes: str = "") -> dict:
        cls._ensure_reviewable(deliverable, user)
        with cls.atomic():
            deliverable = retainer_deliverable_repo.update(
                deliverable,
                status=RetainerDeliverable.Status.APPROVED,
                reviewed_at=timezone.now(),
                review_notes=(notes or "").strip(),
            )
            payment = PaymentService.create_for_deliverable(deliverable)
        return {"deliverable": deliverable, "payment": payment}

    @classmethod
    def reject_deliverable(cls, deliverable: RetainerDeliverable, user, notes: str) -> RetainerDeliverable:
        return cls._review_with_notes(
            deliverable, user, notes,
            RetainerDeliverable.Status.REJECTED,
            NotificationType.DELIVERABLE_REJECTED,
            "Deliverable rejected",
        )

    @classmethod
    def request_revision(cls, deliverable: RetainerDeliverable, user, notes: str) -> RetainerDeliverable:
        return cls._review_with_notes(
            deliverable, user, notes,
            RetainerDeliverable.Status.REVISION_REQUESTED,
            NotificationType.REVISION_REQUESTED,
            "Revision requested",
        )

    @classmethod
    def _review_with_notes(cls, deliverable, user, notes, status, notification_type, title):
        if not (notes or "").strip():
            raise ValidationError("Review notes are required", field="review_notes")
        cls._ensure_reviewable(deliverable, user)
        deliverable = retainer_deliverable_repo.update(
            deliverable, status=status, reviewed_at=timezone.now(), review_notes=notes.strip(),
        )
        NotificationService.send(
            deliverable.creator,
            notification_type,
            title,
            f"Month {deliverable.month_number}, video {deliverable.video_number} of "
            f'"{deliverable.contract.title}": {notes.strip()}',
            {"contract_id": deliverable.contract_id, "deliverable_id": deliverable.pk},
        )
        return deliverable

    @classmethod
    def resubmit_deliverable(cls, deliverable: RetainerDeliverable, creator, data: dict) -> RetainerDeliverable:
        if deliverable.creator_id != creator.id:
            raise ConflictError("You can only resubmit your own deliverables", resource="retainer_deliverable")
        if deliverable.status != RetainerDeliverable.Status.REVISION_REQUESTED:
            raise ConflictError("Only deliverables with a requested revision can be resubmitted",
                                resource="retainer_deliverable")
        deliverable = retainer_deliverable_repo.update(
            deliverable,
            status=RetainerDeliverable.Status.PENDING_REVIEW,
            submitted_at=timezone.now(),
            reviewed_at=None,
            review_notes="",
            **data,
        )
        contract = deliverable.contract
        NotificationService.send(
            contract.company.user,
            NotificationType.DELIVERABLE_SUBMITTED,
            "Deliverable resubmitted",
            f"{creator.display_name} resubmitted month {deliverable.month_number}, "
            f'video {deliverable.video_number} of "{contract.title}".',
            {"contract_id": contract.pk, "deliverable_id": deliverable.pk},
        )
        return deliverable

    # ── Monthly payments ─────────────────────────────────────────────

    @classmethod
    def process_monthly_payments(cls, now=None) -> dict:
        """Raise this month's payment for every payable contract."""
        results = {"processed": 0, "failed": 0, "skipped": 0, "errors": []}
        for contract in retainer_contract_repo.payable(now):
            cls._process_one(contract, results, now)
        cls.logger.info(
            "Monthly retainer run: %d processed, %d skipped, %d failed",
            results["processed"], results["skipped"], results["failed"],
        )
        return results

    @classmethod
    def process_contract(cls, contract: RetainerContract, now=None) -> dict:
        results = {"processed": 0, "failed": 0, "skipped": 0, "errors": []}
        if not retainer_contract_repo.payable(now).filter(pk=contract.pk).exists():
            raise ConflictError("This contract is not eligible for a monthly payment", resource="retainer_contract")
        cls._process_one(contract, results, now)
        return results

    @classmethod
    def _process_one(cls, contract, results: dict, now=None) -> None:
        try:
            month = contract_month_number(contract, now)
            if retainer_payment_repo.monthly_exists(contract, month):
                results["skipped"] += 1
                return

            with cls.atomic():
                payment = PaymentService.create_monthly(contract, month)

            creator = contract.assigned_creator
            if not payment_setting_repo.has_payment_method(creator):
                retainer_payment_repo.update(
                    payment,
                    description=f"{payment.description}. PENDING: creator has no payment method configured",
                )
                NotificationService.send(
                    creator,
                    NotificationType.PAYMENT_PENDING,
                    "Payment method required",
                    f"Your monthly retainer payment of ${payment.net_amount:,.2f} for "
                    f'"{contract.title}" is pending. Add a payment method to receive funds.',
                    {"link_url": "/payment-settings"},
                )
                results["skipped"] += 1
                return

            NotificationService.send(
                creator,
                NotificationType.PAYMENT_PENDING,
                "Monthly retainer payment",
                f"Your payment of ${payment.net_amount:,.2f} for month {month} of "
                f'"{contract.title}" is being processed.',
                {"payment_id": payment.pk, "contract_id": contract.pk},
            )
            results["processed"] += 1
        except Exception as exc:
            cls.logger.exception("Monthly payment failed for contract %s", contract.pk)
            results["failed"] += 1
            results["errors"].append({"contract_id": contract.pk, "error": str(exc)})

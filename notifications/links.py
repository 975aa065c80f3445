"""
Deep links for notifications.

Each notification carries the front-end route the user lands on when
they click it. The route depends on the notification type, the
recipient's role and the ids in the notification data.
"""

from .models import NotificationType as T

PAYMENT_TYPES = frozenset(t.value for t in (
    T.PAYMENT_RECEIVED,
    T.PAYMENT_PENDING,
    T.PAYMENT_APPROVED,
    T.PAYMENT_DISPUTED,
    T.PAYMENT_DISPUTE_RESOLVED,
    T.PAYMENT_REFUNDED,
    T.PAYMENT_FAILED,
    T.WORK_COMPLETION_APPROVAL,
))


def build_link_url(notification_type: str, role: str, data: dict) -> str:
    notification_type = str(notification_type)
    if data.get("link_url"):
        return data["link_url"]

    application_id = data.get("application_id")
    conversation_id = data.get("conversation_id")
    offer_id = data.get("offer_id")
    contract_id = data.get("contract_id")
    deliverable_id = data.get("deliverable_id")

    if notification_type == T.APPLICATION_STATUS_CHANGE:
        return f"/applications/{application_id}" if application_id else "/applications"

    if notification_type == T.NEW_APPLICATION:
        if role == "admin":
            return f"/admin/offers?highlight={offer_id}" if offer_id else "/admin/offers"
        if contract_id:
            return f"/company/retainers/{contract_id}"
        if application_id:
            return f"/company/applications?highlight={application_id}"
        return "/company/applications"

    if notification_type == T.NEW_MESSAGE:
        prefix = "/company/messages" if role == "company" else "/messages"
        if conversation_id:
            return f"{prefix}/{conversation_id}"
        if application_id:
            return f"{prefix}?application={application_id}"
        return prefix

    if notification_type in PAYMENT_TYPES:
        if role == "admin":
            return "/admin/payments"
        if data.get("payment_id"):
            return f"/payments/{data['payment_id']}"
        return "/payment-settings"

    if notification_type in (T.OFFER_APPROVED, T.OFFER_REJECTED, T.OFFER_EDIT_REQUESTED, T.OFFER_REMOVED):
        return f"/company/offers/{offer_id}" if offer_id else "/company/offers"

    if notification_type == T.REVIEW_RECEIVED:
        review_id = data.get("review_id")
        return f"/company/reviews?highlight={review_id}" if review_id else "/company/reviews"

    if notification_type == T.REGISTRATION_APPROVED:
        return "/company/dashboard" if role == "company" else "/creator/dashboard"

    if notification_type == T.REGISTRATION_REJECTED:
        return "/"

    if notification_type in (T.DELIVERABLE_REJECTED, T.REVISION_REQUESTED, T.DELIVERABLE_SUBMITTED):
        base = "/company/retainers" if role == "company" else "/retainer-contracts"
        if contract_id and deliverable_id:
            return f"{base}/{contract_id}/deliverables/{deliverable_id}"
        if contract_id:
            return f"{base}/{contract_id}"
        return base

    if notification_type == T.CONTENT_FLAGGED:
        return "/admin/moderation"

    if notification_type == T.SYSTEM_ANNOUNCEMENT:
        return "/"

    if role == "company":
        return "/company/dashboard"
    if role == "creator":
        return "/creator/dashboard"
    return "/"

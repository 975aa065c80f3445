"""
Payment Views

Payout settings, payment lists for creators and companies, and the
company approve/dispute actions. Admin payment actions live in the
administration app.
"""

from django.db.models import Sum
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError
from core.permissions import IsCompany, IsCreator
from users.repositories import company_profile_repo
from .fees import calculate_fees
from .models import PaymentStatus
from .repositories import payment_setting_repo, payment_repo, retainer_payment_repo
from .serializers import (
    PaymentSettingSerializer,
    PaymentSerializer,
    RetainerPaymentSerializer,
    DisputeSerializer,
    FeePreviewSerializer,
)
from .services import PaymentService

KINDS = {
    "affiliate": (payment_repo, PaymentSerializer),
    "retainer": (retainer_payment_repo, RetainerPaymentSerializer),
}


def get_payment(kind: str, pk):
    if kind not in KINDS:
        raise NotFoundError("Payment not found", resource="payment")
    repo, serializer_class = KINDS[kind]
    return repo.get_by_id(pk), serializer_class


def _totals(*querysets) -> dict:
    totals = {}
    for key in (PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.COMPLETED):
        amount = sum(
            (qs.filter(status=key).aggregate(total=Sum("net_amount"))["total"] or 0)
            for qs in querysets
        )
        totals[key.value] = f"{amount:.2f}"
    return totals


# ---------------------------------------------------------------------------
# Payout settings
# ---------------------------------------------------------------------------

class PaymentSettingListCreateView(APIView):
    """
    GET  /api/v1/payments/settings/
    POST /api/v1/payments/settings/
    """

    def get(self, request):
        settings = payment_setting_repo.for_user(request.user)
        return Response(PaymentSettingSerializer(settings, many=True).data)

    def post(self, request):
        serializer = PaymentSettingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = PaymentService.add_payment_setting(request.user, dict(serializer.validated_data))
        return Response(PaymentSettingSerializer(setting).data, status=status.HTTP_201_CREATED)


@api_view(["DELETE"])
def delete_payment_setting(request, pk):
    setting = payment_setting_repo.get_by_id(pk)
    PaymentService.ensure_owner(setting.user_id, request.user)
    payment_setting_repo.delete(setting)
    return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

@api_view(["GET"])
@permission_classes([IsCreator])
def creator_payments(request):
    """GET /api/v1/payments/creator/?status="""
    status_filter = request.query_params.get("status")
    payments = payment_repo.for_creator(request.user, status_filter)
    retainer_payments = retainer_payment_repo.for_creator(request.user, status_filter)
    return Response({
        "payments": PaymentSerializer(payments, many=True).data,
        "retainer_payments": RetainerPaymentSerializer(retainer_payments, many=True).data,
        "totals": _totals(
            payment_repo.for_creator(request.user), retainer_payment_repo.for_creator(request.user),
        ),
    })


@api_view(["GET"])
@permission_classes([IsCompany])
def company_payments(request):
    """GET /api/v1/payments/company/?status="""
    company = company_profile_repo.get_for_user(request.user)
    status_filter = request.query_params.get("status")
    return Response({
        "payments": PaymentSerializer(payment_repo.for_company(company, status_filter), many=True).data,
        "retainer_payments": RetainerPaymentSerializer(
            retainer_payment_repo.for_company(company, status_filter), many=True,
        ).data,
    })


@api_view(["GET"])
def payment_detail(request, kind, pk):
    payment, serializer_class = get_payment(kind, pk)
    user = request.user
    if not (user.is_admin or payment.creator_id == user.id or payment.company.user_id == user.id):
        raise NotFoundError("Payment not found", resource="payment")
    return Response(serializer_class(payment).data)


# ---------------------------------------------------------------------------
# Company actions
# ---------------------------------------------------------------------------

@api_view(["POST"])
@permission_classes([IsCompany])
def approve_payment(request, kind, pk):
    payment, serializer_class = get_payment(kind, pk)
    payment = PaymentService.approve(payment, request.user)
    return Response(serializer_class(payment).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def dispute_payment(request, kind, pk):
    payment, serializer_class = get_payment(kind, pk)
    serializer = DisputeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    payment = PaymentService.dispute(payment, request.user, serializer.validated_data["reason"])
    return Response(serializer_class(payment).data)


@api_view(["GET"])
@permission_classes([IsCompany])
def fee_preview(request):
    """GET /api/v1/payments/fees/?amount=250"""
    serializer = FeePreviewSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    company = company_profile_repo.get_for_user(request.user)
    return Response(calculate_fees(serializer.validated_data["amount"], company).as_dict())

"""
Administration Views

Admin-only endpoints under ``/api/v1/admin/``. Every mutation writes an
AuditLog row through ``AuditService.log``.
"""

from django.contrib.auth import get_user_model
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError
from core.pagination import StandardPagination
from core.permissions import IsAdmin
from messaging.repositories import conversation_repo, message_repo
from messaging.serializers import ConversationSerializer, MessageSerializer
from notifications.services import NotificationService
from offers.repositories import niche_repo, offer_repo
from offers.serializers import NicheSerializer
from offers.services import OfferService
from payments.repositories import payment_repo, retainer_payment_repo
from payments.serializers import PaymentSerializer, RetainerPaymentSerializer
from payments.services import PaymentService
from payments.views import get_payment
from retainers.repositories import retainer_contract_repo
from retainers.services import RetainerService
from reviews.repositories import review_repo
from reviews.serializers import AdminReviewSerializer, ReviewEditSerializer, ReviewNoteSerializer, ReviewResponseSerializer
from reviews.services import ReviewService
from users.repositories import company_profile_repo, user_repo
from users.serializers import CompanyProfileSerializer, UserSerializer
from .repositories import audit_log_repo, platform_setting_repo
from .serializers import (
    AuditLogSerializer,
    PlatformSettingSerializer,
    SettingUpsertSerializer,
    ReasonSerializer,
    RequiredReasonSerializer,
    CompanyFeeSerializer,
    AdminCreatorSerializer,
    AdminOfferSerializer,
    EditRequestSerializer,
    FeatureSerializer,
    BroadcastSerializer,
    PaymentStatusSerializer,
    DisputeResolutionSerializer,
    ReviewVisibilitySerializer,
)
from .services import AdminService, AuditService

User = get_user_model()


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# ---------------------------------------------------------------------------
# Dashboard & audit
# ---------------------------------------------------------------------------

@api_view(["GET"])
@permission_classes([IsAdmin])
def dashboard_stats(request):
    """GET /api/v1/admin/stats/"""
    return Response(AdminService.dashboard_stats())


class AuditLogListView(generics.ListAPIView):
    """GET /api/v1/admin/audit-logs/?action=&entity_type=&entity_id="""

    permission_classes = [IsAdmin]
    serializer_class = AuditLogSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        params = self.request.query_params
        return audit_log_repo.search(params.get("action"), params.get("entity_type"), params.get("entity_id"))


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

class CompanyListView(generics.ListAPIView):
    """GET /api/v1/admin/companies/?status=pending"""

    permission_classes = [IsAdmin]
    serializer_class = CompanyProfileSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        return company_profile_repo.get_by_status(self.request.query_params.get("status"))


@api_view(["GET"])
@permission_classes([IsAdmin])
def company_detail(request, pk):
    company = company_profile_repo.get_by_id(pk)
    data = CompanyProfileSerializer(company).data
    data["user"] = UserSerializer(company.user).data
    data["offer_count"] = company.offers.count()
    return Response(data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def approve_company(request, pk):
    company = AdminService.approve_company(company_profile_repo.get_by_id(pk))
    AuditService.log(request.user, "approve_company", "company", company.pk, {"status": company.status}, request=request)
    return Response(CompanyProfileSerializer(company).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def reject_company(request, pk):
    reason = _validated(RequiredReasonSerializer, request)["reason"]
    company = AdminService.reject_company(company_profile_repo.get_by_id(pk), reason)
    AuditService.log(
        request.user, "reject_company", "company", company.pk, {"status": company.status}, reason, request,
    )
    return Response(CompanyProfileSerializer(company).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def suspend_company(request, pk):
    reason = _validated(ReasonSerializer, request)["reason"]
    company = AdminService.suspend_company(company_profile_repo.get_by_id(pk), reason)
    AuditService.log(
        request.user, "suspend_company", "company", company.pk, {"status": company.status}, reason, request,
    )
    return Response(CompanyProfileSerializer(company).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def unsuspend_company(request, pk):
    company = AdminService.unsuspend_company(company_profile_repo.get_by_id(pk))
    AuditService.log(request.user, "unsuspend_company", "company", company.pk, {"status": company.status}, request=request)
    return Response(CompanyProfileSerializer(company).data)


@api_view(["PATCH"])
@permission_classes([IsAdmin])
def set_company_fee(request, pk):
    """PATCH /api/v1/admin/companies/<id>/fee/  {"platform_fee_percentage": "0.05" | null}"""
    company = company_profile_repo.get_by_id(pk)
    old = company.custom_platform_fee_percentage
    percentage = _validated(CompanyFeeSerializer, request)["platform_fee_percentage"]
    company = AdminService.set_company_fee(company, percentage)
    AuditService.log(
        request.user, "set_company_fee", "company", company.pk,
        {"old": old, "new": company.custom_platform_fee_percentage}, request=request,
    )
    return Response(CompanyProfileSerializer(company).data)


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------

class OfferListView(generics.ListAPIView):
    """GET /api/v1/admin/offers/?status=pending_review"""

    permission_classes = [IsAdmin]
    serializer_class = AdminOfferSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        return offer_repo.by_status(self.request.query_params.get("status"))


@api_view(["POST"])
@permission_classes([IsAdmin])
def approve_offer(request, pk):
    offer = OfferService.approve(offer_repo.get_by_id(pk))
    AuditService.log(request.user, "approve_offer", "offer", offer.pk, {"status": offer.status}, request=request)
    return Response(AdminOfferSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def reject_offer(request, pk):
    reason = _validated(RequiredReasonSerializer, request)["reason"]
    offer = OfferService.reject(offer_repo.get_by_id(pk), reason)
    AuditService.log(request.user, "reject_offer", "offer", offer.pk, {"status": offer.status}, reason, request)
    return Response(AdminOfferSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def request_offer_edits(request, pk):
    notes = _validated(EditRequestSerializer, request)["notes"]
    offer = OfferService.request_edits(offer_repo.get_by_id(pk), request.user, notes)
    AuditService.log(request.user, "request_offer_edits", "offer", offer.pk, {"notes": notes}, request=request)
    return Response(AdminOfferSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def feature_offer(request, pk):
    featured = _validated(FeatureSerializer, request)["featured"]
    offer = OfferService.set_featured(offer_repo.get_by_id(pk), featured)
    AuditService.log(request.user, "feature_offer", "offer", offer.pk, {"featured": featured}, request=request)
    return Response(AdminOfferSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def remove_offer(request, pk):
    reason = _validated(ReasonSerializer, request)["reason"]
    offer = OfferService.remove(offer_repo.get_by_id(pk), reason)
    AuditService.log(request.user, "remove_offer", "offer", offer.pk, {"status": offer.status}, reason, request)
    return Response(AdminOfferSerializer(offer).data)


# ---------------------------------------------------------------------------
# Creators
# ---------------------------------------------------------------------------

class CreatorListView(generics.ListAPIView):
    """GET /api/v1/admin/creators/?status=active"""

    permission_classes = [IsAdmin]
    serializer_class = AdminCreatorSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        return user_repo.get_creators(self.request.query_params.get("status"))


def _set_creator_status(request, pk, account_status, action):
    creator = user_repo.get_by_id(pk)
    if not creator.is_creator:
        raise NotFoundError("Creator not found", resource="creator")
    reason = _validated(ReasonSerializer, request)["reason"]
    old = creator.account_status
    creator = AdminService.set_account_status(creator, account_status, reason)
    AuditService.log(
        request.user, action, "user", creator.pk, {"old": old, "new": creator.account_status}, reason, request,
    )
    return Response(AdminCreatorSerializer(creator).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def suspend_creator(request, pk):
    return _set_creator_status(request, pk, User.AccountStatus.SUSPENDED, "suspend_creator")


@api_view(["POST"])
@permission_classes([IsAdmin])
def unsuspend_creator(request, pk):
    return _set_creator_status(request, pk, User.AccountStatus.ACTIVE, "unsuspend_creator")


@api_view(["POST"])
@permission_classes([IsAdmin])
def ban_creator(request, pk):
    return _set_creator_status(request, pk, User.AccountStatus.BANNED, "ban_creator")


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

@api_view(["GET"])
@permission_classes([IsAdmin])
def conversation_list(request):
    conversations = conversation_repo.for_user(request.user)
    return Response(ConversationSerializer(conversations, many=True, context={"request": request}).data)


@api_view(["GET"])
@permission_classes([IsAdmin])
def conversation_messages(request, pk):
    conversation = conversation_repo.get_by_id(pk)
    messages = message_repo.filter(conversation=conversation).select_related("sender").order_by("created_at")
    return Response({
        "conversation": ConversationSerializer(conversation, context={"request": request}).data,
        "messages": MessageSerializer(messages, many=True).data,
    })


# ---------------------------------------------------------------------------
# Platform settings
# ---------------------------------------------------------------------------

class SettingListView(APIView):
    """
    GET  /api/v1/admin/settings/?category=fees
    PUT  /api/v1/admin/settings/   {"key", "value", "description", "category", "reason"}
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        settings = platform_setting_repo.get_all().select_related("updated_by")
        category = request.query_params.get("category")
        if category:
            settings = settings.filter(category=category)
        return Response(PlatformSettingSerializer(settings, many=True).data)

    def put(self, request):
        data = _validated(SettingUpsertSerializer, request)
        setting, created, old_value = AdminService.upsert_setting(
            request.user, data["key"], data["value"], data["description"], data["category"],
        )
        AuditService.log(
            request.user, "create_setting" if created else "update_setting", "platform_setting", setting.key,
            {"old": old_value, "new": setting.value}, data["reason"], request,
        )
        return Response(
            PlatformSettingSerializer(setting).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


@api_view(["GET"])
@permission_classes([IsAdmin])
def setting_detail(request, key):
    setting = platform_setting_repo.get_by_key(key)
    if setting is None:
        raise NotFoundError("Setting not found", resource="platform_setting")
    return Response(PlatformSettingSerializer(setting).data)


# ---------------------------------------------------------------------------
# Niches
# ---------------------------------------------------------------------------

class NicheListCreateView(APIView):
    """
    GET  /api/v1/admin/niches/
    POST /api/v1/admin/niches/
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(NicheSerializer(niche_repo.get_all(), many=True).data)

    def post(self, request):
        serializer = NicheSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        niche = serializer.save()
        AuditService.log(request.user, "create_niche", "niche", niche.pk, serializer.data, request=request)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class NicheDetailView(APIView):
    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        serializer = NicheSerializer(niche_repo.get_by_id(pk), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        niche = serializer.save()
        AuditService.log(
            request.user, "update_niche", "niche", niche.pk, dict(serializer.validated_data), request=request,
        )
        return Response(serializer.data)

    def delete(self, request, pk):
        niche = niche_repo.get_by_id(pk)
        AuditService.log(request.user, "delete_niche", "niche", niche.pk, {"name": niche.name}, request=request)
        niche_repo.delete(niche)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

@api_view(["POST"])
@permission_classes([IsAdmin])
def broadcast(request):
    data = _validated(BroadcastSerializer, request)
    sent = NotificationService.broadcast(data["title"], data["message"], data["link_url"], data["role"])
    AuditService.log(
        request.user, "broadcast", "notification", "",
        {"title": data["title"], "role": data["role"], "recipients": sent}, request=request,
    )
    return Response({"sent": sent})


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

@api_view(["GET"])
@permission_classes([IsAdmin])
def payment_list(request):
    """GET /api/v1/admin/payments/?status="""
    status_filter = request.query_params.get("status")
    return Response({
        "payments": PaymentSerializer(payment_repo.by_status(status_filter), many=True).data,
        "retainer_payments": RetainerPaymentSerializer(retainer_payment_repo.by_status(status_filter), many=True).data,
    })


@api_view(["GET"])
@permission_classes([IsAdmin])
def disputed_payments(request):
    return Response({
        "payments": PaymentSerializer(payment_repo.disputed(), many=True).data,
        "retainer_payments": RetainerPaymentSerializer(retainer_payment_repo.disputed(), many=True).data,
    })


@api_view(["PATCH"])
@permission_classes([IsAdmin])
def set_payment_status(request, kind, pk):
    payment, serializer_class = get_payment(kind, pk)
    old = payment.status
    new = _validated(PaymentStatusSerializer, request)["status"]
    payment = PaymentService.set_status(payment, new)
    AuditService.log(
        request.user, "update_payment_status", f"{kind}_payment", payment.pk,
        {"old": old, "new": payment.status}, request=request,
    )
    return Response(serializer_class(payment).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def resolve_dispute(request, kind, pk):
    payment, serializer_class = get_payment(kind, pk)
    data = _validated(DisputeResolutionSerializer, request)
    dispute_reason = payment.dispute_reason
    payment = PaymentService.resolve_dispute(payment, data["resolution"], data["notes"])
    AuditService.log(
        request.user, "resolve_dispute", f"{kind}_payment", payment.pk,
        {"resolution": data["resolution"], "dispute_reason": dispute_reason, "status": payment.status},
        data["notes"], request,
    )
    return Response(serializer_class(payment).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def process_monthly_payments(request):
    """Run the monthly retainer payment job now."""
    results = RetainerService.process_monthly_payments()
    AuditService.log(request.user, "process_monthly_payments", "retainer_contract", "", results, request=request)
    return Response(results)


@api_view(["POST"])
@permission_classes([IsAdmin])
def process_contract_payment(request, pk):
    contract = retainer_contract_repo.get_by_id(pk)
    results = RetainerService.process_contract(contract)
    AuditService.log(request.user, "process_contract_payment", "retainer_contract", contract.pk, results, request=request)
    return Response(results)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------

def _flag(value):
    if value is None:
        return None
    return value.lower() in ("1", "true", "yes")


class ReviewListView(generics.ListAPIView):
    """GET /api/v1/admin/reviews/?hidden=true&approved=false"""

    permission_classes = [IsAdmin]
    serializer_class = AdminReviewSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        params = self.request.query_params
        return review_repo.admin_list(hidden=_flag(params.get("hidden")), approved=_flag(params.get("approved")))


class ReviewDetailView(APIView):
    """
    PATCH  /api/v1/admin/reviews/<id>/   edit text and ratings
    DELETE /api/v1/admin/reviews/<id>/
    """

    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        serializer = ReviewEditSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        review = ReviewService.admin_edit(review_repo.get_by_id(pk), dict(serializer.validated_data))
        AuditService.log(
            request.user, "edit_review", "review", review.pk, dict(serializer.validated_data), request=request,
        )
        return Response(AdminReviewSerializer(review).data)

    def delete(self, request, pk):
        review = review_repo.get_by_id(pk)
        AuditService.log(
            request.user, "delete_review", "review", review.pk,
            {"overall_rating": review.overall_rating, "company": review.company_id}, request=request,
        )
        review_repo.delete(review)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsAdmin])
def hide_review(request, pk):
    hidden = _validated(ReviewVisibilitySerializer, request)["hidden"]
    review = ReviewService.set_hidden(review_repo.get_by_id(pk), hidden)
    AuditService.log(request.user, "hide_review", "review", review.pk, {"is_hidden": hidden}, request=request)
    return Response(AdminReviewSerializer(review).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def approve_review(request, pk):
    review = ReviewService.set_approved(review_repo.get_by_id(pk), True)
    AuditService.log(request.user, "approve_review", "review", review.pk, {"is_approved": True}, request=request)
    return Response(AdminReviewSerializer(review).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def review_note(request, pk):
    note = _validated(ReviewNoteSerializer, request)["note"]
    review = ReviewService.add_note(review_repo.get_by_id(pk), note)
    AuditService.log(request.user, "note_review", "review", review.pk, {"note": note}, request=request)
    return Response(AdminReviewSerializer(review).data)


@api_view(["POST"])
@permission_classes([IsAdmin])
def respond_to_review(request, pk):
    response = _validated(ReviewResponseSerializer, request)["response"]
    review = ReviewService.admin_respond(review_repo.get_by_id(pk), response)
    AuditService.log(request.user, "respond_review", "review", review.pk, {"response": response}, request=request)
    return Response(AdminReviewSerializer(review).data)

"""
Application Views

Creator applications, company review and the public tracking redirect.
"""

from django.http import HttpResponseNotFound, HttpResponseRedirect
from django.views.decorators.http import require_GET
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError
from core.http import get_client_ip
from core.permissions import IsCompany, IsCreator
from payments.serializers import PaymentSerializer
from users.repositories import company_profile_repo
from .repositories import application_repo, click_event_repo
from .serializers import (
    ApplicationSerializer,
    ApplicationCreateSerializer,
    ApplicationStatusSerializer,
    CompleteApplicationSerializer,
    RejectApplicationSerializer,
    ClickEventSerializer,
)
from .services import ApplicationService


def _visible_application(request, pk):
    application = application_repo.get_by_id(pk)
    user = request.user
    if not (user.is_admin or application.creator_id == user.id or application.offer.company.user_id == user.id):
        raise NotFoundError("Application not found", resource="application")
    return application


class CreatorApplicationListCreateView(APIView):
    """
    GET  /api/v1/applications/?status=
    POST /api/v1/applications/   {"offer_id", "message"}
    """
    permission_classes = [IsCreator]

    def get(self, request):
        applications = application_repo.for_creator(request.user, request.query_params.get("status"))
        return Response(ApplicationSerializer(applications, many=True).data)

    def post(self, request):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        application = ApplicationService.apply(
            request.user,
            data["offer_id"],
            message=data.get("message", ""),
            preferred_commission=data.get("preferred_commission", ""),
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def application_detail(request, pk):
    application = _visible_application(request, pk)
    data = ApplicationSerializer(application).data
    data["click_stats"] = click_event_repo.stats_for(application)
    return Response(data)


class CompanyApplicationListView(generics.ListAPIView):
    """GET /api/v1/company/applications/?status=&offer="""
    serializer_class = ApplicationSerializer
    permission_classes = [IsCompany]

    def get_queryset(self):
        company = company_profile_repo.get_for_user(self.request.user)
        params = self.request.query_params
        return application_repo.for_company(company, params.get("status"), params.get("offer"))


@api_view(["POST"])
@permission_classes([IsCompany])
def approve_application(request, pk):
    application = ApplicationService.approve(application_repo.get_by_id(pk), request.user)
    return Response(ApplicationSerializer(application).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def reject_application(request, pk):
    serializer = RejectApplicationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    application = ApplicationService.reject(
        application_repo.get_by_id(pk), request.user, serializer.validated_data.get("reason", ""),
    )
    return Response(ApplicationSerializer(application).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def complete_application(request, pk):
    """POST /api/v1/applications/<id>/complete/  {"sale_amount": optional}"""
    serializer = CompleteApplicationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = ApplicationService.complete(
        application_repo.get_by_id(pk), request.user, serializer.validated_data.get("sale_amount"),
    )
    return Response({
        "application": ApplicationSerializer(result["application"]).data,
        "payment": PaymentSerializer(result["payment"]).data,
        "prompt_review": result["prompt_review"],
    })


class ApplicationStatusView(APIView):
    """PATCH /api/v1/company/applications/<id>/status/"""
    permission_classes = [IsCompany]

    def patch(self, request, pk):
        serializer = ApplicationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        application = ApplicationService.set_status(
            application_repo.get_by_id(pk),
            request.user,
            data["status"],
            reason=data.get("reason", ""),
            sale_amount=data.get("sale_amount"),
        )
        return Response(ApplicationSerializer(application).data)


@api_view(["GET"])
def application_clicks(request, pk):
    application = _visible_application(request, pk)
    clicks = application.clicks.all()[:200]
    return Response(ClickEventSerializer(clicks, many=True).data)


@require_GET
def tracking_redirect(request, code):
    """
    GET /go/<code>

    Public tracking link: stores the click and sends the visitor on to
    the product page.
    """
    try:
        _click, url = ApplicationService.record_click(
            code,
            ip=get_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            referer=request.META.get("HTTP_REFERER", ""),
            params=request.GET,
        )
    except NotFoundError:
        return HttpResponseNotFound("Tracking link not found")
    return HttpResponseRedirect(url)

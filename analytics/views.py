"""
Analytics Views

Conversion reporting, the analytics page and the dashboard counters.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from applications.repositories import application_repo
from core.permissions import IsCompany, IsCreator
from payments.serializers import PaymentSerializer
from .serializers import ConversionSerializer, DailyAnalyticsSerializer
from .services import AnalyticsService


@api_view(["POST"])
@permission_classes([IsCompany])
def record_conversion(request, application_id):
    """POST /api/v1/conversions/<application_id>/  {"sale_amount": optional}"""
    serializer = ConversionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = AnalyticsService.record_conversion(
        application_repo.get_by_id(application_id),
        request.user,
        serializer.validated_data.get("sale_amount"),
    )
    return Response({
        "earnings": str(result["earnings"]),
        "analytics": DailyAnalyticsSerializer(result["analytics"]).data,
        "payment": PaymentSerializer(result["payment"]).data,
    }, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def analytics_overview(request):
    """
    GET /api/v1/analytics/?range=7d|30d|90d|all&application=<id>

    With ``application`` the numbers cover that one application;
    otherwise the caller's creator or company totals.
    """
    params = request.query_params
    date_range = params.get("range")
    if params.get("application"):
        application = application_repo.get_by_id(params["application"])
        return Response(AnalyticsService.for_application(application, request.user, date_range))
    if request.user.is_company:
        return Response(AnalyticsService.for_company(request.user, date_range))
    return Response(AnalyticsService.for_creator(request.user, date_range))


@api_view(["GET"])
@permission_classes([IsCreator])
def creator_stats(request):
    return Response(AnalyticsService.creator_stats(request.user))


@api_view(["GET"])
@permission_classes([IsCompany])
def company_stats(request):
    return Response(AnalyticsService.company_stats(request.user))

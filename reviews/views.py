"""
Review Views
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from applications.repositories import application_repo
from core.permissions import IsCompany, IsCreator
from offers.repositories import offer_repo
from users.repositories import company_profile_repo
from .repositories import review_repo
from .serializers import ReviewSerializer, ReviewCreateSerializer, ReviewResponseSerializer
from .services import ReviewService


@api_view(["POST"])
@permission_classes([IsCreator])
def create_review(request):
    """POST /api/v1/reviews/"""
    serializer = ReviewCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    application = application_repo.get_by_id(data.pop("application_id"))
    review = ReviewService.create(request.user, application, data)
    return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsCreator])
def my_reviews(request):
    return Response(ReviewSerializer(review_repo.for_creator(request.user), many=True).data)


@api_view(["GET"])
def company_public_reviews(request, company_id):
    """GET /api/v1/companies/<id>/reviews/: visible reviews plus the rating summary."""
    company = company_profile_repo.get_by_id(company_id)
    return Response({
        "summary": review_repo.rating_summary(company),
        "reviews": ReviewSerializer(review_repo.public_for_company(company), many=True).data,
    })


@api_view(["GET"])
def offer_public_reviews(request, pk):
    """GET /api/v1/offers/<id>/reviews/: the visible reviews of the offer's company."""
    company = offer_repo.get_by_id(pk).company
    return Response({
        "summary": review_repo.rating_summary(company),
        "reviews": ReviewSerializer(review_repo.public_for_company(company), many=True).data,
    })


@api_view(["GET"])
@permission_classes([IsCompany])
def company_reviews(request):
    company = company_profile_repo.get_for_user(request.user)
    return Response({
        "summary": review_repo.rating_summary(company),
        "reviews": ReviewSerializer(review_repo.for_company(company), many=True).data,
    })


@api_view(["POST"])
@permission_classes([IsCompany])
def respond_to_review(request, pk):
    serializer = ReviewResponseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    review = ReviewService.respond(review_repo.get_by_id(pk), request.user, serializer.validated_data["response"])
    return Response(ReviewSerializer(review).data)

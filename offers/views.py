"""
Offer Views

Creator discovery, company offer management and favourites.
"""

from decimal import Decimal, InvalidOperation

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError, ValidationError
from core.pagination import StandardPagination
from core.permissions import IsApprovedCompany, IsCompany, IsCreator
from users.repositories import company_profile_repo
from .models import Offer
from .repositories import niche_repo, offer_repo, offer_video_repo, favorite_repo
from .serializers import (
    NicheSerializer,
    OfferCardSerializer,
    OfferDetailSerializer,
    OfferWriteSerializer,
    OfferVideoSerializer,
    FavoriteSerializer,
)
from .services import OfferService


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

class OfferBrowseView(generics.ListAPIView):
    """
    GET /api/v1/offers/?search=&niche=&commission_type=&platform=&min_commission=&ordering=
    """
    serializer_class = OfferCardSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        params = self.request.query_params
        min_commission = params.get("min_commission")
        if min_commission:
            try:
                min_commission = Decimal(min_commission)
            except InvalidOperation:
                raise ValidationError("min_commission must be a number", field="min_commission")
        else:
            min_commission = None

        return offer_repo.browse(
            search=params.get("search", "").strip(),
            niche=params.get("niche", "").strip(),
            commission_type=params.get("commission_type", ""),
            platform=params.get("platform", "").strip().lower(),
            min_commission=min_commission,
            ordering=params.get("ordering", "newest"),
        )


class OfferDetailView(APIView):
    """GET /api/v1/offers/<id>/: counts a view for live offers."""

    def get(self, request, pk):
        offer = offer_repo.get_by_id(pk)
        is_owner = request.user.is_company and offer.company.user_id == request.user.id
        if not offer.is_live and not (is_owner or request.user.is_admin):
            raise NotFoundError("Offer not found", resource="offer")

        if offer.is_live and not is_owner:
            OfferService.record_view(offer)
            offer.refresh_from_db(fields=["view_count"])

        data = OfferDetailSerializer(offer).data
        if request.user.is_creator:
            data["is_favorite"] = favorite_repo.exists(creator=request.user, offer=offer)
            application = offer.applications.filter(creator=request.user).first()
            data["application_status"] = application.status if application else None
        return Response(data)


@api_view(["GET"])
def trending_offers(request):
    offers = offer_repo.trending(limit=10)
    return Response(OfferCardSerializer(offers, many=True).data)


@api_view(["GET"])
@permission_classes([IsCreator])
def recommended_offers(request):
    offers = OfferService.recommended_for(request.user, limit=10)
    return Response(OfferCardSerializer(offers, many=True).data)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def niche_list(request):
    return Response(NicheSerializer(niche_repo.active(), many=True).data)


# ---------------------------------------------------------------------------
# Company offer management
# ---------------------------------------------------------------------------

class CompanyOfferListCreateView(APIView):
    """
    GET  /api/v1/company/offers/?status=
    POST /api/v1/company/offers/   (add "draft": true to save without review)
    """
    permission_classes = [IsCompany]

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsApprovedCompany()]
        return super().get_permissions()

    def get(self, request):
        company = company_profile_repo.get_for_user(request.user)
        offers = offer_repo.for_company(company, request.query_params.get("status"))
        return Response(OfferDetailSerializer(offers, many=True).data)

    def post(self, request):
        company = company_profile_repo.get_for_user(request.user)
        serializer = OfferWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        as_draft = str(request.data.get("draft", "")).lower() in ("1", "true")
        offer = OfferService.create(company, serializer.validated_data, as_draft=as_draft)
        return Response(OfferDetailSerializer(offer).data, status=status.HTTP_201_CREATED)


class CompanyOfferDetailView(APIView):
    """
    GET    /api/v1/company/offers/<id>/
    PATCH  /api/v1/company/offers/<id>/
    DELETE /api/v1/company/offers/<id>/
    """
    permission_classes = [IsCompany]

    def _get_offer(self, request, pk) -> Offer:
        offer = offer_repo.get_by_id(pk)
        OfferService.ensure_owner(offer.company.user_id, request.user, "You can only manage your own offers")
        return offer

    def get(self, request, pk):
        return Response(OfferDetailSerializer(self._get_offer(request, pk)).data)

    def patch(self, request, pk):
        offer = self._get_offer(request, pk)
        serializer = OfferWriteSerializer(offer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        offer = OfferService.update(offer, request.user, serializer.validated_data)
        return Response(OfferDetailSerializer(offer).data)

    def delete(self, request, pk):
        OfferService.delete(self._get_offer(request, pk), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsCompany])
def submit_offer(request, pk):
    offer = OfferService.submit_for_review(offer_repo.get_by_id(pk), request.user)
    return Response(OfferDetailSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def pause_offer(request, pk):
    offer = OfferService.pause(offer_repo.get_by_id(pk), request.user)
    return Response(OfferDetailSerializer(offer).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def resume_offer(request, pk):
    offer = OfferService.resume(offer_repo.get_by_id(pk), request.user)
    return Response(OfferDetailSerializer(offer).data)


class OfferVideoListCreateView(APIView):
    """
    GET  /api/v1/company/offers/<id>/videos/
    POST /api/v1/company/offers/<id>/videos/
    """
    permission_classes = [IsCompany]

    def get(self, request, pk):
        offer = offer_repo.get_by_id(pk)
        OfferService.ensure_owner(offer.company.user_id, request.user)
        return Response(OfferVideoSerializer(offer.videos.all(), many=True).data)

    def post(self, request, pk):
        offer = offer_repo.get_by_id(pk)
        serializer = OfferVideoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        video = OfferService.add_video(offer, request.user, dict(serializer.validated_data))
        return Response(OfferVideoSerializer(video).data, status=status.HTTP_201_CREATED)


@api_view(["DELETE"])
@permission_classes([IsCompany])
def delete_offer_video(request, pk, video_id):
    video = offer_video_repo.get_by_id(video_id)
    if video.offer_id != pk:
        raise NotFoundError("Video not found", resource="offer_video")
    OfferService.delete_video(video, request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsCompany])
def set_primary_video(request, pk, video_id):
    video = offer_video_repo.get_by_id(video_id)
    if video.offer_id != pk:
        raise NotFoundError("Video not found", resource="offer_video")
    video = OfferService.set_primary_video(video, request.user)
    return Response(OfferVideoSerializer(video).data)


# ---------------------------------------------------------------------------
# Favourites
# ---------------------------------------------------------------------------

class FavoriteListView(generics.ListAPIView):
    """GET /api/v1/favorites/"""
    serializer_class = FavoriteSerializer
    permission_classes = [IsCreator]

    def get_queryset(self):
        return favorite_repo.for_creator(self.request.user)


class FavoriteToggleView(APIView):
    """
    GET    /api/v1/favorites/<offer_id>/ → {is_favorite}
    POST   /api/v1/favorites/<offer_id>/ → add
    DELETE /api/v1/favorites/<offer_id>/ → remove
    """
    permission_classes = [IsCreator]

    def get(self, request, offer_id):
        return Response({"is_favorite": favorite_repo.exists(creator=request.user, offer_id=offer_id)})

    def post(self, request, offer_id):
        offer = offer_repo.get_by_id(offer_id)
        favorite, created = favorite_repo.add(request.user, offer)
        return Response(
            FavoriteSerializer(favorite).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request, offer_id):
        if not favorite_repo.remove(request.user, offer_id):
            raise NotFoundError("Favorite not found", resource="favorite")
        return Response(status=status.HTTP_204_NO_CONTENT)

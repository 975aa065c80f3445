"""
Offers Repositories
===================

Data-access layer for Niche, Offer, OfferVideo and Favorite models.
"""

from django.db.models import Q, QuerySet

from core.repositories import BaseRepository
from .models import Niche, Offer, OfferVideo, Favorite


class NicheRepository(BaseRepository[Niche]):
    model = Niche

    @classmethod
    def active(cls) -> QuerySet:
        return cls.model.objects.filter(is_active=True)


class OfferRepository(BaseRepository[Offer]):
    """Offer data access."""

    model = Offer

    ORDERINGS = {
        "newest": ["-created_at"],
        "commission": ["-commission_amount", "-commission_percentage", "-created_at"],
        "popular": ["-application_count", "-view_count", "-created_at"],
        "views": ["-view_count", "-created_at"],
    }

    @classmethod
    def live(cls) -> QuerySet:
        """Approved offers of approved companies."""
        return cls.model.objects.filter(
            status=Offer.Status.APPROVED,
            company__status="approved",
        ).select_related("company")

    @classmethod
    def browse(cls, search: str = "", niche: str = "", commission_type: str = "",
               platform: str = "", min_commission=None, ordering: str = "newest") -> QuerySet:
        qs = cls.live()
        if search:
            qs = qs.filter(
                Q(title__icontains=search)
                | Q(product_name__icontains=search)
                | Q(short_description__icontains=search)
                | Q(company__trade_name__icontains=search)
                | Q(company__legal_name__icontains=search)
            )
        if niche:
            qs = qs.filter(Q(primary_niche__iexact=niche) | Q(additional_niches__icontains=niche))
        if commission_type:
            qs = qs.filter(commission_type=commission_type)
        if platform:
            qs = qs.filter(allowed_platforms__icontains=platform)
        if min_commission is not None:
            qs = qs.filter(Q(commission_amount__gte=min_commission) | Q(commission_percentage__gte=min_commission))
        return qs.order_by(*cls.ORDERINGS.get(ordering, cls.ORDERINGS["newest"]))

    @classmethod
    def trending(cls, limit: int = 10) -> QuerySet:
        return cls.live().order_by("-application_count", "-view_count")[:limit]

    @classmethod
    def for_company(cls, company, status: str = None) -> QuerySet:
        qs = cls.model.objects.filter(company=company)
        if status:
            qs = qs.filter(status=status)
        return qs

    @classmethod
    def by_status(cls, status: str = None) -> QuerySet:
        qs = cls.model.objects.select_related("company")
        if status:
            qs = qs.filter(status=status)
        return qs


class OfferVideoRepository(BaseRepository[OfferVideo]):
    model = OfferVideo

    @classmethod
    def clear_primary(cls, offer) -> None:
        cls.model.objects.filter(offer=offer, is_primary=True).update(is_primary=False)


class FavoriteRepository(BaseRepository[Favorite]):
    model = Favorite

    @classmethod
    def for_creator(cls, creator) -> QuerySet:
        return cls.model.objects.filter(creator=creator).select_related("offer", "offer__company")

    @classmethod
    def add(cls, creator, offer) -> tuple:
        return cls.model.objects.get_or_create(creator=creator, offer=offer)

    @classmethod
    def remove(cls, creator, offer_id) -> bool:
        deleted, _ = cls.model.objects.filter(creator=creator, offer_id=offer_id).delete()
        return deleted > 0


niche_repo = NicheRepository()
offer_repo = OfferRepository()
offer_video_repo = OfferVideoRepository()
favorite_repo = FavoriteRepository()

"""
URL routes for offers, favourites and niches
"""

from django.urls import path
from . import views

urlpatterns = [
    # Discovery
    path('offers/', views.OfferBrowseView.as_view(), name='offer_browse'),
    path('offers/trending/', views.trending_offers, name='offer_trending'),
    path('offers/recommended/', views.recommended_offers, name='offer_recommended'),
    path('offers/<int:pk>/', views.OfferDetailView.as_view(), name='offer_detail'),
    path('niches/', views.niche_list, name='niche_list'),

    # Company management
    path('company/offers/', views.CompanyOfferListCreateView.as_view(), name='company_offers'),
    path('company/offers/<int:pk>/', views.CompanyOfferDetailView.as_view(), name='company_offer_detail'),
    path('company/offers/<int:pk>/submit/', views.submit_offer, name='company_offer_submit'),
    path('company/offers/<int:pk>/pause/', views.pause_offer, name='company_offer_pause'),
    path('company/offers/<int:pk>/resume/', views.resume_offer, name='company_offer_resume'),
    path('company/offers/<int:pk>/videos/', views.OfferVideoListCreateView.as_view(), name='company_offer_videos'),
    path('company/offers/<int:pk>/videos/<int:video_id>/', views.delete_offer_video, name='company_offer_video_delete'),
    path('company/offers/<int:pk>/videos/<int:video_id>/primary/', views.set_primary_video, name='company_offer_video_primary'),

    # Favourites
    path('favorites/', views.FavoriteListView.as_view(), name='favorite_list'),
    path('favorites/<int:offer_id>/', views.FavoriteToggleView.as_view(), name='favorite_toggle'),
]

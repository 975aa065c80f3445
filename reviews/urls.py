"""
URL routes for company reviews
"""

from django.urls import path
from . import views

urlpatterns = [
    path('reviews/', views.create_review, name='review_create'),
    path('reviews/mine/', views.my_reviews, name='review_mine'),
    path('companies/<int:company_id>/reviews/', views.company_public_reviews, name='company_public_reviews'),
    path('offers/<int:pk>/reviews/', views.offer_public_reviews, name='offer_public_reviews'),
    path('company/reviews/', views.company_reviews, name='company_reviews'),
    path('company/reviews/<int:pk>/respond/', views.respond_to_review, name='company_review_respond'),
]

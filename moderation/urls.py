"""
URL routes for content moderation (admin only)
"""

from django.urls import path
from . import views

urlpatterns = [
    path('admin/moderation/keywords/', views.KeywordListCreateView.as_view(), name='moderation_keywords'),
    path('admin/moderation/keywords/<int:pk>/', views.KeywordDetailView.as_view(), name='moderation_keyword_detail'),
    path('admin/moderation/flags/', views.FlagListView.as_view(), name='moderation_flags'),
    path('admin/moderation/flags/<int:pk>/review/', views.review_flag, name='moderation_flag_review'),
]

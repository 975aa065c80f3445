"""
URL routes for analytics and dashboard stats
"""

from django.urls import path
from . import views

urlpatterns = [
    path('analytics/', views.analytics_overview, name='analytics'),
    path('conversions/<int:application_id>/', views.record_conversion, name='conversion_record'),
    path('creator/stats/', views.creator_stats, name='creator_stats'),
    path('company/stats/', views.company_stats, name='company_stats'),
]

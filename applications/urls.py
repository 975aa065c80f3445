"""
URL routes for offer applications
"""

from django.urls import path
from . import views

urlpatterns = [
    # Creator
    path('applications/', views.CreatorApplicationListCreateView.as_view(), name='applications'),
    path('applications/<int:pk>/', views.application_detail, name='application_detail'),
    path('applications/<int:pk>/clicks/', views.application_clicks, name='application_clicks'),

    # Company
    path('company/applications/', views.CompanyApplicationListView.as_view(), name='company_applications'),
    path('company/applications/<int:pk>/status/', views.ApplicationStatusView.as_view(), name='company_application_status'),
    path('applications/<int:pk>/approve/', views.approve_application, name='application_approve'),
    path('applications/<int:pk>/reject/', views.reject_application, name='application_reject'),
    path('applications/<int:pk>/complete/', views.complete_application, name='application_complete'),
]

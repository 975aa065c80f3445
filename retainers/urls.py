"""
URL routes for retainer contracts
"""

from django.urls import path
from . import views

urlpatterns = [
    # Creator
    path('retainers/', views.RetainerBrowseView.as_view(), name='retainer_browse'),
    path('retainers/my-applications/', views.my_retainer_applications, name='retainer_my_applications'),
    path('retainers/<int:pk>/', views.retainer_detail, name='retainer_detail'),
    path('retainers/<int:pk>/apply/', views.apply_to_retainer, name='retainer_apply'),
    path('retainers/<int:pk>/deliverables/', views.DeliverableListCreateView.as_view(), name='retainer_deliverables'),
    path('retainers/deliverables/<int:pk>/resubmit/', views.resubmit_deliverable, name='retainer_deliverable_resubmit'),

    # Company
    path('company/retainers/', views.CompanyRetainerListCreateView.as_view(), name='company_retainers'),
    path('company/retainers/<int:pk>/', views.CompanyRetainerDetailView.as_view(), name='company_retainer_detail'),
    path('company/retainers/<int:pk>/status/', views.retainer_status, name='company_retainer_status'),
    path('company/retainers/<int:pk>/applications/', views.retainer_applications, name='company_retainer_applications'),
    path('company/retainer-applications/<int:pk>/approve/', views.approve_retainer_application, name='retainer_application_approve'),
    path('company/retainer-applications/<int:pk>/reject/', views.reject_retainer_application, name='retainer_application_reject'),
    path('company/retainer-deliverables/<int:pk>/approve/', views.approve_deliverable, name='retainer_deliverable_approve'),
    path('company/retainer-deliverables/<int:pk>/reject/', views.reject_deliverable, name='retainer_deliverable_reject'),
    path('company/retainer-deliverables/<int:pk>/request-revision/', views.request_deliverable_revision, name='retainer_deliverable_revision'),
]

"""
URL routes for the admin console API
"""

from django.urls import path
from . import views

urlpatterns = [
    path('admin/stats/', views.dashboard_stats, name='admin_stats'),
    path('admin/audit-logs/', views.AuditLogListView.as_view(), name='admin_audit_logs'),

    # Companies
    path('admin/companies/', views.CompanyListView.as_view(), name='admin_companies'),
    path('admin/companies/<int:pk>/', views.company_detail, name='admin_company_detail'),
    path('admin/companies/<int:pk>/approve/', views.approve_company, name='admin_company_approve'),
    path('admin/companies/<int:pk>/reject/', views.reject_company, name='admin_company_reject'),
    path('admin/companies/<int:pk>/suspend/', views.suspend_company, name='admin_company_suspend'),
    path('admin/companies/<int:pk>/unsuspend/', views.unsuspend_company, name='admin_company_unsuspend'),
    path('admin/companies/<int:pk>/fee/', views.set_company_fee, name='admin_company_fee'),

    # Offers
    path('admin/offers/', views.OfferListView.as_view(), name='admin_offers'),
    path('admin/offers/<int:pk>/approve/', views.approve_offer, name='admin_offer_approve'),
    path('admin/offers/<int:pk>/reject/', views.reject_offer, name='admin_offer_reject'),
    path('admin/offers/<int:pk>/request-edits/', views.request_offer_edits, name='admin_offer_request_edits'),
    path('admin/offers/<int:pk>/feature/', views.feature_offer, name='admin_offer_feature'),
    path('admin/offers/<int:pk>/remove/', views.remove_offer, name='admin_offer_remove'),

    # Creators
    path('admin/creators/', views.CreatorListView.as_view(), name='admin_creators'),
    path('admin/creators/<int:pk>/suspend/', views.suspend_creator, name='admin_creator_suspend'),
    path('admin/creators/<int:pk>/unsuspend/', views.unsuspend_creator, name='admin_creator_unsuspend'),
    path('admin/creators/<int:pk>/ban/', views.ban_creator, name='admin_creator_ban'),

    # Conversations
    path('admin/conversations/', views.conversation_list, name='admin_conversations'),
    path('admin/conversations/<int:pk>/messages/', views.conversation_messages, name='admin_conversation_messages'),

    # Settings, niches, announcements
    path('admin/settings/', views.SettingListView.as_view(), name='admin_settings'),
    path('admin/settings/<str:key>/', views.setting_detail, name='admin_setting_detail'),
    path('admin/niches/', views.NicheListCreateView.as_view(), name='admin_niches'),
    path('admin/niches/<int:pk>/', views.NicheDetailView.as_view(), name='admin_niche_detail'),
    path('admin/broadcast/', views.broadcast, name='admin_broadcast'),

    # Payments
    path('admin/payments/', views.payment_list, name='admin_payments'),
    path('admin/payments/disputed/', views.disputed_payments, name='admin_payments_disputed'),
    path('admin/payments/process-monthly/', views.process_monthly_payments, name='admin_process_monthly'),
    path('admin/payments/process-contract/<int:pk>/', views.process_contract_payment, name='admin_process_contract'),
    path('admin/payments/<str:kind>/<int:pk>/status/', views.set_payment_status, name='admin_payment_status'),
    path('admin/payments/<str:kind>/<int:pk>/resolve/', views.resolve_dispute, name='admin_payment_resolve'),

    # Reviews
    path('admin/reviews/', views.ReviewListView.as_view(), name='admin_reviews'),
    path('admin/reviews/<int:pk>/', views.ReviewDetailView.as_view(), name='admin_review_detail'),
    path('admin/reviews/<int:pk>/hide/', views.hide_review, name='admin_review_hide'),
    path('admin/reviews/<int:pk>/approve/', views.approve_review, name='admin_review_approve'),
    path('admin/reviews/<int:pk>/note/', views.review_note, name='admin_review_note'),
    path('admin/reviews/<int:pk>/respond/', views.respond_to_review, name='admin_review_respond'),
]

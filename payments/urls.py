"""
URL routes for payments and payout settings
"""

from django.urls import path
from . import views

urlpatterns = [
    path('payments/settings/', views.PaymentSettingListCreateView.as_view(), name='payment_settings'),
    path('payments/settings/<int:pk>/', views.delete_payment_setting, name='payment_setting_delete'),
    path('payments/creator/', views.creator_payments, name='payments_creator'),
    path('payments/company/', views.company_payments, name='payments_company'),
    path('payments/fees/', views.fee_preview, name='payments_fee_preview'),
    path('payments/<str:kind>/<int:pk>/', views.payment_detail, name='payment_detail'),
    path('payments/<str:kind>/<int:pk>/approve/', views.approve_payment, name='payment_approve'),
    path('payments/<str:kind>/<int:pk>/dispute/', views.dispute_payment, name='payment_dispute'),
]

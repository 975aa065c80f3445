from django.contrib import admin

from .models import PaymentSetting, Payment, RetainerPayment


@admin.register(PaymentSetting)
class PaymentSettingAdmin(admin.ModelAdmin):
    list_display = ['user', 'payout_method', 'is_default', 'created_at']
    list_filter = ['payout_method', 'is_default']
    search_fields = ['user__email', 'payout_email', 'paypal_email']


class _PaymentAdminBase(admin.ModelAdmin):
    list_filter = ['status', 'created_at']
    search_fields = ['creator__email', 'company__legal_name', 'company__trade_name', 'description']
    readonly_fields = [
        'gross_amount', 'platform_fee_amount', 'processing_fee_amount', 'net_amount',
        'initiated_at', 'completed_at', 'failed_at', 'refunded_at', 'created_at', 'updated_at'
    ]
    date_hierarchy = 'created_at'


@admin.register(Payment)
class PaymentAdmin(_PaymentAdminBase):
    list_display = ['id', 'creator', 'company', 'offer', 'gross_amount', 'net_amount', 'status', 'created_at']
    raw_id_fields = ['application', 'offer', 'creator', 'company']


@admin.register(RetainerPayment)
class RetainerPaymentAdmin(_PaymentAdminBase):
    list_display = [
        'id',
        'contract',
        'creator',
        'payment_type',
        'month_number',
        'gross_amount',
        'net_amount',
        'status',
        'created_at'
    ]
    list_filter = ['status', 'payment_type', 'created_at']
    raw_id_fields = ['contract', 'deliverable', 'creator', 'company']

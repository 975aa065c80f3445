from django.contrib import admin

from .models import Application, ClickEvent


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'creator', 'offer', 'status', 'tracking_code', 'auto_approval_scheduled_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['creator__email', 'offer__title', 'tracking_code']
    readonly_fields = ['tracking_code', 'tracking_link', 'approved_at', 'completed_at', 'created_at', 'updated_at']
    raw_id_fields = ['creator', 'offer']
    date_hierarchy = 'created_at'


@admin.register(ClickEvent)
class ClickEventAdmin(admin.ModelAdmin):
    list_display = ['application', 'ip_address', 'utm_source', 'fraud_score', 'created_at']
    list_filter = ['utm_source', 'created_at']
    search_fields = ['application__tracking_code', 'ip_address']
    raw_id_fields = ['application']

from django.contrib import admin

from .models import AuditLog, PlatformSetting


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'actor', 'action', 'entity_type', 'entity_id', 'ip_address']
    list_filter = ['action', 'entity_type']
    search_fields = ['entity_id', 'actor__email', 'reason']
    readonly_fields = [
        'actor', 'action', 'entity_type', 'entity_id', 'changes',
        'reason', 'ip_address', 'user_agent', 'created_at',
    ]

    def has_add_permission(self, request):
        return False


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'category', 'updated_by', 'updated_at']
    list_filter = ['category']
    search_fields = ['key', 'description']
    raw_id_fields = ['updated_by']

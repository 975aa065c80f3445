from django.contrib import admin

from .models import BannedKeyword, ContentFlag


@admin.register(BannedKeyword)
class BannedKeywordAdmin(admin.ModelAdmin):
    list_display = ['keyword', 'category', 'severity', 'is_active', 'created_at']
    list_filter = ['category', 'severity', 'is_active']
    search_fields = ['keyword']
    raw_id_fields = ['created_by']


@admin.register(ContentFlag)
class ContentFlagAdmin(admin.ModelAdmin):
    list_display = ['id', 'content_type', 'content_id', 'user', 'severity', 'status', 'created_at']
    list_filter = ['content_type', 'status', 'severity']
    search_fields = ['flag_reason', 'user__email']
    raw_id_fields = ['user', 'reviewed_by']
    readonly_fields = ['matched_keywords', 'created_at']

"""
Django Admin for accounts and profiles
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import User, CreatorProfile, CompanyProfile


class CreatorProfileInline(admin.StackedInline):
    model = CreatorProfile
    can_delete = False
    extra = 0


class CompanyProfileInline(admin.StackedInline):
    model = CompanyProfile
    can_delete = False
    extra = 0
    readonly_fields = ['website_verification_token', 'website_verified_at', 'approved_at']


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ['email', 'username', 'role', 'account_status', 'email_verified', 'created_at']
    list_filter = ['role', 'account_status', 'email_verified', 'is_staff']
    search_fields = ['email', 'username', 'first_name', 'last_name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']

    fieldsets = (
        ('Account', {
            'fields': ('email', 'username', 'password')
        }),
        ('Personal', {
            'fields': ('first_name', 'last_name', 'profile_image_url')
        }),
        ('Marketplace', {
            'fields': ('role', 'account_status', 'email_verified', 'google_id')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'role', 'password1', 'password2'),
        }),
    )

    def get_inlines(self, request, obj):
        if obj is None:
            return []
        if obj.role == User.Role.CREATOR:
            return [CreatorProfileInline]
        if obj.role == User.Role.COMPANY:
            return [CompanyProfileInline]
        return []


@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ['display_name', 'industry', 'status', 'website_verified', 'created_at']
    list_filter = ['status', 'website_verified', 'industry']
    search_fields = ['legal_name', 'trade_name', 'user__email']
    readonly_fields = ['website_verification_token', 'website_verified_at', 'approved_at', 'created_at']

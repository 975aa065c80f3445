from django.contrib import admin

from .models import Niche, Offer, OfferVideo, Favorite


class OfferVideoInline(admin.TabularInline):
    model = OfferVideo
    extra = 0
    fields = ['title', 'video_url', 'is_primary', 'order_index']


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'company',
        'commission_type',
        'status',
        'featured_on_homepage',
        'application_count',
        'created_at'
    ]
    list_filter = ['status', 'commission_type', 'featured_on_homepage', 'primary_niche']
    search_fields = ['title', 'product_name', 'company__legal_name', 'company__trade_name']
    readonly_fields = ['view_count', 'application_count', 'approved_at', 'rejected_at', 'created_at', 'updated_at']
    inlines = [OfferVideoInline]
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Offer', {
            'fields': ('company', 'title', 'product_name', 'short_description', 'full_description', 'product_url')
        }),
        ('Commission', {
            'fields': ('commission_type', 'commission_amount', 'commission_percentage', 'cookie_duration', 'minimum_payout')
        }),
        ('Targeting', {
            'fields': ('primary_niche', 'additional_niches', 'allowed_platforms', 'minimum_followers'),
            'classes': ('collapse',)
        }),
        ('Review', {
            'fields': ('status', 'rejection_reason', 'edit_requests', 'featured_on_homepage', 'approved_at', 'rejected_at')
        }),
        ('Stats', {
            'fields': ('view_count', 'application_count', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Niche)
class NicheAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['creator', 'offer', 'created_at']

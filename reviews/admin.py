from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'company', 'creator', 'overall_rating', 'is_approved', 'is_hidden', 'created_at']
    list_filter = ['overall_rating', 'is_approved', 'is_hidden']
    search_fields = ['review_text', 'company__legal_name', 'company__trade_name', 'creator__email']
    raw_id_fields = ['application', 'creator', 'company']

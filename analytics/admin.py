from django.contrib import admin

from .models import DailyAnalytics


@admin.register(DailyAnalytics)
class DailyAnalyticsAdmin(admin.ModelAdmin):
    list_display = ['application', 'offer', 'creator', 'date', 'clicks', 'unique_clicks', 'conversions', 'earnings']
    list_filter = ['date']
    search_fields = ['creator__email', 'offer__title']
    raw_id_fields = ['application', 'offer', 'creator']
    date_hierarchy = 'date'

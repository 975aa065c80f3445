from django.contrib import admin

from .models import RetainerContract, RetainerApplication, RetainerDeliverable


class RetainerApplicationInline(admin.TabularInline):
    model = RetainerApplication
    extra = 0
    fields = ['creator', 'status', 'created_at']
    readonly_fields = ['created_at']
    raw_id_fields = ['creator']


@admin.register(RetainerContract)
class RetainerContractAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'company',
        'monthly_amount',
        'videos_per_month',
        'duration_months',
        'status',
        'assigned_creator',
        'created_at'
    ]
    list_filter = ['status', 'required_platform']
    search_fields = ['title', 'company__legal_name', 'company__trade_name']
    raw_id_fields = ['company', 'assigned_creator']
    inlines = [RetainerApplicationInline]


@admin.register(RetainerDeliverable)
class RetainerDeliverableAdmin(admin.ModelAdmin):
    list_display = ['contract', 'creator', 'month_number', 'video_number', 'status', 'submitted_at']
    list_filter = ['status']
    raw_id_fields = ['contract', 'creator']

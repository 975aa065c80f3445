"""
URL routes for notifications
"""

from django.urls import path
from . import views

urlpatterns = [
    path('notifications/', views.NotificationListView.as_view(), name='notification_list'),
    path('notifications/unread-count/', views.unread_count, name='notification_unread_count'),
    path('notifications/read-all/', views.mark_all_read, name='notification_read_all'),
    path('notifications/clear/', views.clear_all, name='notification_clear'),
    path('notifications/preferences/', views.NotificationPreferenceView.as_view(), name='notification_preferences'),
    path('notifications/<int:pk>/', views.NotificationDetailView.as_view(), name='notification_detail'),
    path('notifications/<int:pk>/read/', views.mark_read, name='notification_read'),
]

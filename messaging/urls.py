"""
URL routes for creator/company messaging
"""

from django.urls import path
from . import views

urlpatterns = [
    path('conversations/', views.ConversationListView.as_view(), name='conversation_list'),
    path('conversations/attachments/', views.upload_attachment, name='message_attachment_upload'),
    path('conversations/<int:pk>/messages/', views.MessageListView.as_view(), name='conversation_messages'),
    path('conversations/<int:pk>/read/', views.mark_read, name='conversation_mark_read'),
    path('messages/<int:pk>/', views.delete_message, name='message_delete'),
    path('companies/<int:company_id>/response-time/', views.company_response_time, name='company_response_time'),
]

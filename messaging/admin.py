from django.contrib import admin

from .models import Conversation, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ['sender', 'content', 'attachments', 'is_read', 'created_at']
    readonly_fields = ['created_at']
    raw_id_fields = ['sender']


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'application', 'creator', 'company', 'last_message_at', 'resolved']
    list_filter = ['resolved']
    search_fields = ['creator__email', 'company__legal_name', 'offer__title']
    raw_id_fields = ['application', 'creator', 'company', 'offer', 'resolved_by']
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender', 'is_read', 'created_at']
    list_filter = ['is_read']
    search_fields = ['content', 'sender__email']
    raw_id_fields = ['conversation', 'sender']

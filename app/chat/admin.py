"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation management
- Participant viewing
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, DirectConversationPair, Message, Participant


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in conversation admin."""

    model = Participant
    extra = 0
    readonly_fields = ["joined_at", "last_read_at"]
    raw_id_fields = ["user"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "conversation_type",
        "name",
        "is_active",
        "created_by",
        "created_at",
        "last_message_at",
    ]
    list_filter = ["conversation_type", "is_active", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at", "last_message_at"]
    raw_id_fields = ["created_by"]
    inlines = [ParticipantInline]
    ordering = ["-created_at"]


@admin.register(DirectConversationPair)
class DirectConversationPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectConversationPair model."""

    list_display = ["conversation", "user_lower", "user_higher"]
    raw_id_fields = ["conversation", "user_lower", "user_higher"]


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    """Admin interface for Participant model."""

    list_display = ["id", "conversation", "user", "role", "is_muted", "joined_at", "last_read_at"]
    list_filter = ["role", "is_muted", "joined_at"]
    search_fields = ["user__email", "conversation__name"]
    readonly_fields = ["created_at", "updated_at", "joined_at"]
    raw_id_fields = ["conversation", "user"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "message_type",
        "content_preview",
        "is_edited",
        "created_at",
    ]
    list_filter = ["message_type", "is_edited", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at", "edited_at"]
    raw_id_fields = ["conversation", "sender", "reply_to"]
    ordering = ["-created_at"]

    @admin.display(description="Content")
    def content_preview(self, obj):
        """Show truncated content in list view."""
        if len(obj.content) > 50:
            return obj.content[:50] + "..."
        return obj.content

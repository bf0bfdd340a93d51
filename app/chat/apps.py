"""
Chat application configuration.

This app provides the messaging core with:
- Direct (1:1) and group conversations
- Admin/member roles with a protected creator
- Reply threading and message edits
- Read tracking and unread counts
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        """Register chat subject kinds for the activity log."""
        from core.subjects import subjects

        subjects.register("conversation", self.get_model("Conversation"))
        subjects.register("message", self.get_model("Message"))

"""
Service layer for the chat system.

Services:
    ConversationDirectory: Conversation lifecycle and membership
    MessageLog: Appending, editing and paging messages
    ReadTracker: Read watermarks and unread counts
    ConversationViewBuilder: Read-only conversation summaries

All services return core.services.ServiceResult for expected failures;
see chat.errors for the error codes.
"""

from chat.services.directory import ConversationDirectory
from chat.services.message_log import MessageCursor, MessageLog, MessagePage
from chat.services.read_tracker import ReadTracker
from chat.services.view_builder import (
    ConversationView,
    ConversationViewBuilder,
    MessagePreview,
    get_user_directory,
)

__all__ = [
    "ConversationDirectory",
    "ConversationView",
    "ConversationViewBuilder",
    "MessageCursor",
    "MessageLog",
    "MessagePage",
    "MessagePreview",
    "ReadTracker",
    "get_user_directory",
]

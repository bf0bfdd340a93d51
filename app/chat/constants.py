"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message operations (content limits, allowed kinds, pagination)
- Attachment handling
- Conversation listings and previews

Import example:
    from chat.constants import MESSAGE_CONFIG, ATTACHMENT_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 5000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # Kinds a caller may post; "system" is server-only
    USER_MESSAGE_TYPES: Final[tuple] = ("text", "image", "file")

    # Keyset pagination (newest first)
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100

    # Preview shown in conversation lists
    PREVIEW_LENGTH: Final[int] = 100


# =============================================================================
# Attachment Configuration
# =============================================================================


class ATTACHMENT_CONFIG:
    """
    Configuration for message attachments.

    Files are stored elsewhere; messages only carry
    descriptors ({"url", "name", "size", "mime_type"}).
    """

    MAX_ATTACHMENTS_PER_MESSAGE: Final[int] = 10
    REQUIRED_KEYS: Final[tuple] = ("url",)


# =============================================================================
# Conversation Configuration
# =============================================================================


class CONVERSATION_CONFIG:
    """Configuration for conversations and their listings."""

    MAX_NAME_LENGTH: Final[int] = 255
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100

    # Display fallbacks
    UNKNOWN_USER_NAME: Final[str] = "Unknown User"
    UNNAMED_GROUP_NAME: Final[str] = "Unnamed Conversation"

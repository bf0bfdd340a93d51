"""
Read-only conversation summaries for listings and detail views.

ConversationViewBuilder combines a conversation with the viewer's
membership, the newest message and the unread count. Names and avatars of
other users come from the configured core.protocols.UserDirectory
(settings.CHAT_USER_DIRECTORY); when the directory fails, the view falls
back to placeholders instead of failing the request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils.module_loading import import_string

from chat.constants import CONVERSATION_CONFIG, MESSAGE_CONFIG
from chat.services.directory import ConversationDirectory
from chat.services.message_log import MessageLog
from chat.services.read_tracker import ReadTracker
from core.protocols import UserSummary
from core.services import BaseService

if TYPE_CHECKING:
    from collections.abc import Iterable

    from authentication.models import User
    from chat.models import Conversation, Message
    from core.protocols import UserDirectory


@dataclass(frozen=True)
class MessagePreview:
    """Newest message of a conversation, as shown in a listing."""

    id: int
    content: str
    sender_id: int | None
    sender_name: str | None
    message_type: str
    created_at: datetime


@dataclass(frozen=True)
class ConversationView:
    """A conversation as seen by one viewer."""

    id: int
    conversation_type: str
    name: str
    avatar: str | None
    description: str
    other_user: UserSummary | None
    last_message: MessagePreview | None
    unread_count: int
    participant_count: int
    is_muted: bool
    last_message_at: datetime | None
    created_at: datetime


@lru_cache(maxsize=1)
def _load_directory(path: str) -> UserDirectory:
    return import_string(path)()


def get_user_directory() -> UserDirectory:
    """Instance of the UserDirectory named by settings.CHAT_USER_DIRECTORY."""
    return _load_directory(settings.CHAT_USER_DIRECTORY)


def truncate_preview(content: str) -> str:
    limit = MESSAGE_CONFIG.PREVIEW_LENGTH
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


class ConversationViewBuilder(BaseService):
    """
    Builds ConversationView objects.

    Never writes: building a view does not touch read state.
    """

    @classmethod
    def build(
        cls,
        conversation: Conversation,
        viewer: User,
        directory: UserDirectory | None = None,
    ) -> ConversationView:
        directory = directory or get_user_directory()

        participant = ConversationDirectory.get_participant(conversation, viewer)
        participant_count = conversation.participants.count()

        other_user = None
        if conversation.is_direct:
            other_id = ConversationDirectory.direct_partner_id(conversation, viewer)
            if other_id is not None:
                other_user = cls._lookup(directory, other_id)
            name = other_user.name if other_user else CONVERSATION_CONFIG.UNKNOWN_USER_NAME
            avatar = other_user.avatar if other_user else None
        else:
            name = conversation.name or CONVERSATION_CONFIG.UNNAMED_GROUP_NAME
            avatar = conversation.avatar or None

        latest = MessageLog.latest(conversation)

        return ConversationView(
            id=conversation.id,
            conversation_type=conversation.conversation_type,
            name=name,
            avatar=avatar,
            description=conversation.description,
            other_user=other_user,
            last_message=cls._preview(directory, latest) if latest else None,
            unread_count=ReadTracker.unread_count(conversation, viewer),
            participant_count=participant_count,
            is_muted=participant.is_muted if participant else False,
            last_message_at=conversation.last_message_at,
            created_at=conversation.created_at,
        )

    @classmethod
    def build_many(
        cls,
        conversations: Iterable[Conversation],
        viewer: User,
        directory: UserDirectory | None = None,
    ) -> list[ConversationView]:
        directory = directory or get_user_directory()
        return [cls.build(conversation, viewer, directory) for conversation in conversations]

    @classmethod
    def sender_name(cls, message: Message, directory: UserDirectory | None = None) -> str | None:
        """
        Display name of a message's sender.

        None for system messages. Senders the directory cannot resolve,
        for whatever reason, get the unknown-user placeholder.
        """
        if message.sender_id is None:
            return None
        summary = cls._lookup(directory or get_user_directory(), message.sender_id)
        return summary.name if summary else CONVERSATION_CONFIG.UNKNOWN_USER_NAME

    @classmethod
    def _preview(cls, directory: UserDirectory, message: Message) -> MessagePreview:
        return MessagePreview(
            id=message.id,
            content=truncate_preview(message.content),
            sender_id=message.sender_id,
            sender_name=cls.sender_name(message, directory),
            message_type=message.message_type,
            created_at=message.created_at,
        )

    @classmethod
    def _lookup(cls, directory: UserDirectory, user_id: int) -> UserSummary | None:
        try:
            return directory.get_summary(user_id)
        except Exception as exc:
            cls.get_logger().warning(
                f"User directory lookup for user {user_id} failed: {exc}", exc_info=exc
            )
            return None

"""
Append-only message history per conversation.

MessageLog owns every write to Message rows and the last_message_at bump
that accompanies an append.

Pagination:
    Pages are newest-first and keyed on (created_at, id). The cursor names
    the last row of the previous page, so rows inserted while a client is
    paging never shift the remaining pages.

Usage:
    result = MessageLog.append(conversation, sender, "hello")
    page = MessageLog.page(conversation, viewer, cursor=request_cursor).data
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from django.db.models import Q
from django.utils import timezone

from chat.constants import ATTACHMENT_CONFIG, MESSAGE_CONFIG
from chat.errors import ErrorCode
from chat.models import Conversation, Message, MessageType
from chat.services.directory import ConversationDirectory
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User


@dataclass(frozen=True)
class MessageCursor:
    """
    Position in a conversation's newest-first message stream.

    Encoded as URL-safe base64 JSON so clients treat it as opaque.
    """

    created_at: datetime
    message_id: int

    @classmethod
    def after(cls, message: Message) -> MessageCursor:
        return cls(created_at=message.created_at, message_id=message.id)

    def encode(self) -> str:
        data = {"ts": self.created_at.isoformat(), "id": self.message_id}
        return base64.urlsafe_b64encode(json.dumps(data).encode()).decode()

    @classmethod
    def decode(cls, cursor: str) -> MessageCursor:
        """
        Decode cursor from string.

        Raises:
            ValueError: If cursor is invalid
        """
        try:
            data = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
            created_at = datetime.fromisoformat(data["ts"])
            message_id = int(data["id"])
        except (ValueError, KeyError, TypeError, UnicodeError) as exc:
            raise ValueError("Invalid cursor") from exc

        if timezone.is_naive(created_at):
            raise ValueError("Invalid cursor")
        return cls(created_at=created_at, message_id=message_id)


@dataclass
class MessagePage:
    """One page of messages, newest first."""

    messages: list[Message] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False

    @property
    def newest(self) -> Message | None:
        return self.messages[0] if self.messages else None


class MessageLog(BaseService):
    """
    Service for message operations.

    Methods:
        append: Post a message and advance the conversation's last_message_at
        edit: Change the content of one's own message
        page: Newest-first keyset pagination
        latest: Newest message in a conversation
        get_message: Fetch a message within a conversation
    """

    @classmethod
    def append(
        cls,
        conversation: Conversation,
        sender: User,
        content: str,
        message_type: str = MessageType.TEXT,
        reply_to_id: int | None = None,
        attachments: list[dict[str, Any]] | None = None,
    ) -> ServiceResult[Message]:
        """
        Post a message to a conversation.

        The insert and the last_message_at bump commit together. The bump
        only moves last_message_at forward, so concurrent appends that
        commit out of order never make it go back.

        Args:
            conversation: Target conversation
            sender: Posting user (must be a participant)
            content: Message text
            message_type: text, image or file
            reply_to_id: Optional id of a message in the same conversation
            attachments: Optional list of {"url", ...} descriptors

        Error codes:
            CONVERSATION_NOT_FOUND: Conversation is inactive
            NOT_PARTICIPANT: Sender is not a participant
            EMPTY_CONTENT / CONTENT_TOO_LONG: Content length out of range
            INVALID_MESSAGE_TYPE: Type is not one a user may post
            INVALID_ATTACHMENTS: Malformed or too many attachments
            REPLY_TARGET_NOT_FOUND: reply_to_id not in this conversation
        """
        if not conversation.is_active:
            return ServiceResult.failure(
                "Conversation not found",
                error_code=ErrorCode.CONVERSATION_NOT_FOUND,
            )

        if not ConversationDirectory.is_member(conversation, sender):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code=ErrorCode.NOT_PARTICIPANT,
            )

        content = content.strip() if content else ""
        invalid = cls._validate_content(content)
        if invalid is not None:
            return invalid

        if message_type not in MESSAGE_CONFIG.USER_MESSAGE_TYPES:
            return ServiceResult.failure(
                f"Message type '{message_type}' cannot be posted",
                error_code=ErrorCode.INVALID_MESSAGE_TYPE,
                errors={
                    "type": [f"Must be one of: {', '.join(MESSAGE_CONFIG.USER_MESSAGE_TYPES)}"]
                },
            )

        attachments = attachments if attachments is not None else []
        invalid = cls._validate_attachments(attachments)
        if invalid is not None:
            return invalid

        reply_to = None
        if reply_to_id is not None:
            reply_to = Message.objects.filter(pk=reply_to_id, conversation=conversation).first()
            if reply_to is None:
                return ServiceResult.failure(
                    "Reply target not found in this conversation",
                    error_code=ErrorCode.REPLY_TARGET_NOT_FOUND,
                )

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                reply_to=reply_to,
                message_type=message_type,
                content=content,
                attachments=attachments,
            )
            Conversation.objects.filter(pk=conversation.pk).filter(
                Q(last_message_at__isnull=True) | Q(last_message_at__lt=message.created_at)
            ).update(last_message_at=message.created_at, updated_at=timezone.now())

        if conversation.last_message_at is None or conversation.last_message_at < message.created_at:
            conversation.last_message_at = message.created_at

        cls.get_logger().info(
            f"User {sender.id} sent {message_type} message {message.id} "
            f"to conversation {conversation.id}"
        )
        return ServiceResult.success(message)

    @classmethod
    def edit(
        cls,
        message: Message,
        editor: User,
        new_content: str,
    ) -> ServiceResult[Message]:
        """
        Replace the content of a message.

        Error codes:
            SYSTEM_MESSAGE: System messages cannot be edited
            NOT_SENDER: Only the sender, while still a participant, may edit
            EMPTY_CONTENT / CONTENT_TOO_LONG: Content length out of range
        """
        if message.is_system_message:
            return ServiceResult.failure(
                "System messages cannot be edited",
                error_code=ErrorCode.SYSTEM_MESSAGE,
            )

        if message.sender_id != editor.pk or not ConversationDirectory.is_member(
            message.conversation, editor
        ):
            return ServiceResult.failure(
                "You can only edit your own messages",
                error_code=ErrorCode.NOT_SENDER,
            )

        new_content = new_content.strip() if new_content else ""
        invalid = cls._validate_content(new_content)
        if invalid is not None:
            return invalid

        with cls.atomic():
            message.content = new_content
            message.is_edited = True
            message.edited_at = timezone.now()
            message.save(update_fields=["content", "is_edited", "edited_at", "updated_at"])

        cls.get_logger().info(f"User {editor.id} edited message {message.id}")
        return ServiceResult.success(message)

    @classmethod
    def page(
        cls,
        conversation: Conversation,
        viewer: User,
        cursor: str | None = None,
        page_size: int = MESSAGE_CONFIG.DEFAULT_PAGE_SIZE,
    ) -> ServiceResult[MessagePage]:
        """
        Return one newest-first page of messages.

        Args:
            conversation: Conversation to read
            viewer: Reading user (must be a participant)
            cursor: next_cursor from the previous page, or None for the newest page
            page_size: Clamped to [1, MAX_PAGE_SIZE]

        Error codes:
            CONVERSATION_NOT_FOUND: Viewer is not a participant
            INVALID_CURSOR: Cursor could not be decoded
        """
        if not ConversationDirectory.is_member(conversation, viewer):
            return ServiceResult.failure(
                "Conversation not found",
                error_code=ErrorCode.CONVERSATION_NOT_FOUND,
            )

        page_size = max(1, min(page_size, MESSAGE_CONFIG.MAX_PAGE_SIZE))

        messages = (
            Message.objects.filter(conversation=conversation)
            .select_related("sender", "sender__profile", "reply_to", "reply_to__sender__profile")
            .order_by("-created_at", "-id")
        )

        if cursor:
            try:
                position = MessageCursor.decode(cursor)
            except ValueError:
                return ServiceResult.failure(
                    "Invalid cursor",
                    error_code=ErrorCode.INVALID_CURSOR,
                )
            messages = messages.filter(
                Q(created_at__lt=position.created_at)
                | Q(created_at=position.created_at, id__lt=position.message_id)
            )

        # Fetch one extra row to learn whether another page exists
        rows = list(messages[: page_size + 1])
        has_more = len(rows) > page_size
        rows = rows[:page_size]

        next_cursor = MessageCursor.after(rows[-1]).encode() if has_more else None

        cls.get_logger().debug(
            f"Fetched {len(rows)} messages from conversation {conversation.id} "
            f"(has_more={has_more})"
        )
        return ServiceResult.success(
            MessagePage(messages=rows, next_cursor=next_cursor, has_more=has_more)
        )

    @classmethod
    def latest(cls, conversation: Conversation) -> Message | None:
        return (
            Message.objects.filter(conversation=conversation)
            .select_related("sender")
            .order_by("-created_at", "-id")
            .first()
        )

    @classmethod
    def get_message(cls, conversation: Conversation, message_id: int) -> ServiceResult[Message]:
        message = (
            Message.objects.filter(pk=message_id, conversation=conversation)
            .select_related("conversation", "sender", "sender__profile")
            .first()
        )
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code=ErrorCode.MESSAGE_NOT_FOUND,
            )
        return ServiceResult.success(message)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_content(content: str) -> ServiceResult | None:
        if len(content) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code=ErrorCode.EMPTY_CONTENT,
                errors={"content": ["This field may not be blank."]},
            )
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message exceeds maximum length of {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code=ErrorCode.CONTENT_TOO_LONG,
                errors={
                    "content": [
                        f"Ensure this field has no more than "
                        f"{MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters."
                    ]
                },
            )
        return None

    @staticmethod
    def _validate_attachments(attachments: Any) -> ServiceResult | None:
        problem = None
        if not isinstance(attachments, list):
            problem = "Attachments must be a list"
        elif len(attachments) > ATTACHMENT_CONFIG.MAX_ATTACHMENTS_PER_MESSAGE:
            problem = (
                f"At most {ATTACHMENT_CONFIG.MAX_ATTACHMENTS_PER_MESSAGE} "
                f"attachments are allowed"
            )
        else:
            for index, attachment in enumerate(attachments):
                if not isinstance(attachment, dict) or any(
                    not isinstance(attachment.get(key), str) or not attachment.get(key)
                    for key in ATTACHMENT_CONFIG.REQUIRED_KEYS
                ):
                    problem = f"Attachment {index} must be an object with a 'url'"
                    break

        if problem is None:
            return None
        return ServiceResult.failure(
            problem,
            error_code=ErrorCode.INVALID_ATTACHMENTS,
            errors={"attachments": [problem]},
        )

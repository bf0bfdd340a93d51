"""
Chat system models.

This module defines the data models for the messaging system supporting:
- Direct (1:1) conversations between exactly two users
- Group conversations with admin/member roles

Models:
    Conversation: Container for messages between participants
    DirectConversationPair: Enforces one direct conversation per user pair
    Participant: Membership of a user in a conversation, with read watermark
    Message: Individual message within a conversation

Design Decisions:
    - Direct conversations have fixed membership (no adding/removing participants)
    - Participant rows are deleted on leave/remove; rejoining creates a new row
    - last_read_at starts at the join time so history before the join is not unread
    - Conversation.last_message_at is only ever moved forward
    - A reply must reference a message in the same conversation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class ConversationType(models.TextChoices):
    """
    Type of conversation.

    DIRECT: Exactly two participants for the conversation's whole lifetime
    GROUP: Any number of participants, admin/member roles
    """

    DIRECT = "direct", "Direct Message"
    GROUP = "group", "Group"


class ParticipantRole(models.TextChoices):
    """
    Role within a conversation.

    ADMIN: Can add and remove members, change roles, edit group details
    MEMBER: Can send messages, edit own messages, leave

    The conversation's creator is always an admin and cannot leave,
    be removed or be demoted.
    """

    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT, IMAGE and FILE are posted by users. SYSTEM is reserved for
    server-generated messages and cannot be posted through MessageLog.append.
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"
    SYSTEM = "system", "System"


class Conversation(BaseModel):
    """
    A conversation between two or more users.

    Fields:
        conversation_type: direct or group (stored in column "type")
        name: Group name (empty for direct conversations)
        description: Optional group description
        avatar: Group avatar URL (empty for direct conversations)
        is_active: Inactive conversations are hidden from every listing
        created_by: Initiator of a direct conversation, creator of a group
        last_message_at: created_at of the newest message, never decreases

    Relationships:
        participants: Participant rows (current members only)
        messages: Message rows
        direct_pair: DirectConversationPair if type is DIRECT
    """

    conversation_type = models.CharField(
        max_length=10,
        choices=ConversationType.choices,
        default=ConversationType.GROUP,
        db_column="type",
        db_index=True,
        help_text="Type of conversation (direct or group)",
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Group name (empty for direct conversations)",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Optional group description",
    )
    avatar = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Group avatar URL",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive conversations are hidden from listings",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_conversations",
        help_text="User who created this conversation",
    )
    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        db_table = "conversations"
        ordering = ["-last_message_at", "-created_at"]
        indexes = [
            models.Index(
                fields=["conversation_type", "is_active"],
                name="conv_type_active_idx",
            ),
        ]

    def __str__(self) -> str:
        if self.conversation_type == ConversationType.DIRECT:
            return f"Direct({self.pk})"
        if self.name:
            return f"Group: {self.name}"
        return f"Group({self.pk})"

    @property
    def is_direct(self) -> bool:
        return self.conversation_type == ConversationType.DIRECT

    @property
    def is_group(self) -> bool:
        return self.conversation_type == ConversationType.GROUP

    def is_creator(self, user: User) -> bool:
        return self.created_by_id is not None and self.created_by_id == user.pk


class DirectConversationPair(models.Model):
    """
    Enforces uniqueness of direct conversations between two users.

    Stores each pair in canonical order (lower user id first), so the
    uniqueness constraint holds no matter who starts the conversation.
    Two concurrent inserts for the same pair cannot both commit.

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One conversation per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    conversation = models.OneToOneField(
        Conversation,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct conversation this pair represents",
    )
    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this conversation pair",
    )
    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this conversation pair",
    )

    class Meta:
        db_table = "direct_conversation_pairs"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_conversation_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Order two user ids as (lower, higher)."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Participant(BaseModel):
    """
    A user's membership in a conversation.

    Membership Lifecycle:
        1. Created on conversation creation, invite or add (role defaults to member)
        2. Deleted on leave or removal
        3. A later re-add creates a fresh row with a fresh read watermark

    Fields:
        conversation: Conversation this membership belongs to
        user: Member user
        role: admin or member
        joined_at: When the user joined
        last_read_at: Read watermark; only moves forward
        is_muted: Per-member mute flag

    Constraints:
        - UniqueConstraint(conversation, user): one row per member
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Conversation this membership belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="conversation_participations",
        help_text="User participating in the conversation",
    )
    role = models.CharField(
        max_length=10,
        choices=ParticipantRole.choices,
        default=ParticipantRole.MEMBER,
        help_text="Role in the conversation",
    )
    joined_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user joined this conversation",
    )
    last_read_at = models.DateTimeField(
        default=timezone.now,
        help_text="Messages created after this are unread for the user",
    )
    is_muted = models.BooleanField(
        default=False,
        help_text="Whether the user muted this conversation",
    )

    class Meta:
        db_table = "conversation_participants"
        ordering = ["joined_at", "id"]
        indexes = [
            models.Index(
                fields=["user", "conversation"],
                name="part_user_conv_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_participant",
            ),
        ]

    def __str__(self) -> str:
        return f"Participant: {self.user_id} in {self.conversation_id} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == ParticipantRole.ADMIN


class Message(BaseModel):
    """
    A message within a conversation.

    Ordering:
        Messages are ordered by (created_at, id). Both are assigned at insert
        time and never change, which makes (created_at, id) a stable keyset
        for cursor pagination.

    Threading:
        reply_to references another message in the same conversation. If the
        referenced message is later removed with its conversation, the whole
        thread goes with it.

    Fields:
        conversation: Conversation this message belongs to
        sender: Author (NULL for system messages or deleted users)
        reply_to: Message this one replies to
        message_type: text, image, file or system (stored in column "type")
        content: Message text
        attachments: JSON list of attachment descriptors
        is_edited / edited_at: Set by the sender editing the content
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
        help_text="User who sent this message (null for system messages)",
    )
    reply_to = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
        help_text="Message this message replies to",
    )
    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        db_column="type",
        help_text="Type of message",
    )
    content = models.TextField(
        help_text="Message text",
    )
    attachments = models.JSONField(
        default=list,
        blank=True,
        help_text="Attachment descriptors (url, name, size, mime_type)",
    )
    is_edited = models.BooleanField(
        default=False,
        help_text="Whether the content was edited after sending",
    )
    edited_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the content was last edited",
    )

    class Meta:
        db_table = "messages"
        ordering = ["created_at", "id"]
        indexes = [
            # Keyset pagination and unread counting within a conversation
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="msg_conv_cursor_idx",
            ),
            models.Index(
                fields=["sender", "-created_at"],
                name="msg_sender_idx",
            ),
        ]

    def __str__(self) -> str:
        sender_str = f"User {self.sender_id}" if self.sender_id else "System"
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"{sender_str}: {content_preview}"

    @property
    def is_system_message(self) -> bool:
        return self.message_type == MessageType.SYSTEM

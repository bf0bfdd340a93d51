"""
Serializers for chat API.

This module provides serializers for the chat system:
- Conversation serializers (view, detail, create, update)
- Participant serializers (read, create, update, mute)
- Message serializers (read, create, edit)

Serializer Hierarchy:
    ConversationViewSerializer: ConversationView from ConversationViewBuilder
    ConversationCreateSerializer: Group creation
    DirectConversationSerializer: Start or fetch a direct conversation
    ConversationUpdateSerializer: Group details update

    ParticipantSerializer: Participant with user info
    ParticipantCreateSerializer: Add participant to group
    ParticipantUpdateSerializer: Change participant role
    MuteSerializer: Toggle the caller's mute flag

    MessageSerializer: Message with sender and reply preview
    MessageCreateSerializer: Send new message
    MessageEditSerializer: Edit own message

Design Decisions:
    - Read and write serializers are separate for clarity
    - Write serializers check shapes only; business rules live in services
      so their error codes reach the client unchanged
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSerializer
from chat.constants import CONVERSATION_CONFIG
from chat.models import Message, MessageType, Participant, ParticipantRole
from chat.services.view_builder import ConversationViewBuilder, truncate_preview

# =============================================================================
# Message Serializers
# =============================================================================


class ReplyPreviewSerializer(serializers.ModelSerializer):
    """Minimal view of the message being replied to."""

    sender_name = serializers.SerializerMethodField(
        help_text="Display name of the replied-to sender"
    )
    content = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ["id", "content", "sender_name"]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str | None:
        """Get sender's display name or None for system messages."""
        return ConversationViewBuilder.sender_name(obj)

    def get_content(self, obj: Message) -> str:
        return truncate_preview(obj.content)


class MessageSerializer(serializers.ModelSerializer):
    """
    Full message serializer for message lists.

    is_own_message is computed against the requesting user, passed in the
    serializer context.
    """

    sender = UserSerializer(read_only=True, allow_null=True)
    type = serializers.CharField(source="message_type", read_only=True)
    reply_to = ReplyPreviewSerializer(read_only=True, allow_null=True)
    is_own_message = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "content",
            "type",
            "attachments",
            "is_edited",
            "edited_at",
            "sender",
            "reply_to",
            "is_own_message",
            "created_at",
        ]
        read_only_fields = fields

    def get_is_own_message(self, obj: Message) -> bool:
        request = self.context.get("request")
        if request is None or obj.sender_id is None:
            return False
        return obj.sender_id == request.user.id


class AttachmentSerializer(serializers.Serializer):
    """Attachment descriptor; files themselves are uploaded elsewhere."""

    url = serializers.CharField(max_length=500)
    name = serializers.CharField(max_length=255, required=False)
    size = serializers.IntegerField(min_value=0, required=False)
    mime_type = serializers.CharField(max_length=100, required=False)


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending messages.

    Supports:
    - Text, image and file messages
    - Replies (reply_to_id of a message in the same conversation)
    """

    content = serializers.CharField(
        allow_blank=True,
        trim_whitespace=False,
        help_text="Message content (max 5,000 characters)",
    )
    type = serializers.CharField(
        required=False,
        default=MessageType.TEXT,
        help_text="text, image or file",
    )
    reply_to_id = serializers.IntegerField(
        required=False,
        allow_null=True,
        help_text="ID of the message being replied to (optional)",
    )
    attachments = AttachmentSerializer(many=True, required=False)


class MessageEditSerializer(serializers.Serializer):
    """Serializer for editing a message's content."""

    content = serializers.CharField(
        allow_blank=True,
        trim_whitespace=False,
        help_text="New message content",
    )


class MessagePageQuerySerializer(serializers.Serializer):
    """Query parameters for message pages."""

    cursor = serializers.CharField(required=False, allow_blank=True)
    per_page = serializers.IntegerField(required=False)


# =============================================================================
# Participant Serializers
# =============================================================================


class ParticipantSerializer(serializers.ModelSerializer):
    """
    Read serializer for conversation participants.

    Includes user details and role information.
    """

    user = UserSerializer(read_only=True)
    is_creator = serializers.SerializerMethodField()

    class Meta:
        model = Participant
        fields = [
            "id",
            "user",
            "role",
            "is_creator",
            "is_muted",
            "joined_at",
        ]
        read_only_fields = fields

    def get_is_creator(self, obj: Participant) -> bool:
        return obj.conversation.is_creator(obj.user)


class ParticipantCreateSerializer(serializers.Serializer):
    """Serializer for adding participants to group conversations."""

    user_id = serializers.IntegerField(help_text="User ID to add to conversation")
    role = serializers.CharField(
        required=False,
        default=ParticipantRole.MEMBER,
        help_text="Role for the new participant (admin or member)",
    )


class ParticipantUpdateSerializer(serializers.Serializer):
    """Serializer for updating participant role."""

    role = serializers.CharField(help_text="New role for the participant (admin or member)")


class MuteSerializer(serializers.Serializer):
    is_muted = serializers.BooleanField()


# =============================================================================
# Conversation Serializers
# =============================================================================


class OtherUserSerializer(serializers.Serializer):
    """Serializes the core.protocols.UserSummary of a direct partner."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    username = serializers.CharField(allow_blank=True)
    avatar = serializers.CharField(allow_null=True)


class MessagePreviewSerializer(serializers.Serializer):
    """Serializes chat.services.MessagePreview."""

    id = serializers.IntegerField()
    content = serializers.CharField()
    sender_id = serializers.IntegerField(allow_null=True)
    sender_name = serializers.CharField(allow_null=True)
    type = serializers.CharField(source="message_type")
    created_at = serializers.DateTimeField()


class ConversationViewSerializer(serializers.Serializer):
    """Serializes chat.services.ConversationView for list and detail responses."""

    id = serializers.IntegerField()
    type = serializers.CharField(source="conversation_type")
    name = serializers.CharField()
    avatar = serializers.CharField(allow_null=True)
    description = serializers.CharField(allow_blank=True)
    other_user = OtherUserSerializer(allow_null=True)
    last_message = MessagePreviewSerializer(allow_null=True)
    unread_count = serializers.IntegerField()
    participant_count = serializers.IntegerField()
    is_muted = serializers.BooleanField()
    last_message_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()


class ConversationCreateSerializer(serializers.Serializer):
    """Serializer for creating group conversations."""

    name = serializers.CharField(
        max_length=CONVERSATION_CONFIG.MAX_NAME_LENGTH,
        allow_blank=True,
        help_text="Group name (required, non-blank)",
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    avatar = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        default="",
        help_text="Group avatar URL",
    )
    participant_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
        default=list,
        help_text="Users to add as members",
    )


class DirectConversationSerializer(serializers.Serializer):
    """Serializer for starting a direct conversation."""

    user_id = serializers.IntegerField(help_text="The other user")


class ConversationUpdateSerializer(serializers.Serializer):
    """Serializer for updating group details; omitted fields are unchanged."""

    name = serializers.CharField(
        max_length=CONVERSATION_CONFIG.MAX_NAME_LENGTH,
        required=False,
        allow_blank=True,
    )
    description = serializers.CharField(required=False, allow_blank=True)
    avatar = serializers.CharField(max_length=500, required=False, allow_blank=True)

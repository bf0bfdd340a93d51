"""
Per-participant read watermarks and unread counts.

A participant's last_read_at only moves forward. A message is unread for a
user when it was created after their watermark and was not sent by them;
system messages (no sender) count as unread too.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from django.utils import timezone

from chat.errors import ErrorCode
from chat.models import Message, Participant
from chat.services.directory import ConversationDirectory
from chat.services.message_log import MessageLog
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from authentication.models import User
    from chat.models import Conversation


class ReadTracker(BaseService):
    """Service for read state."""

    @classmethod
    def mark_read(
        cls,
        conversation: Conversation,
        user: User,
        at: datetime | None = None,
    ) -> ServiceResult[datetime]:
        """
        Advance the user's read watermark.

        Without ``at`` the watermark moves to the newest message (or to now
        for an empty conversation). The update is a single conditional
        statement, so a stale or out-of-order call never moves it back.

        Returns:
            ServiceResult with the watermark after the call

        Error codes:
            CONVERSATION_NOT_FOUND: User is not a participant
        """
        participant = ConversationDirectory.get_participant(conversation, user)
        if participant is None:
            return ServiceResult.failure(
                "Conversation not found",
                error_code=ErrorCode.CONVERSATION_NOT_FOUND,
            )

        if at is None:
            latest = MessageLog.latest(conversation)
            at = latest.created_at if latest else timezone.now()

        updated = Participant.objects.filter(pk=participant.pk, last_read_at__lt=at).update(
            last_read_at=at
        )
        if updated:
            participant.last_read_at = at
            cls.get_logger().debug(
                f"User {user.id} read conversation {conversation.id} up to {at.isoformat()}"
            )
        else:
            participant.refresh_from_db(fields=["last_read_at"])

        return ServiceResult.success(participant.last_read_at)

    @classmethod
    def unread_count(cls, conversation: Conversation, user: User) -> int:
        """Messages after the user's watermark not sent by them; 0 for non-members."""
        last_read_at = (
            Participant.objects.filter(conversation=conversation, user=user)
            .values_list("last_read_at", flat=True)
            .first()
        )
        if last_read_at is None:
            return 0

        return (
            Message.objects.filter(conversation=conversation, created_at__gt=last_read_at)
            .exclude(sender=user)
            .count()
        )

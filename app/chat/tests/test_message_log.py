"""
Tests for MessageLog.

Covers:
- append: membership, content/type/attachment validation, reply targets,
  last_message_at bump
- edit: sender-only, system messages, content validation
- page: newest-first keyset pagination, cursors, page size clamping
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.constants import MESSAGE_CONFIG
from chat.errors import ErrorCode, as_exception
from chat.models import Conversation, Message, MessageType
from chat.services import ConversationDirectory, MessageCursor, MessageLog
from chat.tests.factories import GroupConversationFactory, MessageFactory

# =============================================================================
# append
# =============================================================================


class TestAppend:
    """Tests for MessageLog.append()."""

    def test_member_posts_message(self, group_conversation, member_user):
        """Participants can post; the message is stored as sent."""
        result = MessageLog.append(group_conversation, member_user, "Hello team")

        assert result.success is True
        message = result.data
        assert message.conversation == group_conversation
        assert message.sender == member_user
        assert message.content == "Hello team"
        assert message.message_type == MessageType.TEXT
        assert message.attachments == []

    def test_bumps_last_message_at(self, group_conversation, member_user):
        """last_message_at becomes the new message's created_at."""
        message = MessageLog.append(group_conversation, member_user, "Hi").data

        group_conversation.refresh_from_db()
        assert group_conversation.last_message_at == message.created_at

    def test_last_message_at_never_decreases(self, group_conversation, member_user):
        """A bump older than the stored value is ignored."""
        future = timezone.now() + timedelta(hours=1)
        Conversation.objects.filter(pk=group_conversation.pk).update(last_message_at=future)
        group_conversation.refresh_from_db()

        MessageLog.append(group_conversation, member_user, "Late arrival")

        group_conversation.refresh_from_db()
        assert group_conversation.last_message_at == future

    def test_non_member_denied(self, group_conversation, outsider_user):
        """Non-participants get NOT_PARTICIPANT and nothing is stored."""
        result = MessageLog.append(group_conversation, outsider_user, "Let me in")

        assert result.error_code == ErrorCode.NOT_PARTICIPANT
        assert as_exception(result).kind == "permission_denied"
        assert Message.objects.count() == 0

    def test_non_member_denied_before_validation(self, group_conversation, outsider_user):
        """Membership is checked before content, so invalid content still yields denial."""
        result = MessageLog.append(group_conversation, outsider_user, "")

        assert result.error_code == ErrorCode.NOT_PARTICIPANT

    def test_left_member_denied(self, group_conversation, member_user):
        """After leaving, a former member can no longer post."""
        ConversationDirectory.leave(group_conversation, member_user)

        result = MessageLog.append(group_conversation, member_user, "Still here?")

        assert result.error_code == ErrorCode.NOT_PARTICIPANT

    def test_inactive_conversation_not_found(self, db):
        """Inactive conversations accept no messages."""
        creator = UserFactory()
        conversation = GroupConversationFactory(created_by=creator, is_active=False)

        result = MessageLog.append(conversation, creator, "Hello?")

        assert result.error_code == ErrorCode.CONVERSATION_NOT_FOUND

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_content_rejected(self, group_conversation, member_user, content):
        """Blank content is invalid."""
        result = MessageLog.append(group_conversation, member_user, content)

        assert result.error_code == ErrorCode.EMPTY_CONTENT
        assert as_exception(result).kind == "invalid"
        assert not Message.objects.filter(conversation=group_conversation).exists()

    def test_content_length_limit(self, group_conversation, member_user):
        """Content up to the limit is accepted, one more character is not."""
        limit = MESSAGE_CONFIG.MAX_CONTENT_LENGTH

        ok = MessageLog.append(group_conversation, member_user, "x" * limit)
        too_long = MessageLog.append(group_conversation, member_user, "x" * (limit + 1))

        assert ok.success is True
        assert too_long.error_code == ErrorCode.CONTENT_TOO_LONG
        assert Message.objects.filter(conversation=group_conversation).count() == 1

    def test_content_is_stripped(self, group_conversation, member_user):
        """Surrounding whitespace is removed."""
        message = MessageLog.append(group_conversation, member_user, "  hi  ").data

        assert message.content == "hi"

    def test_system_type_reserved(self, group_conversation, member_user):
        """Users cannot post system messages."""
        result = MessageLog.append(
            group_conversation, member_user, "I am the system", message_type=MessageType.SYSTEM
        )

        assert result.error_code == ErrorCode.INVALID_MESSAGE_TYPE

    def test_unknown_type_rejected(self, group_conversation, member_user):
        """Unknown message types are invalid."""
        result = MessageLog.append(group_conversation, member_user, "hi", message_type="video")

        assert result.error_code == ErrorCode.INVALID_MESSAGE_TYPE

    def test_image_with_attachment(self, group_conversation, member_user):
        """Image messages carry attachment descriptors."""
        attachments = [{"url": "https://cdn.example.com/a.png", "mime_type": "image/png"}]

        message = MessageLog.append(
            group_conversation,
            member_user,
            "Look",
            message_type=MessageType.IMAGE,
            attachments=attachments,
        ).data

        message.refresh_from_db()
        assert message.message_type == MessageType.IMAGE
        assert message.attachments == attachments

    @pytest.mark.parametrize(
        "attachments",
        [
            "https://cdn.example.com/a.png",
            [{"name": "no-url.png"}],
            [{"url": ""}],
            ["https://cdn.example.com/a.png"],
            [{"url": f"https://cdn.example.com/{i}.png"} for i in range(11)],
        ],
    )
    def test_bad_attachments_rejected(self, group_conversation, member_user, attachments):
        """Attachments must be a short list of objects with a url."""
        result = MessageLog.append(
            group_conversation, member_user, "files", attachments=attachments
        )

        assert result.error_code == ErrorCode.INVALID_ATTACHMENTS
        assert not Message.objects.filter(conversation=group_conversation).exists()

    def test_reply_in_same_conversation(self, group_conversation, member_user, text_message):
        """Replies reference a message of the same conversation."""
        reply = MessageLog.append(
            group_conversation, member_user, "Replying", reply_to_id=text_message.id
        ).data

        assert reply.reply_to == text_message

    def test_reply_to_other_conversation_rejected(self, db):
        """A reply_to_id from another conversation is not found."""
        user = UserFactory()
        here = GroupConversationFactory(created_by=user)
        elsewhere = GroupConversationFactory(created_by=user)
        foreign = MessageLog.append(elsewhere, user, "Over there").data

        result = MessageLog.append(here, user, "Reply", reply_to_id=foreign.id)

        assert result.error_code == ErrorCode.REPLY_TARGET_NOT_FOUND
        assert as_exception(result).kind == "not_found"
        assert not Message.objects.filter(conversation=here).exists()

    def test_reply_to_missing_message_rejected(self, group_conversation, member_user):
        """A reply_to_id that does not exist is not found."""
        result = MessageLog.append(group_conversation, member_user, "Reply", reply_to_id=424242)

        assert result.error_code == ErrorCode.REPLY_TARGET_NOT_FOUND

    def test_failed_bump_rolls_back_insert(self, group_conversation, member_user, monkeypatch):
        """If the bump fails, the message insert is rolled back as well."""
        from django.db.models import QuerySet

        def failing_update(self, **kwargs):
            if "last_message_at" in kwargs:
                raise RuntimeError("bump failed")
            return original_update(self, **kwargs)

        original_update = QuerySet.update
        monkeypatch.setattr(QuerySet, "update", failing_update)

        with pytest.raises(RuntimeError):
            MessageLog.append(group_conversation, member_user, "Doomed")

        assert Message.objects.count() == 0


# =============================================================================
# edit
# =============================================================================


class TestEdit:
    """Tests for MessageLog.edit()."""

    def test_sender_edits(self, text_message, member_user):
        """The sender can edit; the message is flagged as edited."""
        result = MessageLog.edit(text_message, member_user, "Corrected")

        assert result.success is True
        text_message.refresh_from_db()
        assert text_message.content == "Corrected"
        assert text_message.is_edited is True
        assert text_message.edited_at is not None

    def test_other_member_cannot_edit(self, text_message, creator_user):
        """Even the creator cannot edit someone else's message."""
        result = MessageLog.edit(text_message, creator_user, "Hijacked")

        assert result.error_code == ErrorCode.NOT_SENDER
        text_message.refresh_from_db()
        assert text_message.is_edited is False

    def test_former_member_cannot_edit(self, text_message, group_conversation, member_user):
        """Senders who left the conversation can no longer edit."""
        ConversationDirectory.leave(group_conversation, member_user)

        result = MessageLog.edit(text_message, member_user, "After leaving")

        assert result.error_code == ErrorCode.NOT_SENDER

    def test_system_message_not_editable(self, system_message, creator_user):
        """System messages are immutable."""
        result = MessageLog.edit(system_message, creator_user, "Rewritten")

        assert result.error_code == ErrorCode.SYSTEM_MESSAGE

    def test_blank_edit_rejected(self, text_message, member_user):
        """Edits obey the same content rules as posts."""
        original = text_message.content

        result = MessageLog.edit(text_message, member_user, "  ")

        assert result.error_code == ErrorCode.EMPTY_CONTENT
        text_message.refresh_from_db()
        assert text_message.content == original
        assert text_message.edited_at is None

    def test_edit_keeps_order(self, text_message, member_user):
        """Editing does not change created_at."""
        created_at = text_message.created_at

        MessageLog.edit(text_message, member_user, "Changed")

        text_message.refresh_from_db()
        assert text_message.created_at == created_at


# =============================================================================
# page
# =============================================================================


@pytest.fixture
def busy_conversation(group_conversation, member_user):
    """Group with 7 messages, posted through MessageLog."""
    for i in range(7):
        MessageLog.append(group_conversation, member_user, f"Message {i}")
    return group_conversation


class TestPage:
    """Tests for MessageLog.page()."""

    def test_newest_first(self, busy_conversation, member_user):
        """The first page holds the newest messages, newest first."""
        page = MessageLog.page(busy_conversation, member_user, page_size=3).data

        assert [m.content for m in page.messages] == ["Message 6", "Message 5", "Message 4"]
        assert page.has_more is True
        assert page.next_cursor is not None
        assert page.newest.content == "Message 6"

    def test_walks_all_pages_without_gaps(self, busy_conversation, member_user):
        """Following next_cursor visits every message exactly once."""
        seen = []
        cursor = None
        while True:
            page = MessageLog.page(busy_conversation, member_user, cursor=cursor, page_size=3).data
            seen.extend(m.content for m in page.messages)
            if not page.has_more:
                assert page.next_cursor is None
                break
            cursor = page.next_cursor

        assert seen == [f"Message {i}" for i in range(6, -1, -1)]

    def test_inserts_during_paging_do_not_shift_pages(self, busy_conversation, member_user):
        """New messages appear only on a fresh first page."""
        first = MessageLog.page(busy_conversation, member_user, page_size=3).data
        MessageLog.append(busy_conversation, member_user, "Breaking news")

        second = MessageLog.page(
            busy_conversation, member_user, cursor=first.next_cursor, page_size=3
        ).data

        assert [m.content for m in second.messages] == ["Message 3", "Message 2", "Message 1"]

    def test_same_timestamp_ties_broken_by_id(self, group_conversation, member_user):
        """Messages sharing created_at are ordered by id and none is skipped."""
        messages = [
            MessageFactory(conversation=group_conversation, sender=member_user) for _ in range(4)
        ]
        stamp = timezone.now()
        Message.objects.filter(pk__in=[m.pk for m in messages]).update(created_at=stamp)

        first = MessageLog.page(group_conversation, member_user, page_size=2).data
        second = MessageLog.page(
            group_conversation, member_user, cursor=first.next_cursor, page_size=2
        ).data

        ids = [m.id for m in first.messages + second.messages]
        assert ids == sorted((m.id for m in messages), reverse=True)
        assert second.has_more is False

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-5, 1), (1000, 7)])
    def test_page_size_clamped(self, busy_conversation, member_user, requested, expected):
        """page_size is clamped to [1, MAX_PAGE_SIZE]."""
        page = MessageLog.page(busy_conversation, member_user, page_size=requested).data

        assert len(page.messages) == expected

    @pytest.mark.parametrize(
        "cursor", ["garbage", "eyJ0cyI6IDF9", "eyJ0cyI6ICIyMDI0LTAxLTAxVDAwOjAwOjAwIiwgImlkIjogMX0="]
    )
    def test_malformed_cursor_invalid(self, busy_conversation, member_user, cursor):
        """Undecodable cursors (including naive timestamps) are invalid."""
        result = MessageLog.page(busy_conversation, member_user, cursor=cursor)

        assert result.error_code == ErrorCode.INVALID_CURSOR
        assert as_exception(result).kind == "invalid"

    def test_non_member_not_found(self, busy_conversation, outsider_user):
        """Non-members cannot page."""
        result = MessageLog.page(busy_conversation, outsider_user)

        assert result.error_code == ErrorCode.CONVERSATION_NOT_FOUND

    def test_empty_conversation(self, group_conversation, member_user):
        """An empty conversation yields an empty last page."""
        page = MessageLog.page(group_conversation, member_user).data

        assert page.messages == []
        assert page.has_more is False
        assert page.newest is None


class TestMessageCursor:
    """Tests for MessageCursor encoding."""

    def test_decode_reverses_encode(self):
        """A cursor decodes to the position it was built from."""
        position = MessageCursor(created_at=timezone.now(), message_id=42)

        assert MessageCursor.decode(position.encode()) == position

    def test_decode_rejects_garbage(self):
        """Invalid cursors raise ValueError."""
        with pytest.raises(ValueError, match="Invalid cursor"):
            MessageCursor.decode("not-a-cursor")


class TestLatest:
    """Tests for MessageLog.latest()."""

    def test_returns_newest(self, busy_conversation):
        assert MessageLog.latest(busy_conversation).content == "Message 6"

    def test_none_when_empty(self, group_conversation):
        assert MessageLog.latest(group_conversation) is None

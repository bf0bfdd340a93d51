"""
End-to-end chat flows through the API.

Each test walks a complete user story across several endpoints and checks
the combined state afterwards.
"""

from rest_framework import status

from activity.models import Activity
from authentication.tests.factories import UserFactory
from chat.models import Conversation, DirectConversationPair, Message
from chat.services import ReadTracker

CONVERSATIONS_URL = "/api/v1/conversations/"
DIRECT_URL = "/api/v1/conversations/direct/"


class TestDirectConversationFlow:
    """Two users start a direct conversation and exchange messages."""

    def test_start_message_read_and_restart(self, db, client_for):
        """
        A starts with B, B replies, A reads, B starts again with A.

        - First start creates the conversation (exists false)
        - B's message bumps last_message_at and leaves A one unread
        - A fetching messages clears the unread count
        - B starting with A returns the same conversation without new rows
        """
        alice = UserFactory(first_name="Alice", last_name="A")
        bob = UserFactory(first_name="Bob", last_name="B")
        alice_client = client_for(alice)
        bob_client = client_for(bob)

        started = alice_client.post(DIRECT_URL, {"user_id": bob.id}, format="json")
        assert started.status_code == status.HTTP_201_CREATED
        assert started.data["exists"] is False
        conversation_id = started.data["id"]
        messages_url = f"{CONVERSATIONS_URL}{conversation_id}/messages/"

        sent = bob_client.post(messages_url, {"content": "Hi Alice"}, format="json")
        assert sent.status_code == status.HTTP_201_CREATED

        conversation = Conversation.objects.get(pk=conversation_id)
        assert conversation.last_message_at is not None
        assert ReadTracker.unread_count(conversation, alice) == 1

        listed = alice_client.get(CONVERSATIONS_URL)
        assert listed.data["results"][0]["unread_count"] == 1
        assert listed.data["results"][0]["name"] == "Bob B"

        fetched = alice_client.get(messages_url)
        assert fetched.status_code == status.HTTP_200_OK
        assert [m["content"] for m in fetched.data["messages"]] == ["Hi Alice"]
        assert fetched.data["messages"][0]["is_own_message"] is False
        assert ReadTracker.unread_count(conversation, alice) == 0

        restarted = bob_client.post(DIRECT_URL, {"user_id": alice.id}, format="json")
        assert restarted.status_code == status.HTTP_200_OK
        assert restarted.data["exists"] is True
        assert restarted.data["id"] == conversation_id
        assert restarted.data["name"] == "Alice A"
        assert Conversation.objects.count() == 1
        assert DirectConversationPair.objects.count() == 1


class TestGroupGovernanceFlow:
    """Creator, admin and member roles enforced through the API."""

    def test_creator_protected(self, db, client_for):
        """
        A member cannot remove the creator and the creator cannot leave.

        Both attempts return 403 and leave membership unchanged.
        """
        creator = UserFactory()
        member = UserFactory()
        creator_client = client_for(creator)
        member_client = client_for(member)

        created = creator_client.post(
            CONVERSATIONS_URL,
            {"name": "Team", "participant_ids": [member.id]},
            format="json",
        )
        assert created.status_code == status.HTTP_201_CREATED
        conversation_id = created.data["id"]
        base_url = f"{CONVERSATIONS_URL}{conversation_id}/"

        removal = member_client.delete(f"{base_url}participants/{creator.id}/")
        assert removal.status_code == status.HTTP_403_FORBIDDEN
        assert removal.data["kind"] == "permission_denied"

        leaving = creator_client.post(f"{base_url}leave/")
        assert leaving.status_code == status.HTTP_403_FORBIDDEN
        assert leaving.data["error_code"] == "CREATOR_CANNOT_LEAVE"

        detail = creator_client.get(base_url)
        assert {p["user"]["id"] for p in detail.data["participants"]} == {creator.id, member.id}

    def test_promote_then_admin_manages_members(self, db, client_for):
        """A promoted admin can add and remove members; activity is recorded."""
        creator = UserFactory()
        deputy = UserFactory()
        newcomer = UserFactory()
        creator_client = client_for(creator)
        deputy_client = client_for(deputy)

        created = creator_client.post(
            CONVERSATIONS_URL,
            {"name": "Team", "participant_ids": [deputy.id]},
            format="json",
        )
        base_url = f"{CONVERSATIONS_URL}{created.data['id']}/"

        denied = deputy_client.post(
            f"{base_url}participants/", {"user_id": newcomer.id}, format="json"
        )
        assert denied.status_code == status.HTTP_403_FORBIDDEN

        promoted = creator_client.patch(
            f"{base_url}participants/{deputy.id}/", {"role": "admin"}, format="json"
        )
        assert promoted.data["role"] == "admin"

        added = deputy_client.post(
            f"{base_url}participants/", {"user_id": newcomer.id}, format="json"
        )
        assert added.status_code == status.HTTP_201_CREATED

        removed = deputy_client.delete(f"{base_url}participants/{newcomer.id}/")
        assert removed.status_code == status.HTTP_204_NO_CONTENT

        actions = list(
            Activity.objects.filter(subject_kind="conversation", subject_id=created.data["id"])
            .order_by("created_at", "id")
            .values_list("action", flat=True)
        )
        assert actions == [
            "conversation.group_created",
            "conversation.role_changed",
            "conversation.participant_added",
            "conversation.participant_removed",
        ]


class TestReplyFlow:
    """Replies must target a message in the same conversation."""

    def test_cross_conversation_reply_rejected(self, db, client_for):
        """
        Replying in one conversation to a message from another is 404.

        The user is a member of both, so the only problem is the target.
        """
        user = UserFactory()
        client = client_for(user)

        first = client.post(CONVERSATIONS_URL, {"name": "First"}, format="json")
        second = client.post(CONVERSATIONS_URL, {"name": "Second"}, format="json")
        first_messages = f"{CONVERSATIONS_URL}{first.data['id']}/messages/"
        second_messages = f"{CONVERSATIONS_URL}{second.data['id']}/messages/"

        original = client.post(first_messages, {"content": "Question?"}, format="json")
        reply = client.post(
            second_messages,
            {"content": "Answer", "reply_to_id": original.data["id"]},
            format="json",
        )

        assert reply.status_code == status.HTTP_404_NOT_FOUND
        assert reply.data["error_code"] == "REPLY_TARGET_NOT_FOUND"
        assert Message.objects.count() == 1

        same_conversation = client.post(
            first_messages,
            {"content": "Answer", "reply_to_id": original.data["id"]},
            format="json",
        )
        assert same_conversation.status_code == status.HTTP_201_CREATED
        assert same_conversation.data["reply_to"]["id"] == original.data["id"]

"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures with different conversation roles
- Conversation fixtures (direct and group)
- Message fixtures (text and system)
- API client helpers for authenticated requests

Usage:
    def test_example(group_conversation, creator_client):
        response = creator_client.get(f"/api/v1/conversations/{group_conversation.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.models import ParticipantRole
from chat.tests.factories import (
    DirectConversationFactory,
    GroupConversationFactory,
    MessageFactory,
    ParticipantFactory,
    SystemMessageFactory,
)

# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def creator_user(db):
    """Create a user who will be a group creator."""
    return UserFactory(first_name="Carol", last_name="Creator")


@pytest.fixture
def group_admin(db):
    """Create a user who will be a group admin (not the creator)."""
    return UserFactory(first_name="Adam", last_name="Admin")


@pytest.fixture
def member_user(db):
    """Create a user who will be a plain group member."""
    return UserFactory(first_name="Mia", last_name="Member")


@pytest.fixture
def other_user(db):
    """Create another user for various tests."""
    return UserFactory(first_name="Otto", last_name="Other")


@pytest.fixture
def outsider_user(db):
    """Create a user who is not a participant in any test conversation."""
    return UserFactory(first_name="Olga", last_name="Outsider")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def group_conversation(db, creator_user, group_admin, member_user):
    """
    Create a group with creator (admin), a second admin and a member.

    Provides a full role hierarchy for permission testing.
    """
    conversation = GroupConversationFactory(
        name="Test Group",
        created_by=creator_user,
        members=[member_user],
    )
    ParticipantFactory(conversation=conversation, user=group_admin, role=ParticipantRole.ADMIN)
    return conversation


@pytest.fixture
def direct_conversation(db, creator_user, other_user):
    """Create a direct conversation between creator_user and other_user."""
    return DirectConversationFactory(user1=creator_user, user2=other_user)


# =============================================================================
# Message Fixtures
# =============================================================================


@pytest.fixture
def text_message(db, group_conversation, member_user):
    """Create a text message sent by the member."""
    return MessageFactory(
        conversation=group_conversation,
        sender=member_user,
        content="Hello, this is a test message.",
    )


@pytest.fixture
def system_message(db, group_conversation):
    """Create a system message in the group conversation."""
    return SystemMessageFactory(conversation=group_conversation)


# =============================================================================
# API Client Fixtures
# =============================================================================


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def client_for():
    """Return a function building a JWT-authenticated APIClient for a user."""
    return _client_for


@pytest.fixture
def creator_client(creator_user):
    return _client_for(creator_user)


@pytest.fixture
def group_admin_client(group_admin):
    return _client_for(group_admin)


@pytest.fixture
def member_client(member_user):
    return _client_for(member_user)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)


@pytest.fixture
def outsider_client(outsider_user):
    return _client_for(outsider_user)

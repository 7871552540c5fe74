"""
Test configuration and fixtures for chat tests.

This module provides:
- Users (alice, bob, carol) and an outsider who belongs to nothing
- Conversation fixtures (direct and group)
- API client helpers for authenticated requests
- A clean in-memory channel layer per test

Usage:
    def test_example(direct_conversation, alice_client):
        response = alice_client.get(f"/api/v1/chat/conversations/{direct_conversation.id}/")
        assert response.status_code == 200
"""

import pytest
from channels.layers import channel_layers
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectConversationFactory, GroupConversationFactory


def _client_for(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


# =============================================================================
# Channel Layer
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_channel_layers():
    """Drop in-memory channel layer state so groups do not leak between tests."""
    yield
    channel_layers.backends.clear()


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(name="Alice", email="alice@example.com")


@pytest.fixture
def bob(db):
    return UserFactory(
        name="Bob",
        email="bob@example.com",
        avatar_url="https://cdn.example.com/bob.png",
    )


@pytest.fixture
def carol(db):
    return UserFactory(name="Carol", email="carol@example.com")


@pytest.fixture
def outsider(db):
    """A user who is not a member of any fixture conversation."""
    return UserFactory(name="Mallory", email="mallory@example.com")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def direct_conversation(alice, bob):
    """Direct conversation between alice and bob."""
    return DirectConversationFactory(user1=alice, user2=bob)


@pytest.fixture
def group_conversation(alice, bob, carol):
    """Group "Project Team" created by alice with bob and carol."""
    return GroupConversationFactory(
        created_by=alice,
        name="Project Team",
        members=[bob, carol],
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice_client(alice):
    return _client_for(alice)


@pytest.fixture
def bob_client(bob):
    return _client_for(bob)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)

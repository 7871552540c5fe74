"""
Tests for chat API views.

- Conversation directory: list, create, retrieve, read
- Message history and sending
- Error taxonomy: 401 / 403 / 400 / 500 bodies
"""

from unittest import mock

from django.db import DatabaseError
from rest_framework import status

from chat.models import Message
from chat.services import MessageService
from chat.tests.factories import MessageFactory

CONVERSATIONS_URL = "/api/v1/chat/conversations/"


def conversation_url(conversation_id):
    return f"{CONVERSATIONS_URL}{conversation_id}/"


def messages_url(conversation_id):
    return f"{CONVERSATIONS_URL}{conversation_id}/messages/"


# =============================================================================
# Conversations
# =============================================================================


class TestConversationList:
    """Tests for GET /api/v1/chat/conversations/."""

    def test_requires_authentication(self, api_client):
        response = api_client.get(CONVERSATIONS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "UNAUTHENTICATED"

    def test_lists_only_own_conversations(self, outsider_client, direct_conversation):
        response = outsider_client.get(CONVERSATIONS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []

    def test_display_name_is_per_viewer(self, alice_client, bob_client, direct_conversation):
        """
        Both sides list the same conversation under the other person's name.

        Why it matters: a direct conversation has no stored name.
        """
        alice_view = alice_client.get(CONVERSATIONS_URL).data
        bob_view = bob_client.get(CONVERSATIONS_URL).data

        assert alice_view[0]["id"] == bob_view[0]["id"] == direct_conversation.id
        assert alice_view[0]["display_name"] == "Bob"
        assert bob_view[0]["display_name"] == "Alice"


class TestConversationCreate:
    """Tests for POST /api/v1/chat/conversations/."""

    def test_create_direct(self, alice_client, alice, bob):
        response = alice_client.post(
            CONVERSATIONS_URL, {"participant_ids": [bob.id]}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["is_group"] is False
        assert response.data["display_name"] == "Bob"
        assert {m["user"]["id"] for m in response.data["members"]} == {alice.id, bob.id}

    def test_create_group(self, alice_client, bob, carol):
        response = alice_client.post(
            CONVERSATIONS_URL,
            {"participant_ids": [bob.id, carol.id], "is_group": True, "name": "Launch"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["display_name"] == "Launch"
        assert response.data["message_count"] == 0

    def test_unknown_participant_is_bad_request(self, alice_client):
        response = alice_client.post(
            CONVERSATIONS_URL, {"participant_ids": [999_999]}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_PARTICIPANTS"
        assert "participant_ids" in response.data["details"]

    def test_malformed_body_is_validation_error(self, alice_client):
        response = alice_client.post(
            CONVERSATIONS_URL, {"participant_ids": "bob"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert "participant_ids" in response.data["details"]


class TestConversationRetrieve:
    """Tests for GET /api/v1/chat/conversations/{id}/."""

    def test_member_can_view(self, bob_client, group_conversation):
        response = bob_client.get(conversation_url(group_conversation.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["display_name"] == "Project Team"

    def test_missing_looks_like_forbidden(self, outsider_client, direct_conversation):
        """
        A non-member gets the same 403 for a real conversation and for an
        id that does not exist.

        Why it matters: responses must not reveal which ids exist.
        """
        foreign = outsider_client.get(conversation_url(direct_conversation.id))
        missing = outsider_client.get(conversation_url(999_999))

        assert foreign.status_code == missing.status_code == status.HTTP_403_FORBIDDEN
        assert foreign.data == missing.data
        assert foreign.data["error_code"] == "FORBIDDEN"


class TestConversationRead:
    """Tests for POST /api/v1/chat/conversations/{id}/read/."""

    def test_acknowledges_messages(self, bob_client, direct_conversation, alice):
        MessageFactory(conversation=direct_conversation, sender=alice)

        response = bob_client.post(f"{conversation_url(direct_conversation.id)}read/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"status": "read", "acknowledged": 1}

    def test_non_member_forbidden(self, outsider_client, direct_conversation):
        response = outsider_client.post(f"{conversation_url(direct_conversation.id)}read/")

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Messages
# =============================================================================


class TestMessageList:
    """Tests for GET /api/v1/chat/conversations/{id}/messages/."""

    def test_full_history_by_default(self, bob_client, direct_conversation, alice):
        for text in ["one", "two", "three"]:
            MessageService.create_message(
                conversation_id=direct_conversation.id, sender=alice, content=text
            )

        response = bob_client.get(messages_url(direct_conversation.id))

        assert response.status_code == status.HTTP_200_OK
        assert [m["content"] for m in response.data] == ["one", "two", "three"]

    def test_cursor_pagination_on_request(self, bob_client, direct_conversation, alice):
        for text in ["one", "two", "three"]:
            MessageService.create_message(
                conversation_id=direct_conversation.id, sender=alice, content=text
            )

        first_page = bob_client.get(messages_url(direct_conversation.id), {"page_size": 2})

        assert first_page.status_code == status.HTTP_200_OK
        assert [m["content"] for m in first_page.data["results"]] == ["one", "two"]
        assert first_page.data["next"]

        second_page = bob_client.get(first_page.data["next"])
        assert [m["content"] for m in second_page.data["results"]] == ["three"]
        assert second_page.data["next"] is None

    def test_non_member_forbidden(self, outsider_client, direct_conversation):
        response = outsider_client.get(messages_url(direct_conversation.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "FORBIDDEN"

    def test_requires_authentication(self, api_client, direct_conversation):
        response = api_client.get(messages_url(direct_conversation.id))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestMessageCreate:
    """Tests for POST /api/v1/chat/conversations/{id}/messages/."""

    def test_send_and_see_in_directory(self, alice_client, bob_client, direct_conversation):
        """
        Alice sends a message; Bob's history and directory both reflect it.

        Why it matters: this is the core send/receive loop over HTTP.
        """
        response = alice_client.post(
            messages_url(direct_conversation.id), {"content": "  Hello Bob  "}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["content"] == "Hello Bob"
        assert response.data["sender"]["name"] == "Alice"

        history = bob_client.get(messages_url(direct_conversation.id)).data
        assert [m["id"] for m in history] == [response.data["id"]]

        directory = bob_client.get(CONVERSATIONS_URL).data
        assert directory[0]["last_message"] == "Hello Bob"
        assert directory[0]["last_message_at"] is not None

    def test_blank_content_rejected(self, alice_client, direct_conversation):
        response = alice_client.post(
            messages_url(direct_conversation.id), {"content": "   "}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "EMPTY_CONTENT"
        assert Message.objects.count() == 0

    def test_image_message(self, alice_client, direct_conversation):
        response = alice_client.post(
            messages_url(direct_conversation.id),
            {"message_type": "image", "file_url": "https://cdn.example.com/cat.png"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["file_url"] == "https://cdn.example.com/cat.png"

    def test_non_member_forbidden(self, outsider_client, direct_conversation):
        response = outsider_client.post(
            messages_url(direct_conversation.id), {"content": "hi"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Message.objects.count() == 0

    def test_missing_conversation_forbidden(self, alice_client):
        response = alice_client.post(messages_url(999_999), {"content": "hi"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_storage_failure_is_internal_error(self, alice_client, direct_conversation):
        """
        A storage failure while sending becomes a 500 with a generic body.

        Why it matters: database details never leak to clients, and nothing
        is half-written.
        """
        with mock.patch.object(
            MessageService,
            "_update_conversation_summary",
            side_effect=DatabaseError("disk full"),
        ):
            response = alice_client.post(
                messages_url(direct_conversation.id), {"content": "hi"}, format="json"
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {"error": "Internal server error", "error_code": "INTERNAL_FAILURE"}
        assert Message.objects.count() == 0

"""
Tests for authentication API views.

- Token obtain (simplejwt) with email/password
- Current user endpoint, including display field updates
- User directory search
"""

import pytest
from rest_framework import status

from authentication.tests.factories import UserFactory

TOKEN_URL = "/api/v1/auth/token/"
CURRENT_USER_URL = "/api/v1/auth/user/"
USERS_URL = "/api/v1/auth/users/"


class TestTokenObtain:
    """Tests for POST /api/v1/auth/token/."""

    def test_valid_credentials_return_token_pair(self, db, api_client):
        UserFactory(email="carol@example.com", password="Secret123!")

        response = api_client.post(
            TOKEN_URL,
            {"email": "carol@example.com", "password": "Secret123!"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data
        assert "refresh" in response.data

    def test_wrong_password_is_unauthenticated(self, db, api_client):
        UserFactory(email="carol@example.com", password="Secret123!")

        response = api_client.post(
            TOKEN_URL,
            {"email": "carol@example.com", "password": "wrong"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "UNAUTHENTICATED"


class TestCurrentUser:
    """Tests for GET /api/v1/auth/user/."""

    def test_returns_own_record(self, user_client, user):
        response = user_client.get(CURRENT_USER_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == user.id
        assert response.data["name"] == "Alice Johnson"

    def test_requires_authentication(self, db, api_client):
        response = api_client.get(CURRENT_USER_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "UNAUTHENTICATED"


class TestCurrentUserUpdate:
    """Tests for PUT/PATCH /api/v1/auth/user/."""

    def test_patch_trims_name(self, user_client, user):
        response = user_client.patch(CURRENT_USER_URL, {"name": "  Alice Smith  "}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Alice Smith"
        user.refresh_from_db()
        assert user.name == "Alice Smith"

    def test_patch_avatar_only_keeps_name(self, user_client, user):
        response = user_client.patch(
            CURRENT_USER_URL,
            {"avatar_url": "https://cdn.example.com/alice.png"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.avatar_url == "https://cdn.example.com/alice.png"
        assert user.name == "Alice Johnson"

    def test_null_avatar_clears_it(self, user_client, user):
        user.avatar_url = "https://cdn.example.com/old.png"
        user.save(update_fields=["avatar_url"])

        response = user_client.put(
            CURRENT_USER_URL, {"name": "Alice", "avatar_url": None}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.avatar_url == ""

    @pytest.mark.parametrize("name", ["A", "  A  ", "   "])
    def test_short_name_rejected(self, user_client, user, name):
        response = user_client.patch(CURRENT_USER_URL, {"name": name}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert "name" in response.data["details"]
        user.refresh_from_db()
        assert user.name == "Alice Johnson"

    def test_put_requires_name(self, user_client):
        response = user_client.put(
            CURRENT_USER_URL, {"avatar_url": "https://cdn.example.com/a.png"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "name" in response.data["details"]

    def test_email_is_not_writable(self, user_client, user):
        response = user_client.patch(
            CURRENT_USER_URL, {"name": "Alice", "email": "new@example.com"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.email == "alice@example.com"

    def test_requires_authentication(self, db, api_client):
        response = api_client.patch(CURRENT_USER_URL, {"name": "Nobody"}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestUserDirectory:
    """Tests for GET /api/v1/auth/users/."""

    def test_excludes_caller(self, user_client, user):
        """
        The caller never appears in their own participant picker.

        Why it matters: The creator joins a conversation implicitly.
        """
        other = UserFactory()

        response = user_client.get(USERS_URL)

        assert response.status_code == status.HTTP_200_OK
        ids = [u["id"] for u in response.data]
        assert other.id in ids
        assert user.id not in ids

    def test_excludes_inactive_users(self, user_client):
        inactive = UserFactory(is_active=False)

        response = user_client.get(USERS_URL)

        assert inactive.id not in [u["id"] for u in response.data]

    def test_search_matches_name_and_email(self, user_client):
        bob = UserFactory(name="Bob Stone", email="bob@example.com")
        dana = UserFactory(name="Dana", email="dstone@example.com")
        UserFactory(name="Eve", email="eve@example.com")

        response = user_client.get(USERS_URL, {"search": "stone"})

        ids = {u["id"] for u in response.data}
        assert ids == {bob.id, dana.id}

    def test_does_not_expose_email(self, user_client):
        UserFactory()

        response = user_client.get(USERS_URL)

        assert "email" not in response.data[0]

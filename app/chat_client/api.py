"""
HTTP client for the messaging API.

ChatAPIClient wraps an httpx.AsyncClient authenticated with a JWT access
token. Every method returns decoded JSON on success and raises one of the
core.exceptions classes otherwise:

    401         -> AuthenticationRequiredError
    403         -> PermissionDeniedError
    400         -> ValidationError
    404         -> NotFoundError
    5xx         -> StorageFailureError
    transport   -> StorageFailureError

The error_code and details from the response body are carried over.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.exceptions import (
    AuthenticationRequiredError,
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    StorageFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

STATUS_ERRORS: dict[int, type[BaseApplicationError]] = {
    400: ValidationError,
    401: AuthenticationRequiredError,
    403: PermissionDeniedError,
    404: NotFoundError,
}


def error_from_response(response: httpx.Response) -> BaseApplicationError:
    """Build the exception matching an error response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or response.reason_phrase or "Request failed"
    error_class = STATUS_ERRORS.get(response.status_code)
    if error_class is None:
        if response.status_code >= 500:
            error_class = StorageFailureError
        else:
            error_class = ValidationError

    return error_class(
        message,
        error_code=body.get("error_code"),
        details=body.get("details"),
    )


class ChatAPIClient:
    """
    Async client for the conversation and message endpoints.

    Args:
        base_url: Server root, e.g. "https://chat.example.com"
        token: JWT access token sent as a Bearer credential
        transport: Optional httpx transport (tests pass httpx.MockTransport)
        timeout: Per-request timeout in seconds
    """

    api_prefix = "/api/v1/chat"

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> ChatAPIClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, f"{self.api_prefix}{path}", **kwargs)
        except httpx.TransportError as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise StorageFailureError("Messaging server unreachable") from exc

        if response.is_error:
            raise error_from_response(response)
        return response.json()

    # =========================================================================
    # Conversations
    # =========================================================================

    async def list_conversations(self) -> list[dict]:
        """Conversations the caller belongs to, most recent activity first."""
        return await self._request("GET", "/conversations/")

    async def create_conversation(
        self,
        participant_ids: list[int],
        is_group: bool = False,
        name: str | None = None,
    ) -> dict:
        payload: dict[str, Any] = {"participant_ids": participant_ids, "is_group": is_group}
        if name is not None:
            payload["name"] = name
        return await self._request("POST", "/conversations/", json=payload)

    async def acknowledge(self, conversation_id: int) -> int:
        """Mark the conversation read; returns how many messages were newly acknowledged."""
        data = await self._request("POST", f"/conversations/{conversation_id}/read/")
        return data["acknowledged"]

    # =========================================================================
    # Messages
    # =========================================================================

    async def list_messages(self, conversation_id: int) -> list[dict]:
        """Full message history, oldest first."""
        return await self._request("GET", f"/conversations/{conversation_id}/messages/")

    async def create_message(
        self,
        conversation_id: int,
        content: str,
        message_type: str = "text",
        file_url: str | None = None,
    ) -> dict:
        payload: dict[str, Any] = {"content": content, "message_type": message_type}
        if file_url is not None:
            payload["file_url"] = file_url
        return await self._request(
            "POST", f"/conversations/{conversation_id}/messages/", json=payload
        )

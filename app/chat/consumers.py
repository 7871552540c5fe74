"""
WebSocket consumers for the chat application.

This module implements the subscription stream for a conversation: members
connect, receive every newly committed message as it happens, and may send
messages over the same socket.

Consumers:
    ConversationConsumer: Handles WebSocket connections for one conversation

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"].

Close Codes:
    4001: Not authenticated
    4003: Not a member (also used when the conversation does not exist)

Channel Groups:
    Each conversation has a channel group named "conversation_{id}"
    (see chat.events.conversation_group_name).

Message Types (from client):
    - message: {"type": "message", "content": "...", "message_type": "text",
                "file_url": null, "client_id": "optional-correlation-id"}

Message Types (to client):
    - message.created: New message committed in the conversation
    - message.sent: Acknowledgement to the sender of a socket-sent message
    - error: Rejected client frame
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.db import DatabaseError

from chat.authorization import ChatAuthorizationService
from chat.constants import REALTIME_CONFIG
from chat.events import conversation_group_name, serialize_message
from chat.models import MessageType
from chat.services import MessageService
from core.exceptions import StorageFailureError, ValidationError

logger = logging.getLogger(__name__)

# Client frame fields that must be strings (or absent)
MESSAGE_FIELDS = ("content", "message_type", "file_url")


class ConversationConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer streaming one conversation's new messages.

    Attributes:
        conversation_id: ID of the connected conversation
        group_name: Channel layer group name for the conversation
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.conversation_id: int | None = None
        self.group_name: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated
            2. User is a member of the conversation

        On success, joins the channel group and accepts the connection.
        """
        self.conversation_id = self.scope["url_route"]["kwargs"]["conversation_id"]
        user = self.scope.get("user")

        if user is None or not user.is_authenticated:
            logger.warning(
                f"Rejected unauthenticated connection to conversation {self.conversation_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        if not await self._is_member(user):
            logger.warning(
                f"User {user.id} is not a member of conversation {self.conversation_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)
            return

        self.group_name = conversation_group_name(self.conversation_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)

        # Echo the "jwt" subprotocol back when the token arrived that way
        subprotocol = "jwt" if "jwt" in self.scope.get("subprotocols", []) else None
        await self.accept(subprotocol=subprotocol)
        logger.info(f"User {user.id} subscribed to conversation {self.conversation_id}")

    async def disconnect(self, close_code):
        """Leave the channel group if one was joined."""
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(
                f"User {self.scope['user'].id} unsubscribed from "
                f"conversation {self.conversation_id} ({close_code})"
            )

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket frames.

        Expected message format:
            {"type": "message", "content": "Hello!"}
            {"type": "message", "message_type": "image", "file_url": "https://..."}
        """
        frame_type = content.get("type") if isinstance(content, dict) else None

        if frame_type == "message":
            await self._handle_message(content)
        else:
            await self.send_json(
                {
                    "type": "error",
                    "error": f"Unknown message type: {frame_type}",
                    "error_code": "UNKNOWN_TYPE",
                }
            )

    async def _handle_message(self, content):
        """
        Create a message via MessageService.

        The new message reaches every subscriber (the sender included) as a
        message.created event after commit; the sender additionally gets a
        message.sent acknowledgement carrying its client_id.
        """
        invalid = [
            name
            for name in MESSAGE_FIELDS
            if content.get(name) is not None and not isinstance(content.get(name), str)
        ]
        if invalid:
            error = ValidationError(
                "Message fields must be strings",
                details={name: ["Must be a string."] for name in invalid},
            )
            await self.send_json(
                {"type": "error", **error.to_dict(), "client_id": content.get("client_id")}
            )
            return

        result = await self._create_message(
            content=content.get("content"),
            message_type=content.get("message_type") or MessageType.TEXT,
            file_url=content.get("file_url"),
        )

        if not result["success"]:
            await self.send_json(
                {
                    "type": "error",
                    "error": result["error"],
                    "error_code": result["error_code"],
                    "client_id": content.get("client_id"),
                }
            )
            return

        await self.send_json(
            {
                "type": "message.sent",
                "client_id": content.get("client_id"),
                "message": result["data"],
            }
        )

    async def message_created(self, event):
        """Forward message.created events from the channel layer."""
        await self.send_json(
            {
                "type": "message.created",
                "message": event["message"],
            }
        )

    @database_sync_to_async
    def _is_member(self, user) -> bool:
        return ChatAuthorizationService.is_member(user.id, self.conversation_id)

    @database_sync_to_async
    def _create_message(self, content, message_type: str, file_url) -> dict:
        """
        Send a message using MessageService.

        Returns dict with success status and either data or error.
        """
        try:
            result = MessageService.create_message(
                conversation_id=self.conversation_id,
                sender=self.scope["user"],
                content=content,
                message_type=message_type,
                file_url=file_url,
            )
        except DatabaseError:
            logger.exception(
                f"Storage failure sending to conversation {self.conversation_id}"
            )
            failure = StorageFailureError("Internal server error")
            return {
                "success": False,
                "error": failure.message,
                "error_code": failure.error_code,
            }

        if result.success:
            return {"success": True, "data": serialize_message(result.data)}

        return {
            "success": False,
            "error": result.error,
            "error_code": result.error_code,
        }

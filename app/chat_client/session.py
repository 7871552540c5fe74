"""
Client view state for one user: the conversation list and the open thread.

ChatSession runs one PollingLoop for the conversation directory for its
whole lifetime, and one for the messages of the selected conversation.
Changing the selection stops the previous message loop (and its in-flight
fetches) before the next one starts.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from chat_client.api import ChatAPIClient
from chat_client.polling import PollingLoop
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ChatSession:
    """
    Keeps conversation and message views current for one signed-in user.

    Args:
        api: Authenticated ChatAPIClient
        on_conversations: Called with the new conversation list when it changes
        on_messages: Called with the selected conversation's messages when they change
        interval: Polling period in seconds
    """

    def __init__(
        self,
        api: ChatAPIClient,
        on_conversations: Callable[[list[dict]], Any],
        on_messages: Callable[[list[dict]], Any],
        interval: float = 1.0,
    ):
        self.api = api
        self.interval = interval
        self._on_messages = on_messages
        self.conversations = PollingLoop(
            api.list_conversations,
            on_conversations,
            interval=interval,
            name="conversations",
        )
        self.messages: PollingLoop | None = None
        self.selected_id: int | None = None

    async def start(self) -> None:
        """Load the conversation list in the foreground, then keep it polled."""
        await self.conversations.refresh()
        self.conversations.start()

    async def select(self, conversation_id: int) -> list[dict]:
        """
        Open a conversation.

        The previous message loop is stopped first. The first load is a
        foreground fetch, so a forbidden or missing conversation raises here.
        If another select() or deselect() runs while the first load is
        pending, this selection is abandoned and its loop never starts.
        """
        await self.deselect()

        loop = PollingLoop(
            functools.partial(self.api.list_messages, conversation_id),
            self._on_messages,
            interval=self.interval,
            name=f"messages:{conversation_id}",
        )
        self.messages = loop
        self.selected_id = conversation_id
        try:
            messages = await loop.refresh()
        except Exception:
            if self.messages is loop:
                self.messages = None
                self.selected_id = None
            raise

        if self.messages is not loop:
            logger.debug(f"Selection of conversation {conversation_id} superseded")
            return messages

        loop.start()
        logger.debug(f"Selected conversation {conversation_id}")
        return messages

    async def deselect(self) -> None:
        loop, self.messages = self.messages, None
        self.selected_id = None
        if loop is not None:
            await loop.stop()

    async def send_message(
        self,
        content: str,
        message_type: str = "text",
        file_url: str | None = None,
    ) -> dict:
        """
        Send to the selected conversation, then refresh both views.

        Raises:
            ValidationError: No conversation is selected, or the server rejected it
        """
        if self.selected_id is None or self.messages is None:
            raise ValidationError("No conversation selected", error_code="NO_SELECTION")

        message = await self.api.create_message(
            self.selected_id, content, message_type=message_type, file_url=file_url
        )
        await self.refresh()
        return message

    async def refresh(self) -> None:
        """Foreground refresh of both views; errors propagate."""
        await self.conversations.refresh()
        if self.messages is not None:
            await self.messages.refresh()

    async def close(self) -> None:
        """Stop all polling. The API client is left open for its owner to close."""
        await self.deselect()
        await self.conversations.stop()

"""
Client-side delivery for the messaging API.

Keeps a client's view of conversations and messages approximately current
by polling the HTTP API, and reconciles each fetch into local state only
when something changed.

Modules:
    api: ChatAPIClient, an httpx client mapping API errors to core.exceptions
    polling: PollingLoop, a cancellable fixed-interval fetch loop
    session: ChatSession, wiring one loop for the directory and one for the
        selected conversation

Usage:
    async with ChatAPIClient(base_url, token) as api:
        session = ChatSession(api, on_conversations=render_list, on_messages=render_thread)
        await session.start()
        await session.select(conversation_id)
        await session.send_message("Hello")
        await session.close()
"""

from .api import ChatAPIClient
from .polling import LoopState, PollingLoop
from .session import ChatSession

__all__ = [
    "ChatAPIClient",
    "ChatSession",
    "LoopState",
    "PollingLoop",
]

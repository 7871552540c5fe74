"""
Realtime fan-out of chat events over the Channels layer.

Every conversation has a channel group; WebSocket subscribers of that
conversation join it in consumers.ConversationConsumer. Events are published
after the writing transaction commits, so subscribers never see a message
that was rolled back.

Event format (channel layer):
    {"type": "message.created", "message": {...MessageSerializer data...}}

Publishing is best-effort. Polling clients reconcile from the message list
regardless, so a failed publish is logged and dropped.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from rest_framework.renderers import JSONRenderer

from chat.constants import REALTIME_CONFIG

if TYPE_CHECKING:
    from chat.models import Message

logger = logging.getLogger(__name__)


def conversation_group_name(conversation_id) -> str:
    """Channel layer group for a conversation's subscribers."""
    return f"{REALTIME_CONFIG.GROUP_NAME_PREFIX}_{conversation_id}"


def serialize_message(message: Message) -> dict:
    """Serialize a message into plain JSON types for the channel layer."""
    from chat.serializers import MessageSerializer

    return json.loads(JSONRenderer().render(MessageSerializer(message).data))


def broadcast_message_created(message: Message) -> None:
    """
    Publish a message.created event to the message's conversation group.

    Call from transaction.on_commit so only committed messages go out.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            conversation_group_name(message.conversation_id),
            {
                "type": "message.created",
                "message": serialize_message(message),
            },
        )
    except Exception:
        logger.exception(
            f"Failed to publish message {message.id} "
            f"to conversation {message.conversation_id} subscribers"
        )

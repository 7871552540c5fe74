"""
Constants and configuration for the chat module.

Import example:
    from chat.constants import MESSAGE_CONFIG, CONVERSATION_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits (characters, after trimming)
    MAX_CONTENT_LENGTH: Final[int] = 10000
    MAX_FILE_URL_LENGTH: Final[int] = 500

    # Conversation preview text for messages that carry only a file
    FILE_PREVIEW_LABELS: Final[dict] = {
        "image": "Sent an image",
        "file": "Sent a file",
    }


# =============================================================================
# Conversation Configuration
# =============================================================================


class CONVERSATION_CONFIG:
    """Configuration for conversation creation and display."""

    MAX_NAME_LENGTH: Final[int] = 100
    MAX_GROUP_PARTICIPANTS: Final[int] = 256

    # Fallback display names
    GROUP_FALLBACK_NAME: Final[str] = "Group Chat"
    UNKNOWN_USER_NAME: Final[str] = "Unknown User"


# =============================================================================
# Pagination Configuration
# =============================================================================


class PAGINATION_CONFIG:
    """Configuration for cursor pagination of message history."""

    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for the WebSocket subscription stream."""

    GROUP_NAME_PREFIX: Final[str] = "conversation"

    # Application close codes (4000-4999 are free for application use)
    CLOSE_UNAUTHENTICATED: Final[int] = 4001
    CLOSE_FORBIDDEN: Final[int] = 4003

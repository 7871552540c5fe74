"""
Service-level authorization for chat operations.

This module is the single membership gate for chat features. It is distinct
from DRF permission classes (in permissions.py), which call into it for
HTTP-level authorization, and from the WebSocket consumer, which calls it
before joining a conversation's channel group.

Key Components:
    ChatAuthorizationService: Stateless service class with authorization methods
    require_conversation_member: Decorator for conversation-level access

Error Codes:
    NOT_PARTICIPANT: User is not a member of the conversation (or it does not exist)
    INVALID_REQUEST: Missing required parameters (user or ID)

Existence:
    A conversation that does not exist and a conversation the user is not a
    member of produce the same answer, so callers cannot discover which ids exist.

Usage:
    if ChatAuthorizationService.is_member(user.id, conversation_id):
        # proceed with operation

    class MessageService(BaseService):
        @classmethod
        @require_conversation_member()
        def list_messages(cls, conversation_id, user):
            ...
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from django.db import DatabaseError

from core.services import ServiceResult

if TYPE_CHECKING:
    from chat.models import Membership


T = TypeVar("T")

logger = logging.getLogger(__name__)


class ChatAuthorizationService:
    """
    Stateless service providing membership checks for chat operations.

    Results are not cached; every call reads the membership table.
    """

    @classmethod
    def is_member(cls, user_id, conversation_id) -> bool:
        """
        Check if the user holds a membership in the conversation.

        Fails closed: a storage error during the lookup is logged and
        treated as "not a member".

        Args:
            user_id: ID of the user to check
            conversation_id: ID of the conversation

        Returns:
            True if a Membership row exists, False otherwise (including when
            the conversation does not exist)
        """
        from chat.models import Membership

        if user_id is None or conversation_id is None:
            return False

        try:
            return Membership.objects.filter(
                conversation_id=conversation_id,
                user_id=user_id,
            ).exists()
        except DatabaseError:
            logger.exception(
                f"Membership lookup failed for user {user_id} "
                f"in conversation {conversation_id}; denying access"
            )
            return False

    @classmethod
    def get_user_conversation_ids(cls, user_id) -> list[int]:
        """
        Get IDs of all conversations the user is a member of.

        Returns:
            List of conversation IDs (empty list if no memberships)
        """
        from chat.models import Membership

        return list(
            Membership.objects.filter(user_id=user_id).values_list(
                "conversation_id", flat=True
            )
        )

    @classmethod
    def get_membership(cls, user_id, conversation_id) -> Optional["Membership"]:
        """
        Get the user's membership record in a conversation.

        Returns:
            Membership if the user is a member, None otherwise
        """
        from chat.models import Membership

        return Membership.objects.filter(
            conversation_id=conversation_id,
            user_id=user_id,
        ).first()


def require_conversation_member(
    conversation_id_param: str = "conversation_id",
    user_param: str = "user",
) -> Callable:
    """
    Decorator that requires the user to be a member of the conversation.

    Extracts user and conversation_id from method kwargs and checks
    membership before allowing the method to execute.

    Returns:
        ServiceResult.failure with NOT_PARTICIPANT if check fails
        ServiceResult.failure with INVALID_REQUEST if required params missing

    Example:
        class MessageService(BaseService):
            @classmethod
            @require_conversation_member()
            def acknowledge(cls, conversation_id, user):
                # Only called if user is a member
                ...
    """

    def decorator(
        func: Callable[..., ServiceResult[T]],
    ) -> Callable[..., ServiceResult[T]]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> ServiceResult[T]:
            user = kwargs.get(user_param)
            conversation_id = kwargs.get(conversation_id_param)

            if user is None or conversation_id is None:
                return ServiceResult.failure(
                    "Missing required parameters",
                    error_code="INVALID_REQUEST",
                )

            if not ChatAuthorizationService.is_member(user.id, conversation_id):
                return ServiceResult.failure(
                    "User is not a participant in this conversation",
                    error_code="NOT_PARTICIPANT",
                )

            return func(*args, **kwargs)

        return wrapper

    return decorator

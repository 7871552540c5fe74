"""
Permission classes for chat API.

This module provides DRF permission classes for the chat system:
- IsConversationMember: User holds a membership in the conversation in the URL

Design Decisions:
    - Membership is checked through ChatAuthorizationService.is_member so
      HTTP, WebSocket and service callers share one gate
    - The check runs in has_permission, before any lookup, so a missing
      conversation and a foreign one are both rejected with 403
    - Composed after IsAuthenticated, which turns anonymous requests into 401
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from chat.authorization import ChatAuthorizationService

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsConversationMember(permissions.BasePermission):
    """
    Allows access only to members of the conversation named in the URL.

    The conversation id is read from the ``conversation_pk`` URL kwarg
    (nested routes) or ``pk`` (detail routes). Views without either kwarg
    (list, create) are not restricted by this class.
    """

    message = "You are not a participant in this conversation."

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not request.user.is_authenticated:
            return False

        conversation_id = view.kwargs.get("conversation_pk") or view.kwargs.get("pk")
        if conversation_id is None:
            return True

        return ChatAuthorizationService.is_member(request.user.id, conversation_id)

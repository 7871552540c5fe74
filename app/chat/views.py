"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Conversation directory and read acknowledgement
- MessageViewSet: Message history and sending (nested under conversation)

URL Structure:
    /api/v1/chat/conversations/                  GET, POST
    /api/v1/chat/conversations/{id}/             GET
    /api/v1/chat/conversations/{id}/read/        POST
    /api/v1/chat/conversations/{id}/messages/    GET, POST

Design Decisions:
    - All operations go through the service layer, with request.user passed
      in explicitly as the acting user
    - Membership is enforced by IsConversationMember before any lookup and
      again inside the services
    - A conversation that does not exist is reported exactly like one the
      user cannot see (403)
    - Service failures leave as {"error", "error_code"[, "details"]}
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.models import Message
from chat.pagination import MessageCursorPagination
from chat.permissions import IsConversationMember
from chat.serializers import (
    ConversationCreateSerializer,
    ConversationSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from chat.services import ConversationService, MessageService
from core.exceptions import PermissionDeniedError
from core.services import ServiceResult

FORBIDDEN_ERROR_CODES = {"NOT_PARTICIPANT"}


def failure_response(result: ServiceResult) -> Response:
    """Translate a failed ServiceResult into an API error response."""
    if result.error_code in FORBIDDEN_ERROR_CODES:
        error = PermissionDeniedError(IsConversationMember.message)
        return Response(error.to_dict(), status=error.status_code)
    return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        description=(
            "Conversations the authenticated user belongs to, most recent "
            "activity first. Conversations without messages come last."
        ),
        tags=["Chat - Conversations"],
    ),
    create=extend_schema(
        operation_id="create_conversation",
        summary="Create conversation",
        request=ConversationCreateSerializer,
        responses={
            201: ConversationSerializer,
            400: OpenApiResponse(description="Invalid participants or name"),
            401: OpenApiResponse(description="Not authenticated"),
        },
        tags=["Chat - Conversations"],
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        responses={
            200: ConversationSerializer,
            403: OpenApiResponse(description="Not a member, or no such conversation"),
        },
        tags=["Chat - Conversations"],
    ),
)
class ConversationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for conversation operations.

    list:
        Get all conversations for the current user, with per-viewer display
        name and avatar, members, and last message preview.

    create:
        Create a new conversation (direct or group). Direct conversations
        take exactly one other participant.

    retrieve:
        Get one conversation the current user is a member of.

    read:
        Acknowledge every message from other members.
    """

    permission_classes = [IsAuthenticated, IsConversationMember]
    lookup_value_regex = r"\d+"
    serializer_class = ConversationSerializer
    pagination_class = None

    def get_queryset(self):
        return ConversationService.list_conversations(self.request.user)

    def get_serializer_class(self):
        if self.action == "create":
            return ConversationCreateSerializer
        return ConversationSerializer

    def list(self, request):
        serializer = ConversationSerializer(
            self.get_queryset(), many=True, context={"request": request}
        )
        return Response(serializer.data)

    def create(self, request):
        """Create a conversation (direct or group)."""
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        result = ConversationService.create_conversation(
            creator=request.user,
            participant_ids=data["participant_ids"],
            is_group=data["is_group"],
            name=data.get("name"),
        )
        if not result.success:
            return failure_response(result)

        # Reload through the directory queryset for members and counts
        result = ConversationService.get_conversation(
            conversation_id=result.data.id, user=request.user
        )
        output_serializer = ConversationSerializer(result.data, context={"request": request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        result = ConversationService.get_conversation(conversation_id=pk, user=request.user)
        if not result.success:
            return failure_response(result)

        serializer = ConversationSerializer(result.data, context={"request": request})
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        request=None,
        responses={
            200: OpenApiResponse(description="Number of messages newly acknowledged"),
            403: OpenApiResponse(description="Not a member, or no such conversation"),
        },
        tags=["Chat - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        """Mark conversation as read."""
        result = MessageService.acknowledge(conversation_id=pk, user=request.user)
        if not result.success:
            return failure_response(result)

        return Response({"status": "read", "acknowledged": result.data})


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description=(
            "Full message history, oldest first. Pass cursor or page_size "
            "to receive a cursor-paginated envelope instead."
        ),
        parameters=[
            OpenApiParameter("cursor", OpenApiTypes.STR, description="Pagination cursor"),
            OpenApiParameter(
                "page_size", OpenApiTypes.INT, description="Messages per page (max 100)"
            ),
        ],
        tags=["Chat - Messages"],
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Empty, oversized or malformed message"),
            403: OpenApiResponse(description="Not a member, or no such conversation"),
        },
        tags=["Chat - Messages"],
    ),
)
class MessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for message operations within a conversation.

    list:
        Get all messages in the conversation, oldest first. Cursor
        pagination is applied only when requested.

    create:
        Send a message to the conversation. The conversation's last message
        summary is updated in the same transaction.
    """

    permission_classes = [IsAuthenticated, IsConversationMember]
    serializer_class = MessageSerializer
    pagination_class = MessageCursorPagination
    queryset = Message.objects.none()

    def get_serializer_class(self):
        if self.action == "create":
            return MessageCreateSerializer
        return MessageSerializer

    def list(self, request, conversation_pk=None):
        result = MessageService.list_messages(
            conversation_id=conversation_pk, user=request.user
        )
        if not result.success:
            return failure_response(result)

        page = self.paginate_queryset(result.data)
        if page is not None:
            serializer = MessageSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = MessageSerializer(result.data, many=True)
        return Response(serializer.data)

    def create(self, request, conversation_pk=None):
        """Send a message."""
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        result = MessageService.create_message(
            conversation_id=conversation_pk,
            sender=request.user,
            content=data.get("content"),
            message_type=data["message_type"],
            file_url=data.get("file_url"),
        )
        if not result.success:
            return failure_response(result)

        output_serializer = MessageSerializer(result.data)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

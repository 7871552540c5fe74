"""
Serializers for chat API.

This module provides serializers for the chat system:
- Message serializers (read, create, preview)
- Membership serializer (read)
- Conversation serializers (list/detail, create)

Serializer Hierarchy:
    MessageSerializer: Message with sender summary and read receipts
    MessageCreateSerializer: Send new message
    MessagePreviewSerializer: Minimal message for list preview

    MembershipSerializer: Member with user summary and role

    ConversationSerializer: Conversation with per-viewer display fields
    ConversationCreateSerializer: Direct/group conversation creation

Design Decisions:
    - Read and write serializers are separate for clarity
    - Write serializers only check shape; business rules (membership,
      content, participants) live in the services and come back as
      error codes
    - Display name and avatar are computed for the requesting user
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.models import (
    Conversation,
    Membership,
    Message,
    MessageReadReceipt,
    MessageType,
)


def _viewer_id(serializer: serializers.Serializer):
    """ID of the user the data is being rendered for, if any."""
    if "viewer_id" in serializer.context:
        return serializer.context["viewer_id"]
    request = serializer.context.get("request")
    if request and request.user.is_authenticated:
        return request.user.id
    return None


# =============================================================================
# Message Serializers
# =============================================================================


class ReadReceiptSerializer(serializers.ModelSerializer):
    """One entry of a message's read_by list."""

    user_id = serializers.IntegerField(source="user.id", read_only=True)
    user_name = serializers.CharField(source="user.name", read_only=True)

    class Meta:
        model = MessageReadReceipt
        fields = ["user_id", "user_name", "read_at"]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    """
    Full message serializer for message lists.

    Includes the sender summary (id, name, avatar_url) and the set of users
    who have acknowledged the message.
    """

    sender = UserSummarySerializer(read_only=True)
    conversation_id = serializers.IntegerField(read_only=True)
    read_by = ReadReceiptSerializer(source="read_receipts", many=True, read_only=True)
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender",
            "message_type",
            "content",
            "file_url",
            "read_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_file_url(self, obj: Message) -> str | None:
        return obj.file_url or None


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending messages.

    Blank or missing content is passed through; MessageService decides
    whether the combination of content, type and file_url is acceptable.
    """

    content = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
        help_text="Message text (trimmed, max 10,000 characters)",
    )
    message_type = serializers.ChoiceField(
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="text, image or file",
    )
    file_url = serializers.URLField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=500,
        help_text="Reference to an uploaded image or file",
    )


class MessagePreviewSerializer(serializers.ModelSerializer):
    """
    Minimal message serializer for conversation list preview.
    """

    sender_name = serializers.SerializerMethodField(
        help_text="Display name of the message sender"
    )
    content = serializers.CharField(
        source="preview_text",
        read_only=True,
        help_text="Message text, or a label for file-only messages",
    )

    class Meta:
        model = Message
        fields = [
            "id",
            "sender_name",
            "content",
            "message_type",
            "created_at",
        ]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str:
        return obj.sender.get_full_name()


# =============================================================================
# Membership Serializers
# =============================================================================


class MembershipSerializer(serializers.ModelSerializer):
    """Read serializer for conversation members."""

    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Membership
        fields = ["user", "role", "joined_at"]
        read_only_fields = fields


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationSerializer(serializers.ModelSerializer):
    """
    Serializer for conversation list and detail views.

    Includes computed fields:
    - display_name: Group name or the other member's name, per viewer
    - display_avatar: Group avatar or the other member's avatar, per viewer
    - members: Everyone in the conversation with their role
    - latest_message: Preview of most recent message
    - message_count: Number of messages in the conversation

    Expects the queryset from ConversationService, which prefetches
    memberships and the latest message and annotates message_count.
    """

    display_name = serializers.SerializerMethodField(
        help_text="Display name for the conversation as seen by the requester"
    )
    display_avatar = serializers.SerializerMethodField(
        help_text="Avatar for the conversation as seen by the requester"
    )
    members = MembershipSerializer(source="memberships", many=True, read_only=True)
    latest_message = serializers.SerializerMethodField(
        help_text="Most recent message preview"
    )
    message_count = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            "id",
            "is_group",
            "name",
            "display_name",
            "display_avatar",
            "members",
            "last_message",
            "last_message_at",
            "latest_message",
            "message_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_display_name(self, obj: Conversation) -> str:
        return obj.get_display_name(_viewer_id(self))

    def get_display_avatar(self, obj: Conversation) -> str | None:
        return obj.get_display_avatar(_viewer_id(self))

    def get_latest_message(self, obj: Conversation) -> dict | None:
        latest = getattr(obj, "latest_messages", None)
        if latest is None:
            latest = list(obj.messages.select_related("sender").order_by("-created_at", "-id")[:1])
        if latest:
            return MessagePreviewSerializer(latest[0]).data
        return None

    def get_message_count(self, obj: Conversation) -> int:
        count = getattr(obj, "message_count", None)
        if count is None:
            count = obj.messages.count()
        return count


class ConversationCreateSerializer(serializers.Serializer):
    """
    Serializer for creating conversations.

    Supports both direct and group conversations. Participant rules
    (existence, count, creator exclusion) are enforced by
    ConversationService.create_conversation.
    """

    participant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
        help_text="IDs of the users to include besides the creator",
    )
    is_group = serializers.BooleanField(
        default=False,
        help_text="Create a group conversation",
    )
    name = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
        help_text="Name for group conversations (ignored for direct)",
    )

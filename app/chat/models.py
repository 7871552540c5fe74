"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct conversations between exactly two users
- Group conversations with an optional name and avatar

Models:
    Conversation: Container for messages, with a denormalized last-message summary
    Membership: A user's membership in a conversation, with role
    Message: Individual immutable message within a conversation
    MessageReadReceipt: Per-user acknowledgement of a message

Design Decisions:
    - Membership is fixed at creation; nothing adds or removes members later
    - Conversation.last_message/last_message_at change only as a side effect
      of message creation, in the same transaction as the message insert
    - Messages are totally ordered per conversation by (created_at, id)
    - Display name and avatar depend on who is looking, so they are computed
      per viewer and never stored
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from chat.constants import CONVERSATION_CONFIG, MESSAGE_CONFIG
from core.models import BaseModel


class MembershipRole(models.TextChoices):
    """
    Role within a conversation.

    ADMIN: Creator of a group conversation
    MEMBER: Everyone else, including both sides of a direct conversation
    """

    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: Plain text message
    IMAGE: Image reference in file_url, optional caption in content
    FILE: File reference in file_url, optional caption in content
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"


class Conversation(BaseModel):
    """
    A conversation between two or more users.

    Conversation Types:
        Direct (is_group=False): Exactly 2 members, both MEMBER role.
            Name is stored empty and ignored by readers.
        Group (is_group=True): Creator is ADMIN, invitees are MEMBER.

    Fields:
        is_group: Whether this is a group conversation
        name: Group name (empty for direct conversations)
        avatar_url: Group avatar reference (read-only here)
        created_by: User who created the conversation
        last_message: Preview text of the most recent message
        last_message_at: Timestamp of the most recent message (for sorting)

    Relationships:
        memberships: Membership records for this conversation
        messages: Message records for this conversation
    """

    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group conversation",
    )

    name = models.CharField(
        max_length=CONVERSATION_CONFIG.MAX_NAME_LENGTH,
        blank=True,
        default="",
        help_text="Name for group conversations (empty for direct)",
    )

    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar reference for group conversations",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_conversations",
        help_text="User who created this conversation",
    )

    last_message = models.TextField(
        blank=True,
        default="",
        help_text="Preview text of the most recent message",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-last_message_at", "-created_at"]
        indexes = [
            models.Index(
                fields=["-last_message_at", "-created_at"],
                name="chat_conv_activity_idx",
            ),
        ]

    def __str__(self) -> str:
        if not self.is_group:
            return f"Direct({self.pk})"
        if self.name:
            return f"Group: {self.name}"
        return f"Group({self.pk})"

    def _other_member(self, viewer_id):
        # Iterates the (usually prefetched) memberships instead of querying.
        for membership in self.memberships.all():
            if membership.user_id != viewer_id:
                return membership
        return None

    def get_display_name(self, viewer_id) -> str:
        """
        Name of this conversation as seen by ``viewer_id``.

        Groups show their stored name or "Group Chat". Direct conversations
        show the other member's name or "Unknown User".
        """
        if self.is_group:
            return self.name or CONVERSATION_CONFIG.GROUP_FALLBACK_NAME

        other = self._other_member(viewer_id)
        if other is None or not other.user.name:
            return CONVERSATION_CONFIG.UNKNOWN_USER_NAME
        return other.user.name

    def get_display_avatar(self, viewer_id) -> str | None:
        """Avatar as seen by ``viewer_id``: group avatar or the other member's."""
        if self.is_group:
            return self.avatar_url or None

        other = self._other_member(viewer_id)
        if other is None:
            return None
        return other.user.avatar_url or None


class Membership(models.Model):
    """
    A user's membership in a conversation.

    Memberships are created together with their conversation and never
    change afterwards. Holding a Membership is what the authorization gate
    checks before any read or write on the conversation.

    Fields:
        conversation: Conversation this membership belongs to
        user: Member
        role: ADMIN or MEMBER
        joined_at: When the membership was created

    Constraints:
        - UniqueConstraint(conversation, user): at most one membership per pair
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Conversation this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="conversation_memberships",
        help_text="User who is a member of the conversation",
    )

    role = models.CharField(
        max_length=10,
        choices=MembershipRole.choices,
        default=MembershipRole.MEMBER,
        help_text="Role in the conversation",
    )

    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user joined this conversation",
    )

    class Meta:
        db_table = "chat_membership"
        ordering = ["joined_at", "id"]
        indexes = [
            models.Index(
                fields=["user", "conversation"],
                name="chat_member_user_conv_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_membership",
            ),
        ]

    def __str__(self) -> str:
        return f"Membership: {self.user_id} in {self.conversation_id} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == MembershipRole.ADMIN


class Message(BaseModel):
    """
    A message within a conversation.

    Ordering:
        Messages are ordered by (created_at, id). created_at is assigned by
        MessageService and is never earlier than the conversation's
        last_message_at at insert time, so it does not go backwards within
        a conversation.

    Fields:
        conversation: Conversation this message belongs to
        sender: Member who sent the message
        message_type: text, image or file
        content: Trimmed text (may be empty for image/file messages)
        file_url: File reference for image/file messages
        created_at: Server-assigned send time
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Type of message (text, image or file)",
    )

    content = models.TextField(
        blank=True,
        default="",
        help_text="Message text, trimmed of surrounding whitespace",
    )

    file_url = models.URLField(
        max_length=MESSAGE_CONFIG.MAX_FILE_URL_LENGTH,
        blank=True,
        default="",
        help_text="Reference to an uploaded image or file",
    )

    # Overrides BaseModel.created_at so the service can assign it explicitly
    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Timestamp when this message was sent",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a conversation (history and cursor pagination)
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_cursor_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.preview_text
        if len(preview) > 50:
            preview = preview[:50] + "..."
        return f"User {self.sender_id}: {preview}"

    @property
    def preview_text(self) -> str:
        """Text used as the conversation's last_message summary."""
        if self.content:
            return self.content
        return MESSAGE_CONFIG.FILE_PREVIEW_LABELS.get(self.message_type, "")


class MessageReadReceipt(models.Model):
    """
    Records that a user has read a message.

    Fields:
        message: Message that was read
        user: Reader
        read_at: When the read was acknowledged

    Constraints:
        - UniqueConstraint(message, user): acknowledging twice is a no-op
    """

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="read_receipts",
        help_text="Message that was read",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="message_read_receipts",
        help_text="User who read the message",
    )

    read_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user acknowledged the message",
    )

    class Meta:
        db_table = "chat_message_read_receipt"
        ordering = ["read_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user"],
                name="unique_message_read_receipt",
            ),
        ]

    def __str__(self) -> str:
        return f"Read: message {self.message_id} by {self.user_id}"

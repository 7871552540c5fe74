"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations, memberships and messages.

Services:
    ConversationService: Conversation directory (create, list, retrieve)
    MessageService: Message store operations (list, create, acknowledge)

Design Principles:
    - Services are stateless (use class methods)
    - The acting user is always passed in explicitly
    - Expected failures return ServiceResult.failure()
    - Unexpected failures (storage errors) raise and roll back
    - A message insert and its conversation summary update share one transaction

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.create_conversation(
        creator=user,
        participant_ids=[bob.id, carol.id],
        is_group=True,
        name="Project Team",
    )

    result = MessageService.create_message(
        conversation_id=result.data.id,
        sender=user,
        content="Hello everyone!",
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, F, Prefetch, QuerySet
from django.utils import timezone

from chat.authorization import require_conversation_member
from chat.constants import CONVERSATION_CONFIG, MESSAGE_CONFIG
from chat.events import broadcast_message_created
from chat.models import (
    Conversation,
    Membership,
    MembershipRole,
    Message,
    MessageReadReceipt,
    MessageType,
)
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from authentication.models import User

logger = logging.getLogger(__name__)


class ConversationService(BaseService):
    """
    Service for the conversation directory.

    Methods:
        create_conversation: Create a direct or group conversation with its members
        list_conversations: Conversations the user belongs to, most recent first
        get_conversation: A single conversation, for members only
    """

    @classmethod
    def _base_queryset(cls) -> QuerySet[Conversation]:
        """Conversations with members, latest message and message count loaded."""
        return (
            Conversation.objects.annotate(message_count=Count("messages", distinct=True))
            .prefetch_related(
                Prefetch(
                    "memberships",
                    queryset=Membership.objects.select_related("user"),
                ),
                Prefetch(
                    "messages",
                    queryset=Message.objects.select_related("sender").order_by(
                        "-created_at", "-id"
                    )[:1],
                    to_attr="latest_messages",
                ),
            )
        )

    @classmethod
    def list_conversations(cls, user: User) -> QuerySet[Conversation]:
        """
        List the conversations the user is a member of.

        Ordering:
            last_message_at descending with never-messaged conversations last,
            then created_at descending, then id descending as a tiebreaker.

        Returns:
            QuerySet of Conversation with memberships (and their users)
            prefetched, a ``message_count`` annotation and a
            ``latest_messages`` list holding at most the newest message.
        """
        conversation_ids = Membership.objects.filter(user=user).values(
            "conversation_id"
        )
        return (
            cls._base_queryset()
            .filter(id__in=conversation_ids)
            .order_by(
                F("last_message_at").desc(nulls_last=True),
                "-created_at",
                "-id",
            )
        )

    @classmethod
    @require_conversation_member()
    def get_conversation(
        cls,
        conversation_id: int,
        user: User,
    ) -> ServiceResult[Conversation]:
        """
        Retrieve a single conversation for one of its members.

        Error codes:
            NOT_PARTICIPANT: User is not a member (or the conversation does not exist)
        """
        conversation = cls._base_queryset().get(pk=conversation_id)
        return ServiceResult.success(conversation)

    @classmethod
    def create_conversation(
        cls,
        creator: User,
        participant_ids: list,
        is_group: bool,
        name: str | None = None,
    ) -> ServiceResult[Conversation]:
        """
        Create a conversation and one membership per member.

        The creator is always a member and is removed from participant_ids
        if listed. Duplicate ids collapse to one membership. Every referenced
        user must exist and be active; otherwise nothing is created.

        Roles:
            Group: creator is ADMIN, invitees are MEMBER
            Direct: both sides are MEMBER

        Args:
            creator: User creating the conversation
            participant_ids: IDs of the other members
            is_group: Whether to create a group conversation
            name: Group name (ignored for direct conversations)

        Returns:
            ServiceResult with the new Conversation

        Error codes:
            PARTICIPANTS_REQUIRED: No other participant given
            DIRECT_REQUIRES_ONE: Direct conversation needs exactly one other user
            TOO_MANY_PARTICIPANTS: Group exceeds the member limit
            NAME_TOO_LONG: Group name exceeds the length limit
            INVALID_PARTICIPANTS: Unknown or inactive user referenced
        """
        other_ids = []
        for participant_id in participant_ids or []:
            if participant_id == creator.id or participant_id in other_ids:
                continue
            other_ids.append(participant_id)

        if not other_ids:
            return ServiceResult.failure(
                "At least one other participant is required",
                error_code="PARTICIPANTS_REQUIRED",
            )

        if not is_group and len(other_ids) != 1:
            return ServiceResult.failure(
                "A direct conversation has exactly one other participant",
                error_code="DIRECT_REQUIRES_ONE",
            )

        if is_group and len(other_ids) + 1 > CONVERSATION_CONFIG.MAX_GROUP_PARTICIPANTS:
            return ServiceResult.failure(
                f"A group can have at most "
                f"{CONVERSATION_CONFIG.MAX_GROUP_PARTICIPANTS} participants",
                error_code="TOO_MANY_PARTICIPANTS",
            )

        name = (name or "").strip() if is_group else ""
        if len(name) > CONVERSATION_CONFIG.MAX_NAME_LENGTH:
            return ServiceResult.failure(
                f"Conversation name cannot exceed "
                f"{CONVERSATION_CONFIG.MAX_NAME_LENGTH} characters",
                error_code="NAME_TOO_LONG",
            )

        users = list(
            get_user_model().objects.filter(id__in=other_ids, is_active=True)
        )
        if len(users) != len(other_ids):
            found = {u.id for u in users}
            missing = [pid for pid in other_ids if pid not in found]
            return ServiceResult.failure(
                "One or more participants do not exist",
                error_code="INVALID_PARTICIPANTS",
                errors={"participant_ids": [f"Unknown user: {pid}" for pid in missing]},
            )

        creator_role = MembershipRole.ADMIN if is_group else MembershipRole.MEMBER

        with cls.atomic():
            conversation = Conversation.objects.create(
                is_group=is_group,
                name=name,
                created_by=creator,
            )
            Membership.objects.bulk_create(
                [Membership(conversation=conversation, user=creator, role=creator_role)]
                + [
                    Membership(
                        conversation=conversation,
                        user=user,
                        role=MembershipRole.MEMBER,
                    )
                    for user in users
                ]
            )

        cls.get_logger().info(
            f"Created {'group' if is_group else 'direct'} conversation "
            f"{conversation.id} by user {creator.id} "
            f"with {1 + len(users)} members"
        )

        return ServiceResult.success(conversation)


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        list_messages: Full ordered history of a conversation
        create_message: Validate and append a message atomically
        acknowledge: Record read receipts for a user
    """

    @classmethod
    @require_conversation_member()
    def list_messages(
        cls,
        conversation_id: int,
        user: User,
    ) -> ServiceResult[QuerySet[Message]]:
        """
        List every message in a conversation, oldest first.

        Ordering is (created_at, id) ascending, so repeated reads with no
        intervening writes return the same sequence.

        Error codes:
            NOT_PARTICIPANT: User is not a member (or the conversation does not exist)
        """
        messages = (
            Message.objects.filter(conversation_id=conversation_id)
            .select_related("sender")
            .prefetch_related(
                Prefetch(
                    "read_receipts",
                    queryset=MessageReadReceipt.objects.select_related("user"),
                )
            )
            .order_by("created_at", "id")
        )
        return ServiceResult.success(messages)

    @classmethod
    def _validate_content(
        cls,
        content: str | None,
        message_type: str,
        file_url: str | None,
    ) -> tuple[str, str, ServiceResult | None]:
        """Return (trimmed content, file_url, failure or None)."""
        content = (content or "").strip()
        file_url = (file_url or "").strip()

        if message_type not in MessageType.values:
            return content, file_url, ServiceResult.failure(
                f"Unsupported message type '{message_type}'",
                error_code="INVALID_TYPE",
            )

        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return content, file_url, ServiceResult.failure(
                f"Message content cannot exceed "
                f"{MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="CONTENT_TOO_LONG",
            )

        if message_type == MessageType.TEXT:
            if not content:
                return content, file_url, ServiceResult.failure(
                    "Message content cannot be empty",
                    error_code="EMPTY_CONTENT",
                )
        elif not file_url:
            return content, file_url, ServiceResult.failure(
                f"A {message_type} message requires a file_url",
                error_code="FILE_REQUIRED",
            )

        return content, file_url, None

    @classmethod
    def _update_conversation_summary(
        cls,
        conversation: Conversation,
        message: Message,
    ) -> None:
        """
        Internal: point the conversation summary at ``message``.

        Must be called inside the transaction that inserted the message.
        """
        conversation.last_message = message.preview_text
        conversation.last_message_at = message.created_at
        conversation.save(update_fields=["last_message", "last_message_at", "updated_at"])

    @classmethod
    @require_conversation_member(user_param="sender")
    def create_message(
        cls,
        conversation_id: int,
        sender: User,
        content: str | None,
        message_type: str = MessageType.TEXT,
        file_url: str | None = None,
    ) -> ServiceResult[Message]:
        """
        Append a message to a conversation.

        Text messages need non-blank content. Image and file messages need a
        file_url and may have empty content; their conversation preview then
        reads "Sent an image" / "Sent a file".

        The message insert and the conversation's last_message/last_message_at
        update commit together or not at all. The conversation row is locked
        for the duration, and the message timestamp is never earlier than the
        conversation's current last_message_at. Subscribers are notified only
        after commit.

        Args:
            conversation_id: Target conversation
            sender: Member sending the message (keyword argument)
            content: Message text, trimmed before storage
            message_type: text, image or file
            file_url: Reference to an uploaded file

        Returns:
            ServiceResult with the new Message

        Error codes:
            NOT_PARTICIPANT: Sender is not a member (or the conversation does not exist)
            INVALID_TYPE: Unknown message type
            CONTENT_TOO_LONG: Content exceeds the length limit
            EMPTY_CONTENT: Text message content is blank
            FILE_REQUIRED: Image/file message without file_url

        Raises:
            django.db.DatabaseError: Storage failure; nothing was written
        """
        content, file_url, failure = cls._validate_content(content, message_type, file_url)
        if failure is not None:
            return failure

        with cls.atomic():
            conversation = Conversation.objects.select_for_update().get(
                pk=conversation_id
            )

            sent_at = timezone.now()
            if conversation.last_message_at and conversation.last_message_at > sent_at:
                sent_at = conversation.last_message_at

            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                message_type=message_type,
                content=content,
                file_url=file_url,
                created_at=sent_at,
            )
            cls._update_conversation_summary(conversation, message)

            transaction.on_commit(lambda: broadcast_message_created(message))

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} "
            f"to conversation {conversation.id}"
        )

        return ServiceResult.success(message)

    @classmethod
    @require_conversation_member()
    def acknowledge(
        cls,
        conversation_id: int,
        user: User,
    ) -> ServiceResult[int]:
        """
        Mark every message from other members as read by ``user``.

        Idempotent: messages already acknowledged are skipped.

        Returns:
            ServiceResult with the number of newly recorded receipts

        Error codes:
            NOT_PARTICIPANT: User is not a member (or the conversation does not exist)
        """
        unread_ids = list(
            Message.objects.filter(conversation_id=conversation_id)
            .exclude(sender=user)
            .exclude(read_receipts__user=user)
            .values_list("id", flat=True)
        )

        if unread_ids:
            read_at = timezone.now()
            with cls.atomic():
                MessageReadReceipt.objects.bulk_create(
                    [
                        MessageReadReceipt(message_id=message_id, user=user, read_at=read_at)
                        for message_id in unread_ids
                    ],
                    ignore_conflicts=True,
                )

        cls.get_logger().debug(
            f"User {user.id} acknowledged {len(unread_ids)} messages "
            f"in conversation {conversation_id}"
        )

        return ServiceResult.success(len(unread_ids))

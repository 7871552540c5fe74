"""
Factory Boy factories for chat models.

Provides test data generation for:
- Conversation: Direct and group conversations
- Membership: User membership in conversations
- Message: Text and file messages
- MessageReadReceipt: Read acknowledgements

Usage:
    from chat.tests.factories import (
        DirectConversationFactory,
        GroupConversationFactory,
        MembershipFactory,
        MessageFactory,
    )

    # Group conversation with its creator as admin
    conversation = GroupConversationFactory(members=[bob, carol])

    # Direct conversation between two users
    conversation = DirectConversationFactory(user1=alice, user2=bob)

    # Message inserted directly (does not touch the conversation summary;
    # use MessageService.create_message for that)
    message = MessageFactory(conversation=conversation, sender=alice)
"""

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.models import (
    Conversation,
    Membership,
    MembershipRole,
    Message,
    MessageReadReceipt,
    MessageType,
)


class ConversationFactory(factory.django.DjangoModelFactory):
    """
    Base factory for Conversation model.

    Creates a group conversation without any members. Prefer
    GroupConversationFactory or DirectConversationFactory in tests.
    """

    class Meta:
        model = Conversation

    is_group = True
    name = factory.Sequence(lambda n: f"Group Chat {n}")
    created_by = factory.SubFactory(UserFactory)
    last_message = ""
    last_message_at = None


class GroupConversationFactory(ConversationFactory):
    """
    Factory for group conversations with members.

    The creator becomes ADMIN; every user passed as ``members`` becomes MEMBER.

    Examples:
        conversation = GroupConversationFactory()
        conversation = GroupConversationFactory(created_by=alice, members=[bob])
    """

    class Meta:
        skip_postgeneration_save = True

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        if not create:
            return

        MembershipFactory(
            conversation=self,
            user=self.created_by,
            role=MembershipRole.ADMIN,
        )
        for user in extracted or []:
            MembershipFactory(conversation=self, user=user, role=MembershipRole.MEMBER)


class DirectConversationFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct (1:1) conversations.

    Examples:
        # Direct conversation between two new users
        conversation = DirectConversationFactory()

        # Direct conversation between specific users
        conversation = DirectConversationFactory(user1=alice, user2=bob)
    """

    class Meta:
        model = Conversation

    is_group = False
    name = ""
    last_message = ""
    last_message_at = None

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create the conversation and both memberships."""
        user1 = kwargs.pop("user1", None) or UserFactory()
        user2 = kwargs.pop("user2", None) or UserFactory()
        kwargs.setdefault("created_by", user1)

        conversation = super()._create(model_class, *args, **kwargs)

        MembershipFactory(conversation=conversation, user=user1)
        MembershipFactory(conversation=conversation, user=user2)
        return conversation


class MembershipFactory(factory.django.DjangoModelFactory):
    """Factory for Membership model."""

    class Meta:
        model = Membership

    conversation = factory.SubFactory(ConversationFactory)
    user = factory.SubFactory(UserFactory)
    role = MembershipRole.MEMBER


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for Message model.

    Examples:
        message = MessageFactory(conversation=conversation, sender=user)
        message = MessageFactory(
            message_type=MessageType.IMAGE,
            content="",
            file_url="https://cdn.example.com/cat.png",
        )
    """

    class Meta:
        model = Message

    conversation = factory.SubFactory(GroupConversationFactory)
    sender = factory.LazyAttribute(lambda o: o.conversation.created_by)
    message_type = MessageType.TEXT
    content = factory.Faker("sentence")
    file_url = ""
    created_at = factory.LazyFunction(timezone.now)


class MessageReadReceiptFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = MessageReadReceipt

    message = factory.SubFactory(MessageFactory)
    user = factory.SubFactory(UserFactory)
    read_at = factory.LazyFunction(timezone.now)

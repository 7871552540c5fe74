"""
Chat app: conversations, membership and messages.

This app handles:
- Direct and group conversations with their membership
- Message history and atomic message creation
- Read acknowledgements
- WebSocket subscription stream for new messages

Related apps:
    - authentication: User model for participants and senders

WebSocket Support:
    Uses Django Channels. See consumers.py for the handler and
    routing.py for URL patterns.

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.create_conversation(
        creator=user,
        participant_ids=[other_user.id],
        is_group=False,
    )

    result = MessageService.create_message(
        conversation_id=result.data.id,
        sender=user,
        content="Hello!",
    )
"""

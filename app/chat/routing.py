"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/<conversation_id>/ - Subscribe to a conversation's new messages

Authentication:
    JWT access token as query parameter (?token=<jwt>) or as the
    subprotocol pair ["jwt", <jwt>]. See middleware.JWTAuthMiddleware.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/<int:conversation_id>/",
        consumers.ConversationConsumer.as_asgi(),
    ),
]

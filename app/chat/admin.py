"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation browsing with members inline
- Message moderation
- Read receipt inspection
"""

from django.contrib import admin

from chat.models import Conversation, Membership, Message, MessageReadReceipt


class MembershipInline(admin.TabularInline):
    """Inline display of members in conversation admin."""

    model = Membership
    extra = 0
    readonly_fields = ["joined_at"]
    raw_id_fields = ["user"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "is_group",
        "name",
        "created_by",
        "last_message_at",
        "created_at",
    ]
    list_filter = ["is_group", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at", "last_message", "last_message_at"]
    raw_id_fields = ["created_by"]
    inlines = [MembershipInline]
    ordering = ["-created_at"]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ["id", "conversation", "user", "role", "joined_at"]
    list_filter = ["role", "joined_at"]
    search_fields = ["user__email", "user__name", "conversation__name"]
    raw_id_fields = ["conversation", "user"]
    ordering = ["-joined_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "message_type",
        "content_preview",
        "created_at",
    ]
    list_filter = ["message_type", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated preview text for list display."""
        preview = obj.preview_text
        if len(preview) > 50:
            return preview[:50] + "..."
        return preview


@admin.register(MessageReadReceipt)
class MessageReadReceiptAdmin(admin.ModelAdmin):
    list_display = ["id", "message", "user", "read_at"]
    raw_id_fields = ["message", "user"]
    ordering = ["-read_at"]

"""
Serializers for authentication models.

Related files:
    - models.py: User model
    - views.py: User directory view
    - chat/serializers.py: Reuses UserSummarySerializer for message senders
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the current user (read operations)."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "full_name",
            "avatar_url",
            "date_joined",
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public view of another user.

    Used in the user directory and nested inside messages and conversation
    members. Email is deliberately left out.
    """

    class Meta:
        model = User
        fields = ["id", "name", "avatar_url"]
        read_only_fields = fields


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating the current user's display fields.

    Only name and avatar_url are writable. The name is trimmed and must keep
    at least NAME_MIN_LENGTH characters; a null or blank avatar_url clears
    the avatar.
    """

    NAME_MIN_LENGTH = 2

    name = serializers.CharField(
        min_length=NAME_MIN_LENGTH,
        max_length=150,
        error_messages={
            "min_length": f"Name must be at least {NAME_MIN_LENGTH} characters long.",
            "blank": f"Name must be at least {NAME_MIN_LENGTH} characters long.",
        },
    )
    avatar_url = serializers.URLField(
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
    )

    class Meta:
        model = User
        fields = ["name", "avatar_url"]

    def validate_avatar_url(self, value):
        return value or ""

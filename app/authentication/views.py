"""
Authentication views.

- CurrentUserView: the authenticated principal's own record, and updates
  to its display fields (name, avatar_url)
- UserDirectoryView: searchable list of other active users, used when
  choosing participants for a new conversation

Token endpoints (obtain/refresh) are simplejwt's own views, wired in urls.py.
"""

import logging

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.models import User
from authentication.serializers import (
    UserSerializer,
    UserSummarySerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)

DIRECTORY_MAX_RESULTS = 50


class CurrentUserView(APIView):
    """
    GET /api/v1/auth/user/
    PUT/PATCH /api/v1/auth/user/

    Return or update the authenticated user's own record. Only the display
    fields are writable; PUT requires a name, PATCH accepts any subset.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="auth_user_retrieve",
        summary="Get current user",
        tags=["Auth - User"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        operation_id="auth_user_update",
        summary="Update current user",
        tags=["Auth - User"],
        request=UserUpdateSerializer,
        responses={200: UserSerializer},
    )
    def put(self, request):
        return self._update_user(request, partial=False)

    @extend_schema(
        operation_id="auth_user_partial_update",
        summary="Partially update current user",
        tags=["Auth - User"],
        request=UserUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request):
        return self._update_user(request, partial=True)

    def _update_user(self, request, partial=False):
        serializer = UserUpdateSerializer(request.user, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User {user.id} updated display fields {sorted(serializer.validated_data)}")
        return Response(UserSerializer(user).data)


@extend_schema(
    operation_id="auth_users_list",
    summary="Search users",
    description=(
        "List active users other than the caller, optionally filtered by a "
        "case-insensitive match on name or email."
    ),
    tags=["Auth - User"],
    parameters=[
        OpenApiParameter(
            name="search",
            type=str,
            required=False,
            description="Substring to match against name or email",
        ),
    ],
)
class UserDirectoryView(generics.ListAPIView):
    """
    GET /api/v1/auth/users/?search=<text>

    The caller is always excluded since a conversation's creator joins it
    implicitly. Results are capped at DIRECTORY_MAX_RESULTS.
    """

    serializer_class = UserSummarySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        queryset = User.objects.filter(is_active=True).exclude(id=self.request.user.id)

        search = self.request.query_params.get("search", "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(email__icontains=search)
            )

        return queryset.order_by("name", "email")[:DIRECTORY_MAX_RESULTS]

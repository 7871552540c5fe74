"""
Pagination classes for chat API.

This module provides opt-in cursor pagination for message history:
- MessageCursorPagination: Oldest first, keyed on (created_at, id)

Without a ``cursor`` or ``page_size`` query parameter the endpoint returns
the full ordered history as a plain list. Passing either switches to the
paginated envelope ({"next", "previous", "results"}).

Cursor-based pagination advantages:
- Stable results during concurrent inserts
- No offset calculation needed
"""

from rest_framework.pagination import CursorPagination

from chat.constants import PAGINATION_CONFIG


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message lists.

    Orders messages oldest-first for natural chat reading experience.
    Uses (created_at, id) for stable cursor position.

    Default (when paginating): 50 messages per page
    Maximum: 100 messages per page

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of messages (optional override)
    """

    page_size = PAGINATION_CONFIG.DEFAULT_PAGE_SIZE
    max_page_size = PAGINATION_CONFIG.MAX_PAGE_SIZE
    page_size_query_param = "page_size"
    ordering = ("created_at", "id")
    cursor_query_param = "cursor"

    def paginate_queryset(self, queryset, request, view=None):
        params = request.query_params
        if self.cursor_query_param not in params and self.page_size_query_param not in params:
            # Full list
            return None
        return super().paginate_queryset(queryset, request, view)

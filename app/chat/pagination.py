"""
Pagination classes for chat API.

- ConversationPagination: Page-number pagination for conversation lists

Message lists are not paginated here: MessageLog.page() does newest-first
keyset pagination on (created_at, id) and returns its own opaque cursor.

Query parameters:
    page: 1-based page number
    per_page: Conversations per page (default 20, max 100)
"""

from rest_framework.pagination import PageNumberPagination

from chat.constants import CONVERSATION_CONFIG


class ConversationPagination(PageNumberPagination):
    """
    Page-number pagination for conversation lists.

    Ordering comes from ConversationDirectory.list_for_user (most recent
    activity first).
    """

    page_size = CONVERSATION_CONFIG.DEFAULT_PAGE_SIZE
    max_page_size = CONVERSATION_CONFIG.MAX_PAGE_SIZE
    page_size_query_param = "per_page"

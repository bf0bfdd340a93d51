"""
URL configuration for the messaging backend.

URL Structure:
    /                                          - ReDoc API documentation
    /admin/                                    - Django admin interface
    /health/                                   - Health check endpoint
    /schema/                                   - OpenAPI schema (YAML)
    /api/v1/auth/token/                        - Obtain JWT pair
    /api/v1/auth/token/refresh/                - Refresh access token
    /api/v1/users/search/?q=                   - Find users to message
    /api/v1/conversations/                     - Conversation list / create group
    /api/v1/conversations/direct/              - Start or reuse a direct conversation
    /api/v1/conversations/{id}/                - Conversation detail/update/delete
    /api/v1/conversations/{id}/read/           - Mark conversation as read
    /api/v1/conversations/{id}/leave/          - Leave a group
    /api/v1/conversations/{id}/mute/           - Mute or unmute for the caller
    /api/v1/conversations/{id}/participants/   - Participant list/add
    /api/v1/conversations/{id}/participants/{user_id}/ - Change role / remove
    /api/v1/conversations/{id}/messages/       - Message page / send
    /api/v1/conversations/{id}/messages/{pk}/  - Edit message

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (JWT) and user lookup
    path("", include("authentication.urls")),
    # Conversations, participants and messages
    path("", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Messaging Admin"
admin.site.site_title = "Messaging Admin Portal"
admin.site.index_title = "Conversations and users"

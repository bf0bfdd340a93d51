"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/token/            - Obtain access/refresh token pair
    /api/v1/auth/token/refresh/    - Exchange refresh token for access token
    /api/v1/auth/profile/          - Caller's profile (GET/PATCH)
    /api/v1/users/search/          - User search (?q=)
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from authentication.views import ProfileView, UserSearchView

app_name = "authentication"

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/profile/", ProfileView.as_view(), name="profile"),
    path("users/search/", UserSearchView.as_view(), name="user-search"),
]

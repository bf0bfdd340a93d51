"""
Authentication views.

This module provides API views for:
- Profile management of the caller's display data
- User search, used by clients to pick someone to message

Token endpoints (obtain/refresh) come from djangorestframework-simplejwt
and are routed in urls.py.

Related files:
    - serializers.py: Request/response serialization
    - directory.py: ProfileUserDirectory used for search
    - urls.py: URL routing
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.directory import ProfileUserDirectory
from authentication.models import Profile
from authentication.serializers import (
    ProfileSerializer,
    ProfileUpdateSerializer,
    UserSearchQuerySerializer,
    UserSummarySerializer,
)

USER_SEARCH_LIMIT = 20


class ProfileView(APIView):
    """
    API view for the caller's profile.

    GET: Retrieve current user's profile
    PATCH: Update username, names or avatar URL

    URL: /api/v1/auth/profile/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user's profile",
        tags=["Auth - Profile"],
        responses={200: ProfileSerializer},
    )
    def get(self, request):
        profile, _ = Profile.objects.get_or_create(user=request.user)
        return Response(ProfileSerializer(profile).data)

    @extend_schema(
        summary="Partially update profile",
        tags=["Auth - Profile"],
        request=ProfileUpdateSerializer,
        responses={200: ProfileSerializer},
    )
    def patch(self, request):
        profile, _ = Profile.objects.get_or_create(user=request.user)
        serializer = ProfileUpdateSerializer(
            profile,
            data=request.data,
            partial=True,
            context={"request": request, "user": request.user},
        )
        serializer.is_valid(raise_exception=True)
        updated_profile = serializer.save()

        return Response(ProfileSerializer(updated_profile).data)


class UserSearchView(APIView):
    """
    Search active users by name, username or email.

    GET /api/v1/users/search/?q=<2-50 chars>

    The caller is never included in the results. At most 20 users are
    returned.
    """

    permission_classes = [IsAuthenticated]
    user_directory = ProfileUserDirectory()

    @extend_schema(
        summary="Search users",
        tags=["Users"],
        parameters=[
            OpenApiParameter(
                name="q",
                type=str,
                location=OpenApiParameter.QUERY,
                required=True,
                description="Search text (2-50 characters)",
            ),
        ],
        responses={200: UserSummarySerializer(many=True)},
    )
    def get(self, request):
        query = UserSearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        results = self.user_directory.search(
            query.validated_data["q"],
            exclude_user_id=request.user.id,
            limit=USER_SEARCH_LIMIT,
        )
        return Response({"users": UserSummarySerializer(results, many=True).data})

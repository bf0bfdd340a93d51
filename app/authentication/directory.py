"""
User directory backed by the User and Profile tables.

ProfileUserDirectory is the default core.protocols.UserDirectory. The chat
app resolves display names and avatars through it and never queries
Profile directly.

Usage:
    from authentication.directory import ProfileUserDirectory

    directory = ProfileUserDirectory()
    summary = directory.get_summary(user_id)
    matches = directory.search("ali", exclude_user_id=request.user.id)
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from django.db.models import Q

from authentication.models import Profile, User
from core.protocols import UserDirectoryError, UserSummary

logger = logging.getLogger(__name__)


def summarize(user: User) -> UserSummary:
    """Build a UserSummary from a user with its profile loaded."""
    try:
        profile = user.profile
    except Profile.DoesNotExist:
        profile = None

    return UserSummary(
        id=user.pk,
        name=user.get_full_name(),
        username=profile.username if profile else "",
        avatar=(profile.avatar or None) if profile else None,
        email=user.email,
    )


class ProfileUserDirectory:
    """UserDirectory implementation over authentication.User/Profile."""

    def get_summary(self, user_id: int) -> UserSummary | None:
        try:
            user = User.objects.select_related("profile").filter(pk=user_id).first()
        except DatabaseError as exc:
            raise UserDirectoryError(
                "User directory lookup failed",
                details={"user_id": user_id},
            ) from exc

        if user is None:
            return None
        return summarize(user)

    def search(
        self,
        query: str,
        exclude_user_id: int | None = None,
        limit: int = 20,
    ) -> list[UserSummary]:
        query = query.strip()
        if not query:
            return []

        users = (
            User.objects.select_related("profile")
            .filter(is_active=True)
            .filter(
                Q(profile__username__icontains=query)
                | Q(profile__first_name__icontains=query)
                | Q(profile__last_name__icontains=query)
                | Q(email__icontains=query)
            )
            .order_by("profile__username", "id")
        )
        if exclude_user_id is not None:
            users = users.exclude(pk=exclude_user_id)

        try:
            results = [summarize(user) for user in users[:limit]]
        except DatabaseError as exc:
            raise UserDirectoryError("User search failed") from exc

        logger.debug(f"User search {query!r} returned {len(results)} result(s)")
        return results

"""
Protocol definitions for collaborators outside the messaging core.

Protocols define contracts that services depend on, enabling:
- Duck typing with static type checking
- Dependency inversion (depend on abstractions, not concretions)
- Easy substitution with fakes in tests

Available Protocols:
    UserDirectory: Identity and profile lookups (names, avatars, search)

Usage:
    from core.protocols import UserDirectory, UserSummary

    def display_name(directory: UserDirectory, user_id: int) -> str:
        summary = directory.get_summary(user_id)
        return summary.name if summary else "Unknown User"

    class StaticDirectory:
        def get_summary(self, user_id): ...
        def search(self, query, exclude_user_id=None, limit=20): ...

    # StaticDirectory is a valid UserDirectory
    # even without explicit inheritance (duck typing)
    directory: UserDirectory = StaticDirectory()

Note:
    - Protocols are primarily for type checking
    - @runtime_checkable allows isinstance() checks
    - The default implementation lives in authentication.directory
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from core.exceptions import ExternalServiceError


@dataclass(frozen=True)
class UserSummary:
    """Display data for one user, as seen by other users."""

    id: int
    name: str
    username: str = ""
    avatar: str | None = None
    email: str = ""


class UserDirectoryError(ExternalServiceError):
    """Raised when the user/profile directory cannot answer a lookup."""

    default_error_code: str = "USER_DIRECTORY_UNAVAILABLE"


@runtime_checkable
class UserDirectory(Protocol):
    """
    Protocol for the user/profile directory.

    Implementations raise UserDirectoryError when the backing store is
    unavailable. A user that simply does not exist is reported as None.
    """

    def get_summary(self, user_id: int) -> UserSummary | None:
        """
        Look up display data for a user.

        Args:
            user_id: Primary key of the user

        Returns:
            UserSummary, or None when no such user exists
        """
        ...

    def search(
        self,
        query: str,
        exclude_user_id: int | None = None,
        limit: int = 20,
    ) -> list[UserSummary]:
        """
        Find active users whose name, username or email matches query.

        Args:
            query: Case-insensitive substring to match
            exclude_user_id: User to leave out (usually the caller)
            limit: Maximum number of results
        """
        ...

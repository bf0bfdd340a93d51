"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A stable error kind that clients can branch on

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (kind "invalid", 400)
    ├── NotFoundError - Resource not found (kind "not_found", 404)
    ├── PermissionDeniedError - Authorization failures (kind "permission_denied", 403)
    ├── ConflictError - State conflicts such as duplicates (kind "conflict", 409)
    └── ExternalServiceError - Collaborator failures (kind "unavailable", 503)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Message content is required")

    # Raise with error code for client handling
    raise NotFoundError("Conversation not found", error_code="CONVERSATION_NOT_FOUND")

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    These exceptions are for domain/business logic errors. They are rendered
    by core.handlers.api_exception_handler, which DRF uses for every view.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        kind: Stable error category shared by every error of this class
        status_code: HTTP status used when the error crosses the API boundary

    Example:
        try:
            ...
        except NotFoundError as e:
            logger.warning(f"Lookup failed: {e.error_code}")
            return Response(e.to_dict(), status=e.status_code)
    """

    default_error_code: str = "APPLICATION_ERROR"
    kind: str = "error"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Conversation not found",
                "error_code": "CONVERSATION_NOT_FOUND",
                "kind": "not_found",
                "details": {"conversation_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
            "kind": self.kind,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Missing or blank required values (message content, group name)
    - Values outside allowed bounds (content length, attachment count)
    - Malformed opaque tokens (pagination cursors)

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    kind: str = "invalid"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Also used when the caller is not allowed to know the resource exists,
    e.g. a conversation the caller is not a member of.
    """

    default_error_code: str = "NOT_FOUND"
    kind: str = "not_found"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller lacks permission for an operation.

    Use for:
    - Role checks (only admins may add members)
    - Ownership checks (only the sender may edit a message)
    - Structural rules (the creator cannot leave, direct membership is fixed)

    Note:
        For authentication failures (missing/invalid token), DRF raises
        NotAuthenticated/AuthenticationFailed. Use this for authorization.
    """

    default_error_code: str = "PERMISSION_DENIED"
    kind: str = "permission_denied"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Example:
        raise ConflictError(
            "User is already a participant",
            error_code="ALREADY_PARTICIPANT",
            details={"user_id": user.id},
        )
    """

    default_error_code: str = "CONFLICT"
    kind: str = "conflict"
    status_code: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a collaborator outside this service fails.

    Callers that can degrade gracefully (placeholder names, missing avatars)
    catch this and continue; anything else surfaces as 503.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    kind: str = "unavailable"
    status_code: int = 503

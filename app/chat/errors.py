"""
Error codes returned by chat services and their API error kinds.

Chat services return ServiceResult.failure(message, error_code=...). Views
turn failures into core.exceptions instances with raise_for_failure(), and
core.handlers renders them with the matching HTTP status and kind.

Usage:
    result = MessageLog.append(conversation, request.user, content)
    raise_for_failure(result)
    message = result.data
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

if TYPE_CHECKING:
    from core.services import ServiceResult


class ErrorCode:
    """Stable machine-readable codes for chat failures."""

    # invalid
    SAME_USER = "SAME_USER"
    NAME_REQUIRED = "NAME_REQUIRED"
    EMPTY_CONTENT = "EMPTY_CONTENT"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
    INVALID_MESSAGE_TYPE = "INVALID_MESSAGE_TYPE"
    INVALID_ATTACHMENTS = "INVALID_ATTACHMENTS"
    INVALID_CURSOR = "INVALID_CURSOR"
    INVALID_ROLE = "INVALID_ROLE"
    CANNOT_REMOVE_SELF = "CANNOT_REMOVE_SELF"

    # not_found
    CONVERSATION_NOT_FOUND = "CONVERSATION_NOT_FOUND"
    MESSAGE_NOT_FOUND = "MESSAGE_NOT_FOUND"
    REPLY_TARGET_NOT_FOUND = "REPLY_TARGET_NOT_FOUND"
    TARGET_NOT_PARTICIPANT = "TARGET_NOT_PARTICIPANT"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # permission_denied
    NOT_PARTICIPANT = "NOT_PARTICIPANT"
    NOT_ADMIN = "NOT_ADMIN"
    NOT_CREATOR = "NOT_CREATOR"
    NOT_SENDER = "NOT_SENDER"
    NOT_GROUP = "NOT_GROUP"
    DIRECT_MEMBERSHIP_FIXED = "DIRECT_MEMBERSHIP_FIXED"
    CREATOR_CANNOT_LEAVE = "CREATOR_CANNOT_LEAVE"
    CANNOT_REMOVE_CREATOR = "CANNOT_REMOVE_CREATOR"
    CANNOT_CHANGE_CREATOR_ROLE = "CANNOT_CHANGE_CREATOR_ROLE"
    CANNOT_REMOVE_ADMIN = "CANNOT_REMOVE_ADMIN"
    SYSTEM_MESSAGE = "SYSTEM_MESSAGE"

    # conflict
    ALREADY_PARTICIPANT = "ALREADY_PARTICIPANT"


ERROR_CLASSES: dict[str, type[BaseApplicationError]] = {
    ErrorCode.SAME_USER: ValidationError,
    ErrorCode.NAME_REQUIRED: ValidationError,
    ErrorCode.EMPTY_CONTENT: ValidationError,
    ErrorCode.CONTENT_TOO_LONG: ValidationError,
    ErrorCode.INVALID_MESSAGE_TYPE: ValidationError,
    ErrorCode.INVALID_ATTACHMENTS: ValidationError,
    ErrorCode.INVALID_CURSOR: ValidationError,
    ErrorCode.INVALID_ROLE: ValidationError,
    ErrorCode.CANNOT_REMOVE_SELF: ValidationError,
    ErrorCode.CONVERSATION_NOT_FOUND: NotFoundError,
    ErrorCode.MESSAGE_NOT_FOUND: NotFoundError,
    ErrorCode.REPLY_TARGET_NOT_FOUND: NotFoundError,
    ErrorCode.TARGET_NOT_PARTICIPANT: NotFoundError,
    ErrorCode.USER_NOT_FOUND: NotFoundError,
    ErrorCode.NOT_PARTICIPANT: PermissionDeniedError,
    ErrorCode.NOT_ADMIN: PermissionDeniedError,
    ErrorCode.NOT_CREATOR: PermissionDeniedError,
    ErrorCode.NOT_SENDER: PermissionDeniedError,
    ErrorCode.NOT_GROUP: PermissionDeniedError,
    ErrorCode.DIRECT_MEMBERSHIP_FIXED: PermissionDeniedError,
    ErrorCode.CREATOR_CANNOT_LEAVE: PermissionDeniedError,
    ErrorCode.CANNOT_REMOVE_CREATOR: PermissionDeniedError,
    ErrorCode.CANNOT_CHANGE_CREATOR_ROLE: PermissionDeniedError,
    ErrorCode.CANNOT_REMOVE_ADMIN: PermissionDeniedError,
    ErrorCode.SYSTEM_MESSAGE: PermissionDeniedError,
    ErrorCode.ALREADY_PARTICIPANT: ConflictError,
}


def as_exception(result: ServiceResult) -> BaseApplicationError:
    """Build the core exception matching a failed result."""
    exc_class = ERROR_CLASSES.get(result.error_code, ValidationError)
    return exc_class(
        result.error or "Request failed",
        error_code=result.error_code,
        details=result.errors,
    )


def raise_for_failure(result: ServiceResult) -> None:
    """Raise the matching core exception if result is a failure."""
    if not result.success:
        raise as_exception(result)

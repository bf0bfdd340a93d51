"""
DRF exception handler producing the project's error body.

Every API error leaves the service as:

    {"error": "...", "error_code": "...", "kind": "...", "details": {...}}

where ``kind`` is one of ``unauthenticated``, ``permission_denied``,
``not_found``, ``conflict``, ``invalid`` (plus ``throttled``/``error`` for
infrastructure cases). Domain errors come from core.exceptions; DRF's own
exceptions are translated so clients never see two different shapes.

Registered in settings.REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

# DRF exception class -> (kind, error_code)
DRF_ERROR_KINDS: dict[type[Exception], tuple[str, str]] = {
    drf_exceptions.NotAuthenticated: ("unauthenticated", "NOT_AUTHENTICATED"),
    drf_exceptions.AuthenticationFailed: ("unauthenticated", "AUTHENTICATION_FAILED"),
    drf_exceptions.PermissionDenied: ("permission_denied", "PERMISSION_DENIED"),
    drf_exceptions.NotFound: ("not_found", "NOT_FOUND"),
    drf_exceptions.ValidationError: ("invalid", "VALIDATION_ERROR"),
    drf_exceptions.ParseError: ("invalid", "PARSE_ERROR"),
    drf_exceptions.MethodNotAllowed: ("invalid", "METHOD_NOT_ALLOWED"),
    drf_exceptions.UnsupportedMediaType: ("invalid", "UNSUPPORTED_MEDIA_TYPE"),
    drf_exceptions.Throttled: ("throttled", "THROTTLED"),
}


def _classify(exc: Exception) -> tuple[str, str]:
    for exc_class, classification in DRF_ERROR_KINDS.items():
        if isinstance(exc, exc_class):
            return classification
    return "error", "API_ERROR"


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    Render any exception raised inside a DRF view.

    Args:
        exc: The raised exception
        context: DRF handler context (view, request, args, kwargs)

    Returns:
        Response with the standard error body. Unexpected exceptions are
        logged with traceback and rendered as a generic 500.
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled exception in {view.__class__.__name__ if view else 'view'}: {exc}",
            exc_info=exc,
        )
        return Response(
            {
                "error": "An unexpected error occurred",
                "error_code": "INTERNAL_ERROR",
                "kind": "error",
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    kind, error_code = _classify(exc)
    body: dict[str, Any] = {"error_code": error_code, "kind": kind}

    if isinstance(exc, drf_exceptions.ValidationError):
        body["error"] = "Invalid request data"
        body["details"] = response.data
    else:
        data = response.data
        body["error"] = (
            str(data.get("detail", exc)) if isinstance(data, dict) else str(exc)
        )

    response.data = body
    return response

"""Transport-level error rendering.

Domain failures are already turned into envelopes by the Service Layer.
This handler covers what DRF raises before a service is reached
(malformed JSON, unsupported method or media type, throttling) and any
unexpected exception, rendering all of them as the same envelope:
``{success: false, error, message?, details?}``.

Internal detail (exception text, traceback) is only exposed when
``DEBUG`` is on.
"""

from __future__ import annotations

import traceback
from typing import Any, Optional

import structlog
from django.conf import settings
from django.http import HttpRequest, JsonResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


def _flatten_detail(detail: Any) -> list[str]:
    if isinstance(detail, dict):
        return [
            f"{key}: {message}"
            for key, value in detail.items()
            for message in _flatten_detail(value)
        ]
    if isinstance(detail, (list, tuple)):
        return [message for item in detail for message in _flatten_detail(item)]
    return [str(detail)]


def envelope_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """DRF ``EXCEPTION_HANDLER`` producing the uniform response envelope."""
    request = context.get("request")
    response = exception_handler(exc, context)

    if response is not None:
        messages = _flatten_detail(getattr(exc, "detail", response.data))
        body: dict[str, Any] = {"success": False, "error": messages[0] if messages else str(exc)}
        if len(messages) > 1:
            body["details"] = messages
        response.data = body
        return response

    logger.exception(
        "unhandled_error",
        method=getattr(request, "method", None),
        path=request.get_full_path() if request is not None else None,
    )
    body = {"success": False, "error": "Internal server error"}
    if settings.DEBUG:
        body["message"] = str(exc)
        body["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def route_not_found(request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
    """Catch-all for undefined routes."""
    return JsonResponse(
        {
            "success": False,
            "error": "Route not found",
            "message": f"Cannot {request.method} {request.path}",
        },
        status=status.HTTP_404_NOT_FOUND,
    )

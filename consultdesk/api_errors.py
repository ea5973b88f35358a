from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("consultdesk.api")

GENERIC_RETRY_MESSAGE = "A temporary error occurred. Please retry."


def error_response(
    *,
    message: str,
    field: str | None = None,
    http_status: int = status.HTTP_400_BAD_REQUEST,
    retryable: bool = False,
) -> Response:
    payload: dict = {"success": False, "error": {"message": message}}
    if field:
        payload["error"]["field"] = field
    if retryable:
        payload["error"]["retryable"] = True
    return Response(payload, status=http_status)


def domain_error_response(exc: Exception) -> Response:
    """
    Renders a domain error. Errors describe their own status through
    `http_status`/`retryable`; server-side failures hide their message unless DEBUG.
    """
    http_status = getattr(exc, "http_status", status.HTTP_400_BAD_REQUEST)
    message = str(exc)
    if http_status >= 500:
        logger.error("api_upstream_failure", extra={"error_type": type(exc).__name__})
        if not settings.DEBUG:
            message = getattr(exc, "public_message", GENERIC_RETRY_MESSAGE)
    return error_response(
        message=message,
        field=getattr(exc, "field", None),
        http_status=http_status,
        retryable=bool(getattr(exc, "retryable", False)),
    )


def _first_field_error(data: dict) -> tuple[str | None, str]:
    for field, errors in data.items():
        if isinstance(errors, (list, tuple)) and errors:
            return field, str(errors[0])
        return field, str(errors)
    return None, "Invalid input."


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        data = response.data
        field = None
        if isinstance(data, dict) and "detail" in data:
            message = str(data["detail"])
        elif isinstance(data, dict):
            field, message = _first_field_error(data)
        else:
            message = "Invalid input."
        response.data = {"success": False, "error": {"message": message}}
        if field and field != "non_field_errors":
            response.data["error"]["field"] = field
        return response

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("api_database_error", extra={"view": type(view).__name__ if view else ""})
        message = str(exc) if settings.DEBUG else GENERIC_RETRY_MESSAGE
        return error_response(message=message, http_status=status.HTTP_500_INTERNAL_SERVER_ERROR, retryable=True)

    return None

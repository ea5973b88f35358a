from __future__ import annotations

import logging
import time
import uuid

logger = logging.getLogger("consultdesk.request")

REQUEST_ID_HEADER = "X-Request-Id"
RESPONSE_TIME_HEADER = "X-Response-Time-ms"


def _incoming_request_id(request) -> str:
    raw = (request.META.get("HTTP_X_REQUEST_ID") or "").strip()
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return str(uuid.uuid4())


class RequestIdMiddleware:
    """Stamps a request id and the elapsed time on every response and logs one line per request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.request_id = _incoming_request_id(request)
        started = time.monotonic()

        response = self.get_response(request)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        response[REQUEST_ID_HEADER] = request.request_id
        response[RESPONSE_TIME_HEADER] = str(elapsed_ms)
        logger.info(
            "request_completed",
            extra={
                "request_id": request.request_id,
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response

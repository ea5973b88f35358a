from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render

logger = logging.getLogger("consultdesk.request")


def handle_404(request: HttpRequest, exception=None) -> HttpResponse:
    return render(request, "errors/404.html", status=404)


def handle_500(request: HttpRequest) -> HttpResponse:
    logger.error(
        "server_error",
        extra={"status_code": 500, "path": request.path, "request_id": getattr(request, "request_id", None)},
    )
    return render(request, "errors/500.html", status=500)

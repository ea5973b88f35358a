from __future__ import annotations

from django.conf import settings
from django.http import HttpResponse

from apps.accounts.domain.roles import UserRole


def set_auth_cookies(response: HttpResponse, *, access_token: str, role: UserRole) -> HttpResponse:
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        access_token,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="Lax",
        path="/",
    )
    response.set_cookie(
        settings.ROLE_COOKIE_NAME,
        role.value,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        httponly=False,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="Lax",
        path="/",
    )
    return response


def clear_auth_cookies(response: HttpResponse) -> HttpResponse:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/", samesite="Lax")
    response.delete_cookie(settings.ROLE_COOKIE_NAME, path="/", samesite="Lax")
    return response

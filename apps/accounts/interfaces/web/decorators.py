from __future__ import annotations

from functools import wraps
from typing import Iterable

from django.shortcuts import redirect, render

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.access_policy import AccessOutcome, DeniedMode, RouteRequirement, evaluate_access
from apps.accounts.domain.roles import UserRole


def access_required(
    allowed_roles: Iterable[UserRole] = (),
    *,
    auth_required: bool = True,
    denied_mode: DeniedMode = DeniedMode.REDIRECT,
):
    """
    Page-level guard. Resolves the caller's identity before the view body runs
    and attaches it as `request.identity` on success.
    """

    requirement = RouteRequirement(
        auth_required=auth_required,
        allowed_roles=frozenset(allowed_roles),
        denied_mode=denied_mode,
    )

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            identity = AccountIdentityService.resolve_request_identity(request)
            decision = evaluate_access(
                requirement,
                authenticated=identity is not None,
                role=identity.role if identity else None,
                path=request.get_full_path(),
            )
            if decision.outcome == AccessOutcome.RENDER_DENIED:
                return render(request, "accounts/access_denied.html", status=403)
            if not decision.allowed:
                return redirect(decision.location)
            request.identity = identity
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator

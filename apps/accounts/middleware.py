"""
Edge access guard.

Runs before URL resolution and consults only the `auth-token` cookie (a signed
access token) and the role claim, falling back to the `user-role` cookie.
Page views repeat the check with `@access_required`, which sees the full
account record.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.shortcuts import redirect, render

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.access_policy import AccessOutcome, evaluate_access
from apps.accounts.domain.routes import DEFAULT_ROUTE_RULES, resolve_route_requirement, rules_from_config

logger = logging.getLogger("consultdesk.access")


class EdgeAccessGuardMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response
        raw_rules = getattr(settings, "ACCESS_GUARD_RULES", None)
        self.rules = rules_from_config(raw_rules) if raw_rules else DEFAULT_ROUTE_RULES

    def __call__(self, request):
        requirement = resolve_route_requirement(request.path, self.rules)
        if not requirement.auth_required:
            return self.get_response(request)

        signals = AccountIdentityService.edge_signals(
            raw_token=request.COOKIES.get(settings.AUTH_COOKIE_NAME),
            raw_role=request.COOKIES.get(settings.ROLE_COOKIE_NAME),
        )
        decision = evaluate_access(
            requirement,
            authenticated=signals.authenticated,
            role=signals.role,
            path=request.get_full_path(),
        )
        if decision.allowed:
            return self.get_response(request)

        logger.info(
            "edge_access_denied",
            extra={"path": request.path, "outcome": decision.outcome.value, "role": signals.role},
        )
        if decision.outcome == AccessOutcome.RENDER_DENIED:
            return render(request, "accounts/access_denied.html", status=403)
        return redirect(decision.location)

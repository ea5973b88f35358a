from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import urlencode

from .roles import UserRole

SIGN_IN_PATH = "/auth/sign-in"
UNAUTHORIZED_PATH = "/unauthorized"
CALLBACK_PARAM = "callbackUrl"


class AccessOutcome(StrEnum):
    ALLOW = "allow"
    REDIRECT_SIGN_IN = "redirect_sign_in"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"
    RENDER_DENIED = "render_denied"


class DeniedMode(StrEnum):
    REDIRECT = "redirect"
    RENDER = "render"


@dataclass(frozen=True)
class RouteRequirement:
    """What a route demands of the caller. An empty `allowed_roles` means any authenticated role."""

    auth_required: bool = True
    allowed_roles: frozenset[UserRole] = field(default_factory=frozenset)
    denied_mode: DeniedMode = DeniedMode.REDIRECT


@dataclass(frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    location: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome == AccessOutcome.ALLOW


def sign_in_url(intended_path: str) -> str:
    return f"{SIGN_IN_PATH}?{urlencode({CALLBACK_PARAM: intended_path or '/'})}"


def evaluate_access(
    requirement: RouteRequirement,
    *,
    authenticated: bool,
    role: UserRole | None,
    path: str,
) -> AccessDecision:
    if not requirement.auth_required:
        return AccessDecision(AccessOutcome.ALLOW)

    if not authenticated:
        return AccessDecision(AccessOutcome.REDIRECT_SIGN_IN, location=sign_in_url(path))

    if not requirement.allowed_roles:
        return AccessDecision(AccessOutcome.ALLOW)

    if role is not None and role in requirement.allowed_roles:
        return AccessDecision(AccessOutcome.ALLOW)

    if requirement.denied_mode == DeniedMode.RENDER:
        return AccessDecision(AccessOutcome.RENDER_DENIED)
    return AccessDecision(AccessOutcome.REDIRECT_UNAUTHORIZED, location=UNAUTHORIZED_PATH)

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .access_policy import DeniedMode, RouteRequirement
from .roles import UserRole

PUBLIC_PATHS = (
    "/",
    "/about",
    "/services",
    "/contact",
    "/auth",
    "/unauthorized",
    "/terms",
    "/privacy",
    "/faq",
    "/healthz",
    "/readyz",
    "/favicon.ico",
)

# API routes authenticate with bearer tokens in the views themselves.
UNGUARDED_PREFIXES = (
    "/api/",
    "/static/",
    "/media/",
    "/django-admin/",
)

PUBLIC_REQUIREMENT = RouteRequirement(auth_required=False)
DEFAULT_REQUIREMENT = RouteRequirement()


@dataclass(frozen=True)
class RouteRule:
    prefix: str
    requirement: RouteRequirement


DEFAULT_ROUTE_RULES: tuple[RouteRule, ...] = (
    RouteRule("/client", RouteRequirement(allowed_roles=frozenset({UserRole.CLIENT, UserRole.ADMIN}))),
    RouteRule(
        "/employee",
        RouteRequirement(allowed_roles=frozenset({UserRole.EMPLOYEE, UserRole.MANAGER, UserRole.ADMIN})),
    ),
    RouteRule("/admin", RouteRequirement(allowed_roles=frozenset({UserRole.ADMIN}))),
    RouteRule("/dashboard", RouteRequirement()),
)


def path_matches(path: str, prefix: str) -> bool:
    if prefix == "/":
        return path == "/"
    base = prefix.rstrip("/")
    return path == base or path.startswith(base + "/")


def is_public_path(path: str) -> bool:
    if path.startswith(UNGUARDED_PREFIXES):
        return True
    return any(path_matches(path, prefix) for prefix in PUBLIC_PATHS)


def resolve_route_requirement(path: str, rules: Iterable[RouteRule] = DEFAULT_ROUTE_RULES) -> RouteRequirement:
    if is_public_path(path):
        return PUBLIC_REQUIREMENT
    for rule in rules:
        if path_matches(path, rule.prefix):
            return rule.requirement
    return DEFAULT_REQUIREMENT


def rules_from_config(raw_rules: Iterable[dict]) -> tuple[RouteRule, ...]:
    """Build rules from settings-style dicts; role names go through `UserRole.parse`."""
    rules = []
    for raw in raw_rules:
        requirement = RouteRequirement(
            auth_required=bool(raw.get("auth_required", True)),
            allowed_roles=frozenset(UserRole.parse(role) for role in raw.get("allowed_roles") or ()),
            denied_mode=DeniedMode(raw.get("denied_mode", DeniedMode.REDIRECT.value)),
        )
        rules.append(RouteRule(prefix=str(raw["prefix"]), requirement=requirement))
    return tuple(rules)

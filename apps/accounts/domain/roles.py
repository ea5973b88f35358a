from __future__ import annotations

from enum import StrEnum

from .errors import UnknownRoleError


class UserRole(StrEnum):
    CLIENT = "client"
    EMPLOYEE = "employee"
    ADMIN = "admin"
    MANAGER = "manager"

    @classmethod
    def parse(cls, raw: object) -> "UserRole":
        """Accept only the exact enum values; anything else is rejected at the boundary."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise UnknownRoleError("Role is required.", field="role")
        try:
            return cls(raw)
        except ValueError as exc:
            raise UnknownRoleError(f"Unknown role: {raw!r}", field="role") from exc

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(role.value, role.value.title()) for role in cls]


STAFF_ROLES = frozenset({UserRole.EMPLOYEE, UserRole.MANAGER, UserRole.ADMIN})
ASSIGNER_ROLES = frozenset({UserRole.MANAGER, UserRole.ADMIN})

ROLE_HOME_PATHS = {
    UserRole.CLIENT: "/client/",
    UserRole.EMPLOYEE: "/employee/",
    UserRole.MANAGER: "/employee/",
    UserRole.ADMIN: "/admin/",
}


def home_path_for(role: UserRole | None) -> str:
    if role is None:
        return "/"
    return ROLE_HOME_PATHS.get(role, "/")

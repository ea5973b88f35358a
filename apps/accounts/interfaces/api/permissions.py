from __future__ import annotations

from rest_framework.permissions import BasePermission

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import UserRole


class HasRole(BasePermission):
    """Bearer-authenticated API counterpart of the page-level access guard."""

    message = "You do not have permission to perform this action."
    allowed_roles: frozenset[UserRole] = frozenset()

    @classmethod
    def of(cls, *roles: UserRole) -> type["HasRole"]:
        return type(f"HasRole_{'_'.join(role.value for role in roles)}", (cls,), {"allowed_roles": frozenset(roles)})

    def has_permission(self, request, view) -> bool:
        identity = AccountIdentityService.identity_for_user(request.user)
        if identity is None:
            return False
        request.identity = identity
        return not self.allowed_roles or identity.role in self.allowed_roles

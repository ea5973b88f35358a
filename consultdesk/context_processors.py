from __future__ import annotations

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import home_path_for


def session_identity(request):
    identity = getattr(request, "identity", None)
    if identity is None and getattr(request, "user", None) is not None and request.user.is_authenticated:
        identity = AccountIdentityService.identity_for_user(request.user)
    return {
        "session_identity": identity,
        "role_home_path": home_path_for(identity.role if identity else None),
    }

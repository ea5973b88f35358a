from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from apps.accounts.domain.errors import AccountRoleMissingError, UnknownRoleError
from apps.accounts.domain.roles import STAFF_ROLES, UserRole
from apps.accounts.models import AccountProfile

logger = logging.getLogger("consultdesk.accounts")

ROLE_CLAIM = "role"


@dataclass(frozen=True)
class SessionIdentity:
    user_id: int
    role: UserRole
    display_name: str = ""
    email: str = ""

    @property
    def is_staff_role(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class EdgeSignals:
    """Coarse signals the edge guard may look at: a verified token and a role."""

    authenticated: bool
    role: UserRole | None


class AccountIdentityService:
    @staticmethod
    def role_for_user(user, profile: AccountProfile | None = None) -> UserRole:
        if profile is None:
            profile = AccountProfile.objects.filter(user_id=user.pk).first()
        if profile is not None:
            return UserRole.parse(profile.role)
        if getattr(user, "is_superuser", False):
            return UserRole.ADMIN
        raise AccountRoleMissingError(f"User {user.pk} has no provisioned role.")

    @staticmethod
    def identity_for_user(user) -> SessionIdentity | None:
        if user is None or not getattr(user, "is_authenticated", False) or not user.is_active:
            return None
        profile = AccountProfile.objects.filter(user_id=user.pk).first()
        try:
            role = AccountIdentityService.role_for_user(user, profile)
        except (AccountRoleMissingError, UnknownRoleError):
            logger.warning("identity_role_rejected", extra={"user_id": user.pk})
            return None
        display_name = (profile.display_name if profile else "") or user.get_full_name() or user.get_username()
        return SessionIdentity(user_id=user.pk, role=role, display_name=display_name, email=user.email or "")

    @staticmethod
    def issue_tokens(user) -> dict:
        role = AccountIdentityService.role_for_user(user)
        refresh = RefreshToken.for_user(user)
        refresh[ROLE_CLAIM] = role.value
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "role": role.value,
        }

    @staticmethod
    def edge_signals(*, raw_token: str | None, raw_role: str | None) -> EdgeSignals:
        """
        Read only the auth cookie and role cookie. The token must verify; its role
        claim wins over the role cookie when both are present.
        """
        if not raw_token:
            return EdgeSignals(authenticated=False, role=None)
        try:
            token = AccessToken(raw_token)
        except TokenError:
            return EdgeSignals(authenticated=False, role=None)

        candidate = token.get(ROLE_CLAIM) or raw_role
        try:
            role = UserRole.parse(candidate)
        except UnknownRoleError:
            role = None
        return EdgeSignals(authenticated=True, role=role)

    @staticmethod
    def identity_from_token(raw_token: str | None) -> SessionIdentity | None:
        if not raw_token:
            return None
        try:
            token = AccessToken(raw_token)
        except TokenError:
            return None
        user_id = token.get(jwt_settings.USER_ID_CLAIM)
        if user_id is None:
            return None
        user = get_user_model()._default_manager.filter(**{jwt_settings.USER_ID_FIELD: user_id}).first()
        return AccountIdentityService.identity_for_user(user)

    @staticmethod
    def resolve_request_identity(request) -> SessionIdentity | None:
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            identity = AccountIdentityService.identity_for_user(user)
            if identity is not None:
                return identity
        return AccountIdentityService.identity_from_token(request.COOKIES.get(settings.AUTH_COOKIE_NAME))

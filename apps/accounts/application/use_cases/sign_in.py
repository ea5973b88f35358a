from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import authenticate

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import InvalidCredentialsError
from apps.accounts.domain.roles import UserRole
from apps.accounts.services.audit_service import AccountAuditService


@dataclass(frozen=True)
class SignInCommand:
    identifier: str
    password: str
    ip_address: str | None = None
    user_agent: str = ""


@dataclass(frozen=True)
class SignInResult:
    user: object
    role: UserRole
    tokens: dict


class SignInUseCase:
    @staticmethod
    def execute(cmd: SignInCommand, *, request=None) -> SignInResult:
        identifier = (cmd.identifier or "").strip()
        user = None
        if identifier and cmd.password:
            user = authenticate(request, username=identifier, password=cmd.password)

        if user is None:
            AccountAuditService.record_action(
                user=None,
                action=AccountAuditService.ACTION_LOGIN_FAILED,
                ip_address=cmd.ip_address,
                user_agent=cmd.user_agent,
                metadata={"identifier": identifier},
            )
            raise InvalidCredentialsError("Invalid credentials.")

        role = AccountIdentityService.role_for_user(user)
        tokens = AccountIdentityService.issue_tokens(user)
        AccountAuditService.record_action(
            user=user,
            action=AccountAuditService.ACTION_LOGIN_SUCCEEDED,
            ip_address=cmd.ip_address,
            user_agent=cmd.user_agent,
            metadata={"role": role.value},
        )
        return SignInResult(user=user, role=role, tokens=tokens)

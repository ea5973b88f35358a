from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.accounts.domain.errors import AccountAlreadyExistsError, AccountValidationError
from apps.accounts.domain.policies import validate_email, validate_full_name
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.accounts.services.audit_service import AccountAuditService


@dataclass(frozen=True)
class RegisterClientCommand:
    full_name: str
    email: str
    password: str
    phone: str = ""
    ip_address: str | None = None
    user_agent: str = ""


@dataclass(frozen=True)
class RegisterClientResult:
    user: object
    role: UserRole


class RegisterClientUseCase:
    """Self sign-up always provisions the client role; staff roles are granted by an admin."""

    @staticmethod
    @transaction.atomic
    def execute(cmd: RegisterClientCommand) -> RegisterClientResult:
        full_name = validate_full_name(cmd.full_name)
        email = validate_email(cmd.email)

        UserModel = get_user_model()
        if UserModel.objects.filter(email__iexact=email).exists() or UserModel.objects.filter(
            username__iexact=email
        ).exists():
            raise AccountAlreadyExistsError("An account with this email already exists.", field="email")

        try:
            validate_password(cmd.password)
        except ValidationError as exc:
            raise AccountValidationError("; ".join(exc.messages), field="password") from exc

        first_name, _, last_name = full_name.partition(" ")
        user = UserModel.objects.create_user(
            username=email,
            email=email,
            password=cmd.password,
            first_name=first_name[:150],
            last_name=last_name[:150],
        )
        AccountProfile.objects.create(
            user=user,
            role=UserRole.CLIENT.value,
            display_name=full_name,
            phone=(cmd.phone or "").strip(),
        )
        AccountAuditService.record_action(
            user=user,
            action=AccountAuditService.ACTION_REGISTERED,
            ip_address=cmd.ip_address,
            user_agent=cmd.user_agent,
            metadata={"email": email, "role": UserRole.CLIENT.value},
        )
        return RegisterClientResult(user=user, role=UserRole.CLIENT)

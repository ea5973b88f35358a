from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.accounts.domain.errors import AccountNotFoundError
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.accounts.services.audit_service import AccountAuditService


@dataclass(frozen=True)
class ChangeUserRoleCommand:
    actor: object
    user_id: int
    role: str


class ChangeUserRoleUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: ChangeUserRoleCommand) -> AccountProfile:
        role = UserRole.parse(cmd.role)
        user = get_user_model().objects.filter(pk=cmd.user_id).first()
        if user is None:
            raise AccountNotFoundError("User not found.")

        profile, _ = AccountProfile.objects.select_for_update().get_or_create(
            user=user, defaults={"role": role.value}
        )
        previous = profile.role
        if previous != role.value:
            profile.role = role.value
            profile.save(update_fields=["role", "updated_at"])

        AccountAuditService.record_action(
            user=user,
            action=AccountAuditService.ACTION_ROLE_CHANGED,
            metadata={"from": previous, "to": role.value, "by": getattr(cmd.actor, "pk", None)},
        )
        return profile

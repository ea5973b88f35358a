from __future__ import annotations

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.accounts.domain.roles import ASSIGNER_ROLES, STAFF_ROLES
from apps.orders.domain.errors import OrderAccessDeniedError
from apps.orders.models import Order


def ensure_can_access(order: Order, identity: SessionIdentity) -> None:
    if identity.is_staff_role or order.client_id == identity.user_id:
        return
    raise OrderAccessDeniedError()


def ensure_staff(identity: SessionIdentity) -> None:
    if identity.role not in STAFF_ROLES:
        raise OrderAccessDeniedError("Only staff can perform this action.")


def ensure_assigner(identity: SessionIdentity) -> None:
    if identity.role not in ASSIGNER_ROLES:
        raise OrderAccessDeniedError("Only admins and managers can assign orders.")

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.accounts.application.services.identity_service import AccountIdentityService, SessionIdentity
from apps.accounts.domain.roles import STAFF_ROLES
from apps.orders.application.access import ensure_assigner
from apps.orders.domain.errors import OrderTransitionError, OrderValidationError
from apps.orders.domain.status import OrderStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


@dataclass(frozen=True)
class AssignOrderCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    assignee_id: int


class AssignOrderUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: AssignOrderCommand) -> Order:
        ensure_assigner(cmd.identity)
        order = OrderService.get(cmd.order_id)
        if order.status == OrderStatus.CANCELLED:
            raise OrderTransitionError("Cancelled orders cannot be assigned.", field="status")

        assignee = get_user_model()._default_manager.filter(pk=cmd.assignee_id).first()
        identity = AccountIdentityService.identity_for_user(assignee) if assignee is not None else None
        if identity is None or identity.role not in STAFF_ROLES:
            raise OrderValidationError("Assignee must be an active staff member.", field="assigneeId")

        return OrderService.apply_change(
            order,
            changes={"assigned_to": assignee},
            event=TimelineEvent.ASSIGNED,
            message=f"Assigned to {identity.display_name}",
            actor=cmd.actor,
        )

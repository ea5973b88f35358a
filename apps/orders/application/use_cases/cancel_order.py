from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.notifications.services.order_notifications import OrderNotificationService
from apps.orders.application.access import ensure_can_access
from apps.orders.domain.errors import OrderTransitionError
from apps.orders.domain.policies import resolve_cancellation_reason
from apps.orders.domain.status import CLOSED_STATUSES, OrderStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


@dataclass(frozen=True)
class CancelOrderCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    reason: str
    other_reason: str | None = None


class CancelOrderUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: CancelOrderCommand) -> Order:
        order = OrderService.get(cmd.order_id)
        ensure_can_access(order, cmd.identity)
        if order.status in CLOSED_STATUSES:
            raise OrderTransitionError(f"Order cannot be cancelled once it is {order.status}.", field="status")

        reason = resolve_cancellation_reason(cmd.reason, cmd.other_reason)
        cancelled_by = "client" if order.client_id == cmd.identity.user_id else cmd.identity.role.value
        order = OrderService.apply_change(
            order,
            changes={"status": OrderStatus.CANCELLED.value, "cancellation_reason": reason},
            event=TimelineEvent.CANCELLED,
            message=f"Order cancelled by {cancelled_by}. Reason: {reason}",
            actor=cmd.actor,
        )
        OrderNotificationService.queue_cancellation(order, reason=reason, cancelled_by=cancelled_by)
        return order

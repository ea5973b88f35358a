from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.notifications.services.order_notifications import OrderNotificationService
from apps.orders.application.access import ensure_staff
from apps.orders.domain.errors import OrderValidationError
from apps.orders.domain.status import OrderStatus, PaymentStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


@dataclass(frozen=True)
class UpdateOrderStatusCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    status: str
    message: str = ""
    payment_status: str | None = None


class UpdateOrderStatusUseCase:
    """Staff may set any valid status; each call records exactly one timeline entry."""

    @staticmethod
    @transaction.atomic
    def execute(cmd: UpdateOrderStatusCommand) -> Order:
        ensure_staff(cmd.identity)
        try:
            status = OrderStatus((cmd.status or "").strip().lower())
        except ValueError as exc:
            raise OrderValidationError("Unknown order status.", field="status") from exc

        changes: dict = {"status": status.value}
        if cmd.payment_status:
            try:
                changes["payment_status"] = PaymentStatus(cmd.payment_status.strip().lower()).value
            except ValueError as exc:
                raise OrderValidationError("Unknown payment status.", field="paymentStatus") from exc

        order = OrderService.get(cmd.order_id)
        message = (cmd.message or "").strip() or f"Status updated to {status.value}"
        order = OrderService.apply_change(
            order,
            changes=changes,
            event=TimelineEvent.STATUS_UPDATED,
            message=message,
            actor=cmd.actor,
        )
        OrderNotificationService.queue_status_update(order, message=message)
        return order

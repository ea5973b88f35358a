from __future__ import annotations

from dataclasses import dataclass

from django.db.models import QuerySet

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.accounts.domain.roles import UserRole
from apps.orders.application.access import ensure_can_access
from apps.orders.domain.errors import OrderValidationError
from apps.orders.domain.status import OrderStatus
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


@dataclass(frozen=True)
class GetOrderCommand:
    identity: SessionIdentity
    order_id: str


class GetOrderUseCase:
    @staticmethod
    def execute(cmd: GetOrderCommand) -> Order:
        order = OrderService.get(cmd.order_id)
        ensure_can_access(order, cmd.identity)
        return order


@dataclass(frozen=True)
class ListOrdersCommand:
    identity: SessionIdentity
    status: str | None = None


class ListOrdersUseCase:
    """Clients see their own orders, employees the ones assigned to them, admins and managers all."""

    @staticmethod
    def execute(cmd: ListOrdersCommand) -> QuerySet[Order]:
        queryset = Order.objects.select_related("service", "assigned_to")
        role = cmd.identity.role
        if role == UserRole.CLIENT:
            queryset = queryset.filter(client_id=cmd.identity.user_id)
        elif role == UserRole.EMPLOYEE:
            queryset = queryset.filter(assigned_to_id=cmd.identity.user_id)

        if cmd.status:
            try:
                status = OrderStatus(cmd.status.strip().lower())
            except ValueError as exc:
                raise OrderValidationError("Unknown order status.", field="status") from exc
            queryset = queryset.filter(status=status.value)
        return queryset

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db import transaction

from apps.cart.domain.errors import EmptyCartError
from apps.cart.services.cart_service import CartService
from apps.orders.application.use_cases.create_order import CreateOrderCommand, CreateOrderUseCase
from apps.orders.models import Order


@dataclass(frozen=True)
class CheckoutCartCommand:
    client: object
    client_details: Any


@dataclass(frozen=True)
class CheckoutCartResult:
    orders: list[Order]


class CheckoutCartUseCase:
    """One order per cart line, priced at quantity times the current service price. The cart is emptied on success."""

    @staticmethod
    @transaction.atomic
    def execute(cmd: CheckoutCartCommand) -> CheckoutCartResult:
        lines = CartService.lines(user=cmd.client)
        if not lines:
            raise EmptyCartError()

        orders = []
        for line in lines:
            details = dict(cmd.client_details) if isinstance(cmd.client_details, dict) else cmd.client_details
            if isinstance(details, dict) and details:
                details["quantity"] = line.quantity
            result = CreateOrderUseCase.execute(
                CreateOrderCommand(
                    client=cmd.client,
                    service_id=line.service_id,
                    amount=line.line_total,
                    currency=line.currency,
                    client_details=details,
                )
            )
            orders.append(result.order)

        CartService.clear(user=cmd.client)
        return CheckoutCartResult(orders=orders)

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db import transaction
from django.utils import timezone

from apps.catalog.services.catalog_service import CatalogService
from apps.orders.domain.errors import OrderValidationError
from apps.orders.domain.policies import validate_amount, validate_client_details, validate_currency
from apps.orders.domain.status import TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


@dataclass(frozen=True)
class CreateOrderCommand:
    client: object
    service_id: Any
    amount: Any
    currency: Any
    client_details: Any


@dataclass(frozen=True)
class CreateOrderResult:
    order: Order


_REQUIRED_FIELDS = (
    ("service_id", "serviceId"),
    ("amount", "amount"),
    ("currency", "currency"),
    ("client_details", "clientDetails"),
)


class CreateOrderUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: CreateOrderCommand) -> CreateOrderResult:
        for attr, field in _REQUIRED_FIELDS:
            value = getattr(cmd, attr)
            if value is None or (isinstance(value, (str, dict)) and not value):
                raise OrderValidationError("Missing required fields.", field=field)
        if not isinstance(cmd.service_id, str):
            raise OrderValidationError("serviceId must be a string.", field="serviceId")

        amount = validate_amount(cmd.amount)
        currency = validate_currency(cmd.currency)
        client_details = validate_client_details(cmd.client_details)
        service = CatalogService.get_active(cmd.service_id)

        now = timezone.now()
        order = Order.objects.create(
            client=cmd.client,
            service=service,
            service_name=service.name,
            amount=amount,
            currency=currency,
            client_details=client_details,
            created_at=now,
            updated_at=now,
        )
        OrderService.append_timeline(order, event=TimelineEvent.CREATED, message="Order created", actor=cmd.client)
        return CreateOrderResult(order=order)

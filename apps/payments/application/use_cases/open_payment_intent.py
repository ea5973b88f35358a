from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import transaction

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.orders.application.access import ensure_can_access
from apps.orders.domain.errors import OrderValidationError
from apps.orders.domain.policies import validate_amount, validate_currency
from apps.orders.domain.status import OrderStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.domain.amounts import RECEIPT_MAX_LENGTH, chargeable_minor_units, new_receipt
from apps.payments.domain.errors import (
    GatewayRejectedError,
    PaymentConflictError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from apps.payments.domain.ports import GatewayOrder
from apps.payments.models import PaymentAttempt

logger = logging.getLogger("consultdesk.payments")


@dataclass(frozen=True)
class OpenPaymentIntentCommand:
    actor: object
    identity: SessionIdentity
    amount: Any
    currency: Any = "INR"
    receipt: str | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class OpenPaymentIntentResult:
    gateway_order: GatewayOrder
    key_id: str
    attempt: PaymentAttempt


def _ensure_payable(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise PaymentConflictError("Order is cancelled.", field="orderId")
    if order.payment_verified:
        raise PaymentConflictError("Order is already paid.", field="orderId")


class OpenPaymentIntentUseCase:
    """
    Two-step protocol:
    1. persist a `PaymentAttempt` in `initiated` state with its receipt;
    2. create the gateway order (bounded by the gateway timeout);
    3. in one transaction, mark the attempt `created` and record the gateway
       order id on the order.
    Attempts left in `initiated` are picked up by `reconcile_payments`.
    """

    @staticmethod
    def execute(cmd: OpenPaymentIntentCommand) -> OpenPaymentIntentResult:
        try:
            amount = validate_amount(cmd.amount)
            currency = validate_currency(cmd.currency or "INR")
        except OrderValidationError as exc:
            raise PaymentValidationError(str(exc), field=exc.field) from exc

        order = None
        if cmd.order_id:
            order = Order.objects.filter(pk=cmd.order_id).first()
            if order is None:
                raise PaymentNotFoundError("Order not found.", field="orderId")
            ensure_can_access(order, cmd.identity)
            _ensure_payable(order)
            if amount != order.amount:
                raise PaymentValidationError("Amount does not match the order amount.", field="amount")
            if currency != order.currency:
                raise PaymentValidationError("Currency does not match the order currency.", field="currency")

        receipt = (cmd.receipt or "").strip()
        if receipt:
            if len(receipt) > RECEIPT_MAX_LENGTH:
                raise PaymentValidationError("Receipt is too long.", field="receipt")
            if PaymentAttempt.objects.filter(receipt=receipt).exists():
                raise PaymentConflictError("Receipt has already been used.", field="receipt")
        else:
            receipt = new_receipt()

        gateway = PaymentGatewayFacade.get()
        amount_minor = chargeable_minor_units(amount, Decimal(str(settings.PAYMENT_TAX_RATE)))
        attempt = PaymentAttempt.objects.create(
            receipt=receipt,
            order=order,
            created_by=cmd.actor,
            gateway_code=gateway.code,
            amount=amount,
            amount_minor=amount_minor,
            currency=currency,
        )

        try:
            gateway_order = gateway.create_order(
                amount_minor=amount_minor,
                currency=currency,
                receipt=receipt,
                notes={"order_id": order.pk if order else ""},
            )
        except GatewayRejectedError as exc:
            attempt.status = PaymentAttempt.STATUS_FAILED
            attempt.last_error = str(exc)[:500]
            attempt.save(update_fields=["status", "last_error", "updated_at"])
            raise

        with transaction.atomic():
            attempt.status = PaymentAttempt.STATUS_CREATED
            attempt.gateway_order_id = gateway_order.id
            attempt.save(update_fields=["status", "gateway_order_id", "updated_at"])
            if order is not None:
                OrderService.apply_change(
                    OrderService.get(order.pk),
                    changes={"gateway_order_id": gateway_order.id},
                    event=TimelineEvent.PAYMENT_INITIATED,
                    message="Payment initiated",
                    actor=cmd.actor,
                )

        logger.info(
            "payment_intent_created",
            extra={
                "order_id": order.pk if order else "",
                "gateway_order_id": gateway_order.id,
                "receipt": receipt,
                "amount_minor": amount_minor,
            },
        )
        return OpenPaymentIntentResult(gateway_order=gateway_order, key_id=gateway.key_id, attempt=attempt)

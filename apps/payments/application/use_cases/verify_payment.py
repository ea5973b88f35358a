from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.utils import timezone

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.orders.application.access import ensure_can_access
from apps.orders.models import Order
from apps.payments.domain.errors import (
    PaymentConflictError,
    PaymentNotFoundError,
    PaymentValidationError,
    SignatureMismatchError,
)
from apps.payments.domain.signatures import verify_payment_signature
from apps.payments.models import PaymentAttempt
from apps.payments.services.payment_transitions import PaymentTransitionService

logger = logging.getLogger("consultdesk.payments")


@dataclass(frozen=True)
class VerifyPaymentCommand:
    identity: SessionIdentity
    actor: object
    order_id: str
    gateway_payment_id: str
    gateway_order_id: str
    signature: str


@dataclass(frozen=True)
class VerifyPaymentResult:
    order: Order
    already_verified: bool = False


def _require(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PaymentValidationError("Missing required fields.", field=field)
    return value.strip()


def _link_attempt(attempt: PaymentAttempt, order: Order, *, caller_id) -> None:
    """An intent opened without `orderId` is tied to the order it is first verified against."""
    if attempt.created_by_id not in (None, order.client_id, caller_id):
        raise PaymentValidationError("Gateway order does not belong to this order.", field="gatewayOrderId")
    if attempt.amount != order.amount or attempt.currency != order.currency:
        raise PaymentValidationError("Paid amount does not match the order amount.", field="amount")

    linked = PaymentAttempt.objects.filter(pk=attempt.pk, order__isnull=True).update(
        order=order, updated_at=timezone.now()
    )
    if not linked:
        attempt.refresh_from_db(fields=["order"])
        if attempt.order_id != order.pk:
            raise PaymentValidationError("Gateway order does not belong to this order.", field="gatewayOrderId")
        return
    attempt.order = order
    logger.info(
        "payment_attempt_linked",
        extra={"order_id": order.pk, "gateway_order_id": attempt.gateway_order_id, "receipt": attempt.receipt},
    )


class VerifyPaymentUseCase:
    @staticmethod
    def execute(cmd: VerifyPaymentCommand) -> VerifyPaymentResult:
        order_id = _require(cmd.order_id, "orderId")
        payment_id = _require(cmd.gateway_payment_id, "gatewayPaymentId")
        gateway_order_id = _require(cmd.gateway_order_id, "gatewayOrderId")
        signature = _require(cmd.signature, "signature")

        order = Order.objects.select_related("client").filter(pk=order_id).first()
        if order is None:
            raise PaymentNotFoundError("Order not found.", field="orderId")
        ensure_can_access(order, cmd.identity)

        attempt = PaymentAttempt.objects.filter(gateway_order_id=gateway_order_id).first()
        if attempt is not None and attempt.order_id and attempt.order_id != order.pk:
            logger.warning(
                "payment_gateway_order_mismatch",
                extra={
                    "order_id": order.pk,
                    "gateway_order_id": gateway_order_id,
                    "attempt_order_id": attempt.order_id,
                },
            )
            raise PaymentValidationError("Gateway order does not belong to this order.", field="gatewayOrderId")
        if attempt is not None and attempt.order_id is None:
            if order.payment_verified:
                raise PaymentConflictError("Order is already paid.", field="orderId")
            _link_attempt(attempt, order, caller_id=cmd.identity.user_id)
        elif attempt is None and order.gateway_order_id != gateway_order_id:
            raise PaymentValidationError("Gateway order does not belong to this order.", field="gatewayOrderId")

        valid = verify_payment_signature(
            gateway_order_id=gateway_order_id,
            gateway_payment_id=payment_id,
            signature=signature,
            secret=settings.RAZORPAY_KEY_SECRET,
        )

        if order.payment_verified:
            if valid and order.gateway_payment_id == payment_id:
                return VerifyPaymentResult(order=order, already_verified=True)
            logger.warning(
                "payment_verify_after_verified",
                extra={
                    "order_id": order.pk,
                    "gateway_order_id": gateway_order_id,
                    "payment_id": payment_id,
                    "signature_valid": valid,
                },
            )
            if not valid:
                raise SignatureMismatchError()
            raise PaymentConflictError("Order is already paid.", field="orderId")

        if not valid:
            PaymentTransitionService.mark_verification_failed(
                order,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=payment_id,
                actor=cmd.actor,
            )
            raise SignatureMismatchError()

        order = PaymentTransitionService.mark_verified(
            order,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=payment_id,
            actor=cmd.actor,
        )
        return VerifyPaymentResult(order=order)

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from apps.notifications.services.order_notifications import OrderNotificationService
from apps.orders.domain.status import GATEWAY_ACTOR, OrderStatus, PaymentStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.models import PaymentAttempt

logger = logging.getLogger("consultdesk.payments")


class PaymentTransitionService:
    """Order changes driven by payment outcomes, shared by the callback and the webhook."""

    @staticmethod
    @transaction.atomic
    def mark_verified(
        order: Order,
        *,
        gateway_order_id: str,
        gateway_payment_id: str,
        actor=None,
        actor_label: str | None = None,
    ) -> Order:
        """
        A captured payment on an order that was already cancelled keeps the order
        cancelled. The money is recorded so staff can refund it.
        """
        late = order.status == OrderStatus.CANCELLED
        order = OrderService.apply_change(
            order,
            changes={
                "status": OrderStatus.CANCELLED.value if late else OrderStatus.PROCESSING.value,
                "payment_status": PaymentStatus.COMPLETED.value,
                "payment_verified": True,
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            },
            event=TimelineEvent.PAYMENT_AFTER_CANCELLATION if late else TimelineEvent.PAYMENT_VERIFIED,
            message="Payment received after cancellation" if late else "Payment verified",
            actor=actor,
            actor_label=actor_label,
        )
        PaymentAttempt.objects.filter(gateway_order_id=gateway_order_id).update(
            status=PaymentAttempt.STATUS_PAID,
            gateway_payment_id=gateway_payment_id,
            updated_at=timezone.now(),
        )
        if late:
            logger.warning(
                "payment_after_cancellation",
                extra={"order_id": order.pk, "gateway_order_id": gateway_order_id, "payment_id": gateway_payment_id},
            )
            return order

        OrderNotificationService.queue_payment_confirmation(order)
        logger.info(
            "payment_verified",
            extra={"order_id": order.pk, "gateway_order_id": gateway_order_id, "payment_id": gateway_payment_id},
        )
        return order

    @staticmethod
    @transaction.atomic
    def mark_verification_failed(
        order: Order,
        *,
        gateway_order_id: str,
        gateway_payment_id: str,
        actor=None,
        actor_label: str | None = None,
    ) -> Order:
        order = OrderService.apply_change(
            order,
            changes={
                "status": OrderStatus.CANCELLED.value,
                "payment_status": PaymentStatus.FAILED.value,
            },
            event=TimelineEvent.PAYMENT_VERIFICATION_FAILED,
            message="Payment verification failed",
            actor=actor,
            actor_label=actor_label,
        )
        PaymentAttempt.objects.filter(order=order, gateway_order_id=gateway_order_id).update(
            status=PaymentAttempt.STATUS_FAILED,
            last_error="signature mismatch",
            updated_at=timezone.now(),
        )
        logger.warning(
            "payment_signature_mismatch",
            extra={"order_id": order.pk, "gateway_order_id": gateway_order_id, "payment_id": gateway_payment_id},
        )
        return order

    @staticmethod
    @transaction.atomic
    def mark_payment_failed(order: Order, *, gateway_order_id: str, gateway_payment_id: str, reason: str = "") -> Order:
        """A failed charge leaves the order status alone so the client can pay again."""
        message = "Payment failed" + (f": {reason}" if reason else "")
        order = OrderService.apply_change(
            order,
            changes={"payment_status": PaymentStatus.FAILED.value},
            event=TimelineEvent.PAYMENT_FAILED,
            message=message,
            actor_label=GATEWAY_ACTOR,
        )
        PaymentAttempt.objects.filter(gateway_order_id=gateway_order_id).update(
            status=PaymentAttempt.STATUS_FAILED,
            gateway_payment_id=gateway_payment_id,
            last_error=reason[:500],
            updated_at=timezone.now(),
        )
        logger.info(
            "payment_failed",
            extra={"order_id": order.pk, "gateway_order_id": gateway_order_id, "payment_id": gateway_payment_id},
        )
        return order

from __future__ import annotations

from django.conf import settings
from django.utils import timezone

from apps.notifications.services.email_dispatcher import EmailDispatchService


def _client_name(order) -> str:
    details = order.client_details or {}
    name = (details.get("name") or details.get("fullName")) if isinstance(details, dict) else ""
    return name or order.client.get_full_name() or order.client.get_username()


def _base_context(order) -> dict:
    return {
        "order": order,
        "client_name": _client_name(order),
        "client_email": order.client.email,
        "today": timezone.localdate(),
    }


class OrderNotificationService:
    @staticmethod
    def queue_cancellation(order, *, reason: str, cancelled_by: str) -> None:
        context = {**_base_context(order), "reason": reason, "cancelled_by": cancelled_by}
        EmailDispatchService.queue(
            idempotency_key=f"order:{order.pk}:cancelled:client",
            template="order_cancelled_client",
            to_email=order.client.email,
            subject=f"Order Cancellation Confirmation - #{order.pk}",
            context=context,
            order_id=order.pk,
        )
        EmailDispatchService.queue(
            idempotency_key=f"order:{order.pk}:cancelled:admin",
            template="order_cancelled_admin",
            to_email=getattr(settings, "ADMIN_NOTIFICATION_EMAIL", ""),
            subject=f"Order Cancelled - #{order.pk}",
            context=context,
            order_id=order.pk,
        )

    @staticmethod
    def queue_status_update(order, *, message: str) -> None:
        EmailDispatchService.queue(
            idempotency_key=f"order:{order.pk}:status:v{order.version}",
            template="order_status_updated",
            to_email=order.client.email,
            subject=f"Order #{order.pk} is now {order.status}",
            context={**_base_context(order), "message": message},
            order_id=order.pk,
        )

    @staticmethod
    def queue_payment_confirmation(order) -> None:
        EmailDispatchService.queue(
            idempotency_key=f"order:{order.pk}:paid:{order.gateway_payment_id}",
            template="payment_confirmed",
            to_email=order.client.email,
            subject=f"Payment received - #{order.pk}",
            context=_base_context(order),
            order_id=order.pk,
        )

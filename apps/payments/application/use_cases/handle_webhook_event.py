from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.orders.domain.status import GATEWAY_ACTOR
from apps.orders.models import Order
from apps.payments.domain.errors import PaymentValidationError, SignatureMismatchError
from apps.payments.domain.signatures import verify_webhook_signature
from apps.payments.models import PaymentAttempt, PaymentEvent
from apps.payments.services.payment_transitions import PaymentTransitionService

logger = logging.getLogger("consultdesk.payments")

SUCCESS_EVENTS = frozenset({"payment.captured", "order.paid"})
FAILURE_EVENTS = frozenset({"payment.failed"})


@dataclass(frozen=True)
class HandleWebhookEventCommand:
    body: bytes
    signature: str
    event_id: str = ""


def _entity(payload: dict, name: str) -> dict:
    section = (payload.get("payload") or {}).get(name) or {}
    entity = section.get("entity") if isinstance(section, dict) else None
    return entity if isinstance(entity, dict) else {}


def _resolve_order(gateway_order_id: str) -> Order | None:
    if not gateway_order_id:
        return None
    attempt = PaymentAttempt.objects.filter(gateway_order_id=gateway_order_id).first()
    if attempt is not None and attempt.order_id:
        return Order.objects.select_related("client").filter(pk=attempt.order_id).first()
    return Order.objects.select_related("client").filter(gateway_order_id=gateway_order_id).first()


class HandleWebhookEventUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: HandleWebhookEventCommand) -> PaymentEvent:
        if not verify_webhook_signature(
            body=cmd.body,
            signature=cmd.signature,
            secret=settings.RAZORPAY_WEBHOOK_SECRET,
        ):
            logger.warning("webhook_signature_mismatch", extra={"event_id": cmd.event_id})
            raise SignatureMismatchError("Invalid webhook signature.", field=None)

        try:
            payload = json.loads(cmd.body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise PaymentValidationError("Webhook body is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise PaymentValidationError("Webhook body must be an object.")

        event_type = str(payload.get("event") or "")
        payment = _entity(payload, "payment")
        gateway_order = _entity(payload, "order")
        payment_id = str(payment.get("id") or "")
        gateway_order_id = str(payment.get("order_id") or gateway_order.get("id") or "")
        event_id = (cmd.event_id or "").strip() or f"{payment_id or gateway_order_id}:{event_type}"

        event, created = PaymentEvent.objects.select_for_update().get_or_create(
            event_id=event_id,
            defaults={"event_type": event_type, "payload_json": payload},
        )
        if not created and event.processing_status != PaymentEvent.STATUS_PENDING:
            logger.info("webhook_duplicate", extra={"event_id": event_id, "event_type": event_type})
            return event

        order = _resolve_order(gateway_order_id)
        status = PaymentEvent.STATUS_IGNORED
        if order is not None:
            event.order_id = order.pk
            if event_type in SUCCESS_EVENTS:
                if not order.payment_verified and payment_id:
                    PaymentTransitionService.mark_verified(
                        order,
                        gateway_order_id=gateway_order_id,
                        gateway_payment_id=payment_id,
                        actor_label=GATEWAY_ACTOR,
                    )
                status = PaymentEvent.STATUS_PROCESSED
            elif event_type in FAILURE_EVENTS:
                if not order.payment_verified:
                    reason = str(payment.get("error_description") or "")
                    PaymentTransitionService.mark_payment_failed(
                        order,
                        gateway_order_id=gateway_order_id,
                        gateway_payment_id=payment_id,
                        reason=reason,
                    )
                status = PaymentEvent.STATUS_PROCESSED

        event.processing_status = status
        event.processed_at = timezone.now()
        event.save(update_fields=["order_id", "processing_status", "processed_at"])
        logger.info(
            "webhook_handled",
            extra={
                "event_id": event_id,
                "event_type": event_type,
                "order_id": event.order_id,
                "gateway_order_id": gateway_order_id,
                "payment_id": payment_id,
                "status": status,
            },
        )
        return event

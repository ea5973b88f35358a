from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.orders.domain.errors import OrderDomainError
from apps.orders.domain.status import SYSTEM_ACTOR, TimelineEvent
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.domain.errors import PaymentDomainError
from apps.payments.models import PaymentAttempt

logger = logging.getLogger("consultdesk.payments")


@dataclass(frozen=True)
class ReconcilePaymentsCommand:
    grace_minutes: int | None = None
    now: datetime | None = None
    limit: int = 200


@dataclass(frozen=True)
class ReconcilePaymentsResult:
    linked: int = 0
    abandoned: int = 0
    errors: int = 0


def _is_latest_attempt(attempt: PaymentAttempt) -> bool:
    return not (
        PaymentAttempt.objects.filter(
            order_id=attempt.order_id,
            created_at__gt=attempt.created_at,
            status__in=[PaymentAttempt.STATUS_CREATED, PaymentAttempt.STATUS_PAID],
        )
        .exclude(pk=attempt.pk)
        .exists()
    )


class ReconcilePaymentsUseCase:
    """
    Closes the window where a gateway order was created but the local write
    after it never landed. Attempts still `initiated` after the grace period are
    looked up at the gateway by receipt.
    """

    @staticmethod
    def execute(cmd: ReconcilePaymentsCommand) -> ReconcilePaymentsResult:
        grace = cmd.grace_minutes if cmd.grace_minutes is not None else settings.PAYMENT_RECONCILE_GRACE_MINUTES
        cutoff = (cmd.now or timezone.now()) - timedelta(minutes=grace)
        stale = list(
            PaymentAttempt.objects.filter(status=PaymentAttempt.STATUS_INITIATED, created_at__lt=cutoff).order_by(
                "created_at"
            )[: cmd.limit]
        )

        linked = abandoned = errors = 0
        for attempt in stale:
            try:
                outcome = ReconcilePaymentsUseCase._reconcile_one(attempt)
            except (PaymentDomainError, OrderDomainError):
                logger.exception(
                    "reconcile_attempt_failed", extra={"receipt": attempt.receipt, "order_id": attempt.order_id}
                )
                errors += 1
                continue
            if outcome == PaymentAttempt.STATUS_CREATED:
                linked += 1
            elif outcome == PaymentAttempt.STATUS_ABANDONED:
                abandoned += 1

        return ReconcilePaymentsResult(linked=linked, abandoned=abandoned, errors=errors)

    @staticmethod
    def _reconcile_one(attempt: PaymentAttempt) -> str | None:
        gateway = PaymentGatewayFacade.get(attempt.gateway_code)
        found = gateway.find_order_by_receipt(receipt=attempt.receipt)

        if found is None:
            updated = PaymentAttempt.objects.filter(pk=attempt.pk, status=PaymentAttempt.STATUS_INITIATED).update(
                status=PaymentAttempt.STATUS_ABANDONED,
                last_error="not found at gateway",
                updated_at=timezone.now(),
            )
            if not updated:
                return None
            logger.info("reconcile_abandoned", extra={"receipt": attempt.receipt, "order_id": attempt.order_id})
            return PaymentAttempt.STATUS_ABANDONED

        with transaction.atomic():
            updated = PaymentAttempt.objects.filter(pk=attempt.pk, status=PaymentAttempt.STATUS_INITIATED).update(
                status=PaymentAttempt.STATUS_CREATED,
                gateway_order_id=found.id,
                updated_at=timezone.now(),
            )
            if not updated:
                return None
            if attempt.order_id and _is_latest_attempt(attempt):
                order = OrderService.get(attempt.order_id)
                if not order.payment_verified and order.gateway_order_id != found.id:
                    OrderService.apply_change(
                        order,
                        changes={"gateway_order_id": found.id},
                        event=TimelineEvent.PAYMENT_INITIATED,
                        message="Payment initiated (reconciled)",
                        actor_label=SYSTEM_ACTOR,
                    )
        logger.info(
            "reconcile_linked",
            extra={"receipt": attempt.receipt, "order_id": attempt.order_id, "gateway_order_id": found.id},
        )
        return PaymentAttempt.STATUS_CREATED

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.orders.domain.errors import OrderConcurrencyError, OrderNotFoundError
from apps.orders.domain.status import SYSTEM_ACTOR, TimelineEvent
from apps.orders.models import Order, OrderTimelineEntry

logger = logging.getLogger("consultdesk.orders")


def actor_label_for(actor) -> str:
    if actor is None:
        return SYSTEM_ACTOR
    return str(actor.pk)


class OrderService:
    """
    Every order mutation goes through `apply_change`: a conditional update on
    `version` plus one timeline entry, in one transaction.
    """

    @staticmethod
    def get(order_id: str) -> Order:
        order = Order.objects.select_related("service", "client", "assigned_to").filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError()
        return order

    @staticmethod
    def append_timeline(
        order: Order,
        *,
        event: TimelineEvent,
        message: str,
        actor=None,
        actor_label: str | None = None,
    ) -> OrderTimelineEntry:
        return OrderTimelineEntry.objects.create(
            order=order,
            status=order.status,
            event=event.value,
            message=message,
            actor=actor,
            actor_label=actor_label or actor_label_for(actor),
        )

    @staticmethod
    def apply_change(
        order: Order,
        *,
        changes: dict,
        event: TimelineEvent,
        message: str,
        actor=None,
        actor_label: str | None = None,
    ) -> Order:
        now = timezone.now()
        updated_at = max(now, order.updated_at) if order.updated_at else now

        with transaction.atomic():
            rows = Order.objects.filter(pk=order.pk, version=order.version).update(
                **changes,
                version=F("version") + 1,
                updated_at=updated_at,
            )
            if rows != 1:
                logger.warning(
                    "order_version_conflict",
                    extra={"order_id": order.pk, "expected_version": order.version, "event": event.value},
                )
                raise OrderConcurrencyError()

            for name, value in changes.items():
                setattr(order, name, value)
            order.version += 1
            order.updated_at = updated_at
            OrderService.append_timeline(
                order,
                event=event,
                message=message,
                actor=actor,
                actor_label=actor_label,
            )

        logger.info(
            "order_changed",
            extra={"order_id": order.pk, "event": event.value, "status": order.status, "version": order.version},
        )
        return order

from __future__ import annotations

import logging
from dataclasses import dataclass

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.orders.application.access import ensure_can_access
from apps.orders.domain.policies import validate_message_body, validate_upload
from apps.orders.models import OrderMessage
from apps.orders.services.order_service import OrderService

logger = logging.getLogger("consultdesk.orders")


@dataclass(frozen=True)
class SendOrderMessageCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    body: str = ""
    attachment: object = None


class SendOrderMessageUseCase:
    """Messages are a side channel: they leave the order row and its version alone."""

    @staticmethod
    def execute(cmd: SendOrderMessageCommand) -> OrderMessage:
        size = validate_upload(cmd.attachment, field="attachment", required=False)
        body = validate_message_body(cmd.body, has_attachment=cmd.attachment is not None)

        order = OrderService.get(cmd.order_id)
        ensure_can_access(order, cmd.identity)

        message = OrderMessage(
            order=order,
            sender=cmd.actor,
            sender_name=cmd.identity.display_name[:200] or cmd.identity.email[:200],
            sender_role=cmd.identity.role.value,
            body=body,
        )
        if cmd.attachment is not None:
            message.attachment = cmd.attachment
            message.attachment_name = (getattr(cmd.attachment, "name", "") or "attachment")[:255]
            message.attachment_content_type = (getattr(cmd.attachment, "content_type", "") or "")[:120]
            message.attachment_size = size
        message.save()

        logger.info(
            "order_message_sent",
            extra={"order_id": order.pk, "sender_role": message.sender_role, "has_attachment": size > 0},
        )
        return message


class ListOrderMessagesUseCase:
    @staticmethod
    def execute(*, identity: SessionIdentity, order_id: str) -> list[OrderMessage]:
        order = OrderService.get(order_id)
        ensure_can_access(order, identity)
        return list(order.messages.all())


class MarkOrderMessagesReadUseCase:
    """Marks what the other side wrote as read; returns how many changed."""

    @staticmethod
    def execute(*, identity: SessionIdentity, order_id: str) -> int:
        order = OrderService.get(order_id)
        ensure_can_access(order, identity)
        return order.messages.filter(is_read=False).exclude(sender_id=identity.user_id).update(is_read=True)

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.orders.application.access import ensure_can_access, ensure_staff
from apps.orders.domain.errors import ComplaintNotFoundError, OrderAccessDeniedError, OrderValidationError
from apps.orders.domain.policies import validate_complaint, validate_complaint_status, validate_upload
from apps.orders.domain.status import TimelineEvent
from apps.orders.models import OrderComplaint
from apps.orders.services.order_service import OrderService

logger = logging.getLogger("consultdesk.orders")

MAX_RESOLUTION_LENGTH = 5000


@dataclass(frozen=True)
class SubmitComplaintCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    complaint_type: str | None
    description: str | None
    attachment: object = None


class SubmitComplaintUseCase:
    @staticmethod
    def execute(cmd: SubmitComplaintCommand) -> OrderComplaint:
        complaint_type, description = validate_complaint(cmd.complaint_type, cmd.description)
        validate_upload(cmd.attachment, field="attachment", required=False)

        order = OrderService.get(cmd.order_id)
        if order.client_id != cmd.identity.user_id:
            raise OrderAccessDeniedError("Only the client who placed the order can file a complaint.")

        with transaction.atomic():
            OrderService.apply_change(
                order,
                changes={"has_complaint": True},
                event=TimelineEvent.COMPLAINT_SUBMITTED,
                message="Client submitted a complaint",
                actor=cmd.actor,
            )
            complaint = OrderComplaint(
                order=order,
                submitted_by=cmd.actor,
                complaint_type=complaint_type.value,
                description=description,
            )
            if cmd.attachment is not None:
                complaint.attachment = cmd.attachment
                complaint.attachment_name = (getattr(cmd.attachment, "name", "") or "attachment")[:255]
            complaint.save()

        logger.info(
            "order_complaint_submitted",
            extra={"order_id": order.pk, "complaint_id": complaint.pk, "complaint_type": complaint.complaint_type},
        )
        return complaint


class ListComplaintsUseCase:
    @staticmethod
    def execute(*, identity: SessionIdentity, order_id: str) -> list[OrderComplaint]:
        order = OrderService.get(order_id)
        ensure_can_access(order, identity)
        return list(order.complaints.all())


@dataclass(frozen=True)
class UpdateComplaintCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    complaint_id: int
    status: str | None
    resolution: str | None = None


class UpdateComplaintUseCase:
    @staticmethod
    def execute(cmd: UpdateComplaintCommand) -> OrderComplaint:
        ensure_staff(cmd.identity)
        new_status = validate_complaint_status(cmd.status)
        resolution = cmd.resolution.strip() if isinstance(cmd.resolution, str) else ""
        if len(resolution) > MAX_RESOLUTION_LENGTH:
            raise OrderValidationError("Resolution is too long.", field="resolution")

        order = OrderService.get(cmd.order_id)
        complaint = OrderComplaint.objects.filter(pk=cmd.complaint_id, order=order).first()
        if complaint is None:
            raise ComplaintNotFoundError()

        with transaction.atomic():
            OrderService.apply_change(
                order,
                changes={},
                event=TimelineEvent.COMPLAINT_UPDATED,
                message=f"Complaint marked {new_status.value}",
                actor=cmd.actor,
            )
            complaint.status = new_status.value
            if resolution:
                complaint.resolution = resolution
            complaint.updated_at = timezone.now()
            complaint.save(update_fields=["status", "resolution", "updated_at"])

        logger.info(
            "order_complaint_updated",
            extra={"order_id": order.pk, "complaint_id": complaint.pk, "status": complaint.status},
        )
        return complaint

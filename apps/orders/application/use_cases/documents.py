from __future__ import annotations

from dataclasses import dataclass

from django.core.files.storage import default_storage
from django.db import transaction

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.orders.application.access import ensure_can_access
from apps.orders.domain.errors import DocumentNotFoundError, OrderAccessDeniedError, OrderTransitionError
from apps.orders.domain.policies import validate_document_category, validate_upload
from apps.orders.domain.status import OrderStatus, TimelineEvent
from apps.orders.models import Order, OrderDocument
from apps.orders.services.order_service import OrderService


def _ensure_open(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise OrderTransitionError("Documents cannot be changed on a cancelled order.", field="status")


@dataclass(frozen=True)
class AttachDocumentCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    uploaded_file: object
    category: str | None = None
    name: str = ""


class AttachDocumentUseCase:
    @staticmethod
    def execute(cmd: AttachDocumentCommand) -> OrderDocument:
        size = validate_upload(cmd.uploaded_file)
        category = validate_document_category(cmd.category)

        order = OrderService.get(cmd.order_id)
        ensure_can_access(order, cmd.identity)
        _ensure_open(order)

        name = (cmd.name or "").strip() or getattr(cmd.uploaded_file, "name", "") or "document"
        with transaction.atomic():
            OrderService.apply_change(
                order,
                changes={},
                event=TimelineEvent.DOCUMENT_UPLOADED,
                message=f'Document "{name}" uploaded',
                actor=cmd.actor,
            )
            document = OrderDocument.objects.create(
                order=order,
                name=name[:255],
                file=cmd.uploaded_file,
                content_type=getattr(cmd.uploaded_file, "content_type", "") or "",
                size=size,
                category=category.value,
                uploaded_by=cmd.actor,
            )
        return document


@dataclass(frozen=True)
class DeleteDocumentCommand:
    actor: object
    identity: SessionIdentity
    order_id: str
    document_id: int


class DeleteDocumentUseCase:
    @staticmethod
    def execute(cmd: DeleteDocumentCommand) -> None:
        order = OrderService.get(cmd.order_id)
        ensure_can_access(order, cmd.identity)
        _ensure_open(order)

        document = OrderDocument.objects.filter(pk=cmd.document_id, order=order).first()
        if document is None:
            raise DocumentNotFoundError()
        if not cmd.identity.is_staff_role and document.uploaded_by_id != cmd.identity.user_id:
            raise OrderAccessDeniedError("Only the uploader or staff can delete this document.")

        file_path = document.file.name
        with transaction.atomic():
            OrderService.apply_change(
                order,
                changes={},
                event=TimelineEvent.DOCUMENT_DELETED,
                message=f'Document "{document.name}" deleted',
                actor=cmd.actor,
            )
            document.delete()
            if file_path:
                transaction.on_commit(lambda: default_storage.delete(file_path))

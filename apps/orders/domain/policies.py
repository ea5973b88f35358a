from __future__ import annotations

import re
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import OrderValidationError
from .status import CANCELLATION_REASONS, OTHER_REASON, ComplaintStatus, ComplaintType, DocumentCategory

ORDER_ID_PREFIX = "ord_"
MAX_AMOUNT = Decimal("9999999999.99")
MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
MAX_REASON_LENGTH = 500
MAX_MESSAGE_LENGTH = 5000
MAX_COMPLAINT_LENGTH = 5000

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def new_order_id() -> str:
    return f"{ORDER_ID_PREFIX}{uuid.uuid4().hex}"


def validate_amount(raw, *, field: str = "amount") -> Decimal:
    """
    Accepts ints, floats, Decimals and decimal strings. Booleans are rejected even
    though they are ints in Python.
    """
    if raw is None or raw == "":
        raise OrderValidationError("Amount is required.", field=field)
    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal, str)):
        raise OrderValidationError("Amount must be a number.", field=field)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise OrderValidationError("Amount must be a number.", field=field) from exc
    if not value.is_finite():
        raise OrderValidationError("Amount must be a number.", field=field)

    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value <= 0:
        raise OrderValidationError("Amount must be greater than zero.", field=field)
    if value > MAX_AMOUNT:
        raise OrderValidationError("Amount is too large.", field=field)
    return value


def validate_currency(raw, *, field: str = "currency") -> str:
    value = (raw or "").strip().upper() if isinstance(raw, str) else ""
    if not _CURRENCY_RE.match(value):
        raise OrderValidationError("Currency must be a 3-letter code.", field=field)
    return value


def validate_client_details(raw, *, field: str = "clientDetails") -> dict:
    if not isinstance(raw, dict) or not raw:
        raise OrderValidationError("Client details are required.", field=field)
    return raw


def resolve_cancellation_reason(reason, other_text=None) -> str:
    """The reason must come from the fixed list; `Other` requires free text."""
    reason = (reason or "").strip() if isinstance(reason, str) else ""
    if reason not in CANCELLATION_REASONS:
        raise OrderValidationError("Select a valid cancellation reason.", field="reason")
    if reason != OTHER_REASON:
        return reason

    text = (other_text or "").strip() if isinstance(other_text, str) else ""
    if not text:
        raise OrderValidationError("Describe the reason for cancellation.", field="otherReason")
    if len(text) > MAX_REASON_LENGTH:
        raise OrderValidationError("Cancellation reason is too long.", field="otherReason")
    return text


def validate_document_category(raw) -> DocumentCategory:
    try:
        return DocumentCategory((raw or DocumentCategory.OTHER.value).strip().lower())
    except (ValueError, AttributeError) as exc:
        raise OrderValidationError("Unknown document category.", field="category") from exc


def validate_message_body(raw, *, has_attachment: bool = False) -> str:
    """A message needs text unless it carries an attachment."""
    body = raw.strip() if isinstance(raw, str) else ""
    if not body and not has_attachment:
        raise OrderValidationError("Message cannot be empty.", field="message")
    if len(body) > MAX_MESSAGE_LENGTH:
        raise OrderValidationError("Message is too long.", field="message")
    return body


def validate_complaint(raw_type, raw_description) -> tuple[ComplaintType, str]:
    try:
        complaint_type = ComplaintType((raw_type or "").strip().lower())
    except (ValueError, AttributeError) as exc:
        raise OrderValidationError("Select a valid complaint type.", field="complaintType") from exc

    description = raw_description.strip() if isinstance(raw_description, str) else ""
    if not description:
        raise OrderValidationError("Describe the problem.", field="description")
    if len(description) > MAX_COMPLAINT_LENGTH:
        raise OrderValidationError("Description is too long.", field="description")
    return complaint_type, description


def validate_complaint_status(raw) -> ComplaintStatus:
    try:
        return ComplaintStatus((raw or "").strip().lower())
    except (ValueError, AttributeError) as exc:
        raise OrderValidationError("Unknown complaint status.", field="status") from exc


def validate_upload(uploaded_file, *, field: str = "file", required: bool = True) -> int:
    """Returns the size in bytes, or 0 when an optional upload is absent."""
    if uploaded_file is None:
        if required:
            raise OrderValidationError("A file is required.", field=field)
        return 0
    size = getattr(uploaded_file, "size", 0) or 0
    if size <= 0:
        raise OrderValidationError("The file is empty.", field=field)
    if size > MAX_DOCUMENT_BYTES:
        raise OrderValidationError("The file is too large.", field=field)
    return size

from __future__ import annotations

from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.replace("-", " ").title()) for member in cls]


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    FAILED = "failed"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.title()) for member in cls]


class TimelineEvent(StrEnum):
    CREATED = "order_created"
    PAYMENT_INITIATED = "payment_initiated"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_AFTER_CANCELLATION = "payment_received_after_cancellation"
    PAYMENT_VERIFICATION_FAILED = "payment_verification_failed"
    PAYMENT_FAILED = "payment_failed"
    CANCELLED = "order_cancelled"
    STATUS_UPDATED = "status_updated"
    ASSIGNED = "handler_assigned"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_DELETED = "document_deleted"
    COMPLAINT_SUBMITTED = "complaint_submitted"
    COMPLAINT_UPDATED = "complaint_updated"


class DocumentCategory(StrEnum):
    CONTRACT = "contract"
    INVOICE = "invoice"
    REPORT = "report"
    IDENTIFICATION = "identification"
    FINANCIAL = "financial"
    LEGAL = "legal"
    OTHER = "other"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.title()) for member in cls]


class ComplaintType(StrEnum):
    WRONG_WORK = "wrong-work"
    DELAYED = "delayed"
    POOR_QUALITY = "poor-quality"
    BILLING_ISSUE = "billing-issue"
    OTHER = "other"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.replace("-", " ").capitalize()) for member in cls]


class ComplaintStatus(StrEnum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.replace("-", " ").capitalize()) for member in cls]


# No client cancellation or document change once an order reaches one of these.
CLOSED_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

OTHER_REASON = "Other"

CANCELLATION_REASONS: tuple[str, ...] = (
    "Change in business requirements",
    "Service no longer needed",
    "Found alternative solution",
    "Budget constraints",
    "Timeline issues",
    "Not satisfied with communication",
    OTHER_REASON,
)

SYSTEM_ACTOR = "system"
GATEWAY_ACTOR = "gateway"

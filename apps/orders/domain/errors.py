from __future__ import annotations


class OrderDomainError(ValueError):
    """Base class for order lifecycle errors."""

    http_status = 400
    retryable = False

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class OrderValidationError(OrderDomainError):
    pass


class OrderNotFoundError(OrderDomainError):
    http_status = 404

    def __init__(self, message: str = "Order not found.", *, field: str | None = "orderId"):
        super().__init__(message, field=field)


class OrderAccessDeniedError(OrderDomainError):
    http_status = 403

    def __init__(self, message: str = "You do not have access to this order.", *, field: str | None = None):
        super().__init__(message, field=field)


class OrderTransitionError(OrderDomainError):
    """The requested change is not allowed from the order's current state."""

    http_status = 409


class OrderConcurrencyError(OrderDomainError):
    """Another writer changed the order between read and write."""

    http_status = 409
    retryable = True

    def __init__(self, message: str = "Order was modified concurrently. Reload and retry.", *, field: str | None = None):
        super().__init__(message, field=field)


class DocumentNotFoundError(OrderDomainError):
    http_status = 404

    def __init__(self, message: str = "Document not found.", *, field: str | None = "documentId"):
        super().__init__(message, field=field)


class ComplaintNotFoundError(OrderDomainError):
    http_status = 404

    def __init__(self, message: str = "Complaint not found.", *, field: str | None = "complaintId"):
        super().__init__(message, field=field)

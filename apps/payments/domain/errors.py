from __future__ import annotations


class PaymentDomainError(ValueError):
    http_status = 400
    retryable = False

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class PaymentValidationError(PaymentDomainError):
    pass


class PaymentNotFoundError(PaymentDomainError):
    http_status = 404


class PaymentConflictError(PaymentDomainError):
    http_status = 409


class SignatureMismatchError(PaymentDomainError):
    """Never a soft failure: the transition stops and the mismatch is recorded."""

    def __init__(self, message: str = "Invalid payment signature.", *, field: str | None = "signature"):
        super().__init__(message, field=field)


class GatewayRejectedError(PaymentDomainError):
    """The gateway answered with an error; its description is passed through as-is."""

    def __init__(self, message: str, *, status_code: int = 400, field: str | None = None):
        super().__init__(message, field=field)
        self.http_status = status_code if 400 <= status_code < 500 else 400


class GatewayUnavailableError(PaymentDomainError):
    """Transport failure, timeout or a 5xx from the gateway."""

    http_status = 500
    retryable = True
    public_message = "Payment gateway is unavailable. Please retry."


class PaymentConfigurationError(PaymentDomainError):
    http_status = 500
    public_message = "Payment gateway is not configured."

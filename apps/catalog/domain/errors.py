from __future__ import annotations


class CatalogDomainError(ValueError):
    http_status = 400
    retryable = False


class ServiceNotFoundError(CatalogDomainError):
    http_status = 404

    def __init__(self, message: str = "Service not found.", *, field: str | None = "serviceId"):
        super().__init__(message)
        self.field = field

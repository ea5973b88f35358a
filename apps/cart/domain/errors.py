from __future__ import annotations


class CartDomainError(ValueError):
    http_status = 400
    retryable = False

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class CartValidationError(CartDomainError):
    pass


class CartItemNotFoundError(CartDomainError):
    http_status = 404

    def __init__(self, message: str = "Item is not in the cart.", *, field: str | None = "serviceId"):
        super().__init__(message, field=field)


class EmptyCartError(CartDomainError):
    def __init__(self, message: str = "Cart is empty.", *, field: str | None = None):
        super().__init__(message, field=field)

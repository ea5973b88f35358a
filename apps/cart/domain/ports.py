from __future__ import annotations

from typing import Protocol

from apps.cart.domain.types import CartLine


class CartRepository(Protocol):
    def lines(self, *, user) -> list[CartLine]:
        ...

    def add(self, *, user, service, quantity: int) -> CartLine:
        ...

    def set_quantity(self, *, user, service_id: str, quantity: int) -> CartLine | None:
        ...

    def remove(self, *, user, service_id: str) -> bool:
        ...

    def clear(self, *, user) -> int:
        ...

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

MAX_QUANTITY = 10


@dataclass(frozen=True)
class CartLine:
    service_id: str
    service_name: str
    unit_price: Decimal
    currency: str
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    currency: str

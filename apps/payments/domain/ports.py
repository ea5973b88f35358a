from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount: int
    currency: str
    receipt: str
    status: str
    raw: dict = field(default_factory=dict, compare=False, repr=False)


class PaymentGatewayPort(Protocol):
    code: str
    name: str

    @property
    def key_id(self) -> str:
        ...

    def create_order(self, *, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        ...

    def find_order_by_receipt(self, *, receipt: str) -> GatewayOrder | None:
        ...

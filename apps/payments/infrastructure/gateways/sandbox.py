from __future__ import annotations

from uuid import uuid4

from apps.payments.domain.ports import GatewayOrder


class SandboxGateway:
    """In-process stand-in for development and tests. Orders live for the life of the process."""

    code = "sandbox"
    name = "Sandbox"
    _orders_by_receipt: dict[str, GatewayOrder] = {}

    @classmethod
    def from_settings(cls) -> "SandboxGateway":
        return cls()

    @classmethod
    def reset(cls) -> None:
        cls._orders_by_receipt.clear()

    @property
    def key_id(self) -> str:
        return "rzp_test_sandbox"

    def create_order(self, *, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        order = GatewayOrder(
            id=f"order_sandbox{uuid4().hex[:14]}",
            amount=amount_minor,
            currency=currency,
            receipt=receipt,
            status="created",
            raw={"notes": dict(notes)},
        )
        self._orders_by_receipt[receipt] = order
        return order

    def find_order_by_receipt(self, *, receipt: str) -> GatewayOrder | None:
        return self._orders_by_receipt.get(receipt)

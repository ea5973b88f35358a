from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction

from apps.cart.domain.errors import CartItemNotFoundError, CartValidationError
from apps.cart.domain.ports import CartRepository
from apps.cart.domain.types import MAX_QUANTITY, CartLine, CartTotals
from apps.cart.infrastructure.repository import DjangoCartRepository
from apps.catalog.services.catalog_service import CatalogService

CENT = Decimal("0.01")


def _parse_quantity(raw, *, allow_zero: bool = False) -> int:
    if isinstance(raw, bool):
        raise CartValidationError("Quantity must be a whole number.", field="quantity")
    try:
        quantity = int(raw)
    except (TypeError, ValueError) as exc:
        raise CartValidationError("Quantity must be a whole number.", field="quantity") from exc
    minimum = 0 if allow_zero else 1
    if quantity < minimum or quantity > MAX_QUANTITY:
        raise CartValidationError(f"Quantity must be between {minimum} and {MAX_QUANTITY}.", field="quantity")
    return quantity


def compute_totals(lines: list[CartLine], *, tax_rate: Decimal) -> CartTotals:
    subtotal = sum((line.line_total for line in lines), Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)
    tax = (subtotal * tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
    currency = lines[0].currency if lines else "INR"
    return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, currency=currency)


class CartService:
    repository: CartRepository = DjangoCartRepository()

    @staticmethod
    def tax_rate() -> Decimal:
        return Decimal(str(settings.PAYMENT_TAX_RATE))

    @classmethod
    def lines(cls, *, user) -> list[CartLine]:
        return cls.repository.lines(user=user)

    @classmethod
    def totals(cls, *, user) -> CartTotals:
        return compute_totals(cls.lines(user=user), tax_rate=cls.tax_rate())

    @classmethod
    @transaction.atomic
    def add_item(cls, *, user, service_id: str, quantity=1) -> CartLine:
        quantity = _parse_quantity(quantity)
        service = CatalogService.get_active(service_id)
        existing = {line.service_id: line for line in cls.repository.lines(user=user)}
        if any(line.currency != service.price_currency for line in existing.values()):
            raise CartValidationError("All cart items must use the same currency.", field="serviceId")
        current = existing.get(service.pk)
        if current is not None and current.quantity + quantity > MAX_QUANTITY:
            raise CartValidationError(f"Quantity must be between 1 and {MAX_QUANTITY}.", field="quantity")
        return cls.repository.add(user=user, service=service, quantity=quantity)

    @classmethod
    @transaction.atomic
    def update_quantity(cls, *, user, service_id: str, quantity) -> CartLine | None:
        """Setting the quantity to zero removes the line."""
        quantity = _parse_quantity(quantity, allow_zero=True)
        if quantity == 0:
            cls.remove_item(user=user, service_id=service_id)
            return None
        line = cls.repository.set_quantity(user=user, service_id=service_id, quantity=quantity)
        if line is None:
            raise CartItemNotFoundError()
        return line

    @classmethod
    def remove_item(cls, *, user, service_id: str) -> None:
        if not cls.repository.remove(user=user, service_id=service_id):
            raise CartItemNotFoundError()

    @classmethod
    def clear(cls, *, user) -> int:
        return cls.repository.clear(user=user)

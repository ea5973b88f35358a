from __future__ import annotations

from apps.cart.domain.types import CartLine
from apps.cart.models import Cart, CartItem


def _line(item: CartItem) -> CartLine:
    return CartLine(
        service_id=item.service_id,
        service_name=item.service.name,
        unit_price=item.service.price_amount,
        currency=item.service.price_currency,
        quantity=item.quantity,
    )


class DjangoCartRepository:
    @staticmethod
    def _cart(user) -> Cart:
        cart, _ = Cart.objects.get_or_create(user=user)
        return cart

    def lines(self, *, user) -> list[CartLine]:
        items = CartItem.objects.filter(cart__user=user).select_related("service")
        return [_line(item) for item in items]

    def add(self, *, user, service, quantity: int) -> CartLine:
        cart = self._cart(user)
        item, created = CartItem.objects.select_for_update().get_or_create(
            cart=cart,
            service=service,
            defaults={"quantity": quantity},
        )
        if not created:
            item.quantity += quantity
            item.save(update_fields=["quantity"])
        cart.save(update_fields=["updated_at"])
        return _line(item)

    def set_quantity(self, *, user, service_id: str, quantity: int) -> CartLine | None:
        item = CartItem.objects.select_related("service").filter(cart__user=user, service_id=service_id).first()
        if item is None:
            return None
        item.quantity = quantity
        item.save(update_fields=["quantity"])
        return _line(item)

    def remove(self, *, user, service_id: str) -> bool:
        deleted, _ = CartItem.objects.filter(cart__user=user, service_id=service_id).delete()
        return deleted > 0

    def clear(self, *, user) -> int:
        deleted, _ = CartItem.objects.filter(cart__user=user).delete()
        return deleted

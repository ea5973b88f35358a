from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.cart.domain.errors import CartItemNotFoundError, CartValidationError
from apps.cart.domain.types import CartLine
from apps.cart.models import CartItem
from apps.cart.services.cart_service import CartService, compute_totals
from apps.catalog.domain.errors import ServiceNotFoundError
from apps.catalog.models import Service
from apps.orders.domain.status import OrderStatus
from apps.orders.models import Order

PASSWORD = "StrongPass12345!"


def make_user(email: str):
    user = get_user_model().objects.create_user(username=email, email=email, password=PASSWORD)
    AccountProfile.objects.create(user=user, role=UserRole.CLIENT.value, display_name="Asha Rao")
    return user


class CartTotalsTests(TestCase):
    def test_totals_apply_tax_to_subtotal(self):
        lines = [
            CartLine("svc-1", "Annual Tax Filing", Decimal("5000"), "INR", 1),
            CartLine("svc-4", "GST Compliance", Decimal("3000"), "INR", 2),
        ]
        totals = compute_totals(lines, tax_rate=Decimal("0.18"))
        self.assertEqual(totals.subtotal, Decimal("11000.00"))
        self.assertEqual(totals.tax, Decimal("1980.00"))
        self.assertEqual(totals.total, Decimal("12980.00"))

    def test_empty_cart_totals_are_zero(self):
        totals = compute_totals([], tax_rate=Decimal("0.18"))
        self.assertEqual(totals.total, Decimal("0.00"))


@override_settings(PAYMENT_TAX_RATE="0.18")
class CartServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = make_user("client@example.com")
        self.tax = Service.objects.create(id="svc-1", name="Annual Tax Filing", category="tax", price_amount=5000)
        self.gst = Service.objects.create(id="svc-4", name="GST Compliance", category="tax", price_amount=3000)

    def test_adding_same_service_accumulates(self):
        CartService.add_item(user=self.user, service_id="svc-1")
        CartService.add_item(user=self.user, service_id="svc-1", quantity=2)
        self.assertEqual(CartItem.objects.get().quantity, 3)

    def test_quantity_bounds(self):
        for quantity in (0, -1, 11, True, "two", None):
            with self.assertRaises(CartValidationError, msg=repr(quantity)):
                CartService.add_item(user=self.user, service_id="svc-1", quantity=quantity)
        CartService.add_item(user=self.user, service_id="svc-1", quantity=10)
        with self.assertRaises(CartValidationError):
            CartService.add_item(user=self.user, service_id="svc-1")

    def test_inactive_service_cannot_be_added(self):
        Service.objects.filter(pk="svc-4").update(is_active=False)
        with self.assertRaises(ServiceNotFoundError):
            CartService.add_item(user=self.user, service_id="svc-4")

    def test_mixed_currency_rejected(self):
        Service.objects.create(id="svc-usd", name="US Filing", category="tax", price_amount=100, price_currency="USD")
        CartService.add_item(user=self.user, service_id="svc-1")
        with self.assertRaises(CartValidationError):
            CartService.add_item(user=self.user, service_id="svc-usd")

    def test_update_to_zero_removes_line(self):
        CartService.add_item(user=self.user, service_id="svc-1")
        CartService.update_quantity(user=self.user, service_id="svc-1", quantity=0)
        self.assertEqual(CartService.lines(user=self.user), [])
        with self.assertRaises(CartItemNotFoundError):
            CartService.update_quantity(user=self.user, service_id="svc-1", quantity=2)

    def test_totals_follow_current_prices(self):
        CartService.add_item(user=self.user, service_id="svc-4", quantity=2)
        Service.objects.filter(pk="svc-4").update(price_amount=Decimal("3500"))
        totals = CartService.totals(user=self.user)
        self.assertEqual(totals.subtotal, Decimal("7000.00"))
        self.assertEqual(totals.total, Decimal("8260.00"))

    def test_carts_are_per_user(self):
        other = make_user("other@example.com")
        CartService.add_item(user=self.user, service_id="svc-1")
        self.assertEqual(CartService.lines(user=other), [])


@override_settings(PAYMENT_TAX_RATE="0.18")
class CartApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.api = APIClient()
        self.user = make_user("client@example.com")
        Service.objects.create(id="svc-1", name="Annual Tax Filing", category="tax", price_amount=5000)
        Service.objects.create(id="svc-4", name="GST Compliance", category="tax", price_amount=3000)
        token = AccountIdentityService.issue_tokens(self.user)["access"]
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def test_cart_flow(self):
        response = self.api.post("/api/cart/items", data={"serviceId": "svc-1"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.api.post("/api/cart/items", data={"serviceId": "svc-4", "quantity": 2}, format="json")

        cart = self.api.get("/api/cart/").json()
        self.assertEqual(len(cart["items"]), 2)
        self.assertEqual(cart["subtotal"], "11000.00")
        self.assertEqual(cart["tax"], "1980.00")
        self.assertEqual(cart["total"], "12980.00")

        patched = self.api.patch("/api/cart/items/svc-4", data={"quantity": 1}, format="json")
        self.assertEqual(patched.json()["subtotal"], "8000.00")

        removed = self.api.delete("/api/cart/items/svc-1")
        self.assertEqual([item["serviceId"] for item in removed.json()["items"]], ["svc-4"])

        cleared = self.api.delete("/api/cart/")
        self.assertEqual(cleared.json()["items"], [])

    def test_errors(self):
        self.assertEqual(
            self.api.post("/api/cart/items", data={"serviceId": "svc-404"}, format="json").status_code, 404
        )
        self.assertEqual(
            self.api.post("/api/cart/items", data={"serviceId": "svc-1", "quantity": 50}, format="json").status_code,
            400,
        )
        self.assertEqual(self.api.delete("/api/cart/items/svc-1").status_code, 404)

    def test_requires_authentication(self):
        self.api.credentials()
        self.assertEqual(self.api.get("/api/cart/").status_code, 401)

    def test_checkout_creates_one_order_per_line_and_empties_cart(self):
        self.api.post("/api/cart/items", data={"serviceId": "svc-1"}, format="json")
        self.api.post("/api/cart/items", data={"serviceId": "svc-4", "quantity": 3}, format="json")

        response = self.api.post(
            "/api/cart/checkout",
            data={"clientDetails": {"name": "Asha Rao", "email": "asha@example.com"}},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        order_ids = response.json()["orderIds"]
        self.assertEqual(len(order_ids), 2)

        orders = {order.service_id: order for order in Order.objects.filter(pk__in=order_ids)}
        self.assertEqual(orders["svc-4"].amount, Decimal("9000.00"))
        self.assertEqual(orders["svc-4"].client_details["quantity"], 3)
        self.assertTrue(all(order.status == OrderStatus.PENDING for order in orders.values()))
        self.assertTrue(all(order.timeline.count() == 1 for order in orders.values()))
        self.assertFalse(CartItem.objects.exists())

    def test_checkout_validation_keeps_cart(self):
        empty = self.api.post("/api/cart/checkout", data={"clientDetails": {"name": "A"}}, format="json")
        self.assertEqual(empty.status_code, 400)

        self.api.post("/api/cart/items", data={"serviceId": "svc-1"}, format="json")
        response = self.api.post("/api/cart/checkout", data={}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "clientDetails")
        self.assertEqual(CartItem.objects.count(), 1)
        self.assertEqual(Order.objects.count(), 0)

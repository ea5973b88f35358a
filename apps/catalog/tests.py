from __future__ import annotations

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from apps.catalog.domain.errors import ServiceNotFoundError
from apps.catalog.models import Service
from apps.catalog.services.catalog_service import CatalogService


def make_service(service_id: str = "svc-1", **overrides) -> Service:
    values = {
        "name": "Annual Tax Filing",
        "short_description": "Yearly filing",
        "category": "tax",
        "price_amount": Decimal("5000"),
        "price_currency": "INR",
        "billing_type": Service.BILLING_ONE_TIME,
        "features": ["Deduction optimization"],
    }
    values.update(overrides)
    return Service.objects.create(id=service_id, **values)


class CatalogServiceTests(TestCase):
    def test_inactive_service_is_not_found(self):
        make_service("svc-old", is_active=False)
        with self.assertRaises(ServiceNotFoundError):
            CatalogService.get_active("svc-old")

    def test_blank_id_is_not_found(self):
        with self.assertRaises(ServiceNotFoundError):
            CatalogService.get_active("")

    def test_category_filter_is_case_insensitive_on_input(self):
        make_service("svc-1")
        make_service("svc-3", name="Financial Audit", category="audit")
        ids = list(CatalogService.list_active(category=" Audit ").values_list("id", flat=True))
        self.assertEqual(ids, ["svc-3"])


class CatalogApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.api = APIClient()
        make_service("svc-1")
        make_service("svc-4", name="GST Compliance", price_amount=Decimal("3000"), billing_type=Service.BILLING_MONTHLY)
        make_service("svc-9", name="Retired", is_active=False)

    def test_list_is_public_and_hides_inactive(self):
        response = self.api.get("/api/services/")
        self.assertEqual(response.status_code, 200)
        ids = [item["id"] for item in response.json()["data"]]
        self.assertEqual(sorted(ids), ["svc-1", "svc-4"])

    def test_detail_price_shape(self):
        response = self.api.get("/api/services/svc-4")
        self.assertEqual(response.status_code, 200)
        price = response.json()["data"]["price"]
        self.assertEqual(price, {"amount": "3000.00", "currency": "INR", "billing_type": "monthly"})

    def test_unknown_or_inactive_detail_is_404(self):
        for service_id in ("svc-404", "svc-9"):
            response = self.api.get(f"/api/services/{service_id}")
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["error"]["field"], "serviceId")


class SeedServicesCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_services", stdout=StringIO())
        call_command("seed_services", stdout=StringIO())
        self.assertEqual(Service.objects.filter(is_active=True).count(), 5)
        self.assertEqual(Service.objects.get(pk="svc-1").price_amount, Decimal("5000"))
        self.assertEqual(Service.objects.get(pk="svc-4").billing_type, Service.BILLING_MONTHLY)

    def test_deactivate_missing(self):
        make_service("svc-legacy", name="Legacy")
        out = StringIO()
        call_command("seed_services", "--deactivate-missing", stdout=out)
        self.assertFalse(Service.objects.get(pk="svc-legacy").is_active)
        self.assertIn("1 deactivated", out.getvalue())

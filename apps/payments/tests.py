from __future__ import annotations

import json
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.catalog.models import Service
from apps.orders.domain.errors import OrderConcurrencyError
from apps.orders.domain.status import OrderStatus, PaymentStatus, TimelineEvent
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.application.use_cases.reconcile_payments import (
    ReconcilePaymentsCommand,
    ReconcilePaymentsUseCase,
)
from apps.payments.domain.amounts import chargeable_minor_units, new_receipt
from apps.payments.domain.errors import PaymentConfigurationError
from apps.payments.domain.signatures import (
    compute_payment_signature,
    compute_webhook_signature,
    verify_payment_signature,
    verify_webhook_signature,
)
from apps.payments.infrastructure.gateways.sandbox import SandboxGateway
from apps.payments.models import PaymentAttempt, PaymentEvent

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"
PASSWORD = "StrongPass12345!"

GATEWAY_SETTINGS = {
    "PAYMENT_GATEWAY": "sandbox",
    "RAZORPAY_KEY_ID": "rzp_test_key",
    "RAZORPAY_KEY_SECRET": KEY_SECRET,
    "RAZORPAY_WEBHOOK_SECRET": WEBHOOK_SECRET,
    "PAYMENT_TAX_RATE": "0.18",
}


def make_user(email: str, role: UserRole = UserRole.CLIENT):
    user = get_user_model().objects.create_user(username=email, email=email, password=PASSWORD)
    AccountProfile.objects.create(user=user, role=role.value, display_name=email.split("@")[0])
    return user


class SignatureTests(SimpleTestCase):
    def test_payment_signature_is_deterministic(self):
        first = compute_payment_signature("order_A", "pay_B", "secret")
        self.assertEqual(first, compute_payment_signature("order_A", "pay_B", "secret"))
        self.assertEqual(len(first), 64)
        self.assertTrue(
            verify_payment_signature(
                gateway_order_id="order_A", gateway_payment_id="pay_B", signature=first, secret="secret"
            )
        )

    def test_wrong_secret_or_swapped_ids_fail(self):
        signature = compute_payment_signature("order_A", "pay_B", "other-secret")
        self.assertFalse(
            verify_payment_signature(
                gateway_order_id="order_A", gateway_payment_id="pay_B", signature=signature, secret="secret"
            )
        )
        swapped = compute_payment_signature("pay_B", "order_A", "secret")
        self.assertFalse(
            verify_payment_signature(
                gateway_order_id="order_A", gateway_payment_id="pay_B", signature=swapped, secret="secret"
            )
        )

    def test_malformed_input_is_false_not_an_error(self):
        for signature in ("", "zz", "é" * 64, None, 123):
            self.assertFalse(
                verify_payment_signature(
                    gateway_order_id="order_A", gateway_payment_id="pay_B", signature=signature, secret="secret"
                )
            )
        valid = compute_payment_signature("order_A", "pay_B", "secret")
        self.assertFalse(
            verify_payment_signature(gateway_order_id="order_A", gateway_payment_id="pay_B", signature=valid, secret="")
        )

    def test_webhook_signature(self):
        body = b'{"event":"payment.captured"}'
        signature = compute_webhook_signature(body, "hook")
        self.assertTrue(verify_webhook_signature(body=body, signature=signature, secret="hook"))
        self.assertFalse(verify_webhook_signature(body=body + b" ", signature=signature, secret="hook"))
        self.assertFalse(verify_webhook_signature(body=b"", signature=signature, secret="hook"))


class AmountTests(SimpleTestCase):
    def test_tax_surcharge_in_minor_units(self):
        rate = Decimal("0.18")
        self.assertEqual(chargeable_minor_units(Decimal("1000"), rate), 118000)
        self.assertEqual(chargeable_minor_units(Decimal("0.01"), rate), 1)
        self.assertEqual(chargeable_minor_units(Decimal("2.5"), rate), 295)
        # 0.25 * 1.18 * 100 = 29.5 rounds up.
        self.assertEqual(chargeable_minor_units(Decimal("0.25"), rate), 30)

    def test_receipt_shape(self):
        receipt = new_receipt()
        self.assertTrue(receipt.startswith("rcpt_"))
        self.assertLessEqual(len(receipt), 40)
        self.assertNotEqual(receipt, new_receipt())


@override_settings(**GATEWAY_SETTINGS)
class PaymentApiTestCase(TestCase):
    def setUp(self) -> None:
        super().setUp()
        SandboxGateway.reset()
        self.api = APIClient()
        self.service = Service.objects.create(id="svc-1", name="Annual Tax Filing", category="tax", price_amount=5000)
        self.client_user = make_user("client@example.com")
        self.other_client = make_user("other@example.com")
        self.order = Order.objects.create(
            client=self.client_user,
            service=self.service,
            service_name=self.service.name,
            amount=Decimal("1000.00"),
            currency="INR",
            client_details={"name": "Asha Rao"},
        )

    def login(self, user) -> None:
        token = AccountIdentityService.issue_tokens(user)["access"]
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def open_intent(self, **overrides):
        payload = {"amount": 1000, "currency": "INR", "orderId": self.order.pk}
        payload.update(overrides)
        return self.api.post("/api/payments/create-order", data=payload, format="json")

    def verify(self, *, gateway_order_id: str, payment_id: str = "pay_TEST123", secret: str = KEY_SECRET, **overrides):
        payload = {
            "orderId": self.order.pk,
            "gatewayOrderId": gateway_order_id,
            "gatewayPaymentId": payment_id,
            "signature": compute_payment_signature(gateway_order_id, payment_id, secret),
        }
        payload.update(overrides)
        return self.api.post("/api/payments/verify", data=payload, format="json")


class PaymentIntentApiTests(PaymentApiTestCase):
    def test_intent_charges_amount_plus_tax(self):
        self.login(self.client_user)
        response = self.open_intent()
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["amount"], 118000)
        self.assertEqual(payload["currency"], "INR")
        self.assertEqual(payload["keyId"], "rzp_test_sandbox")
        self.assertTrue(payload["receipt"].startswith("rcpt_"))
        self.assertNotIn(KEY_SECRET, response.content.decode())

        attempt = PaymentAttempt.objects.get()
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_CREATED)
        self.assertEqual(attempt.gateway_order_id, payload["id"])
        self.assertEqual(attempt.amount_minor, 118000)

        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_order_id, payload["id"])
        entry = self.order.timeline.get()
        self.assertEqual(entry.event, TimelineEvent.PAYMENT_INITIATED)

    def test_intent_without_order(self):
        self.login(self.client_user)
        response = self.open_intent(orderId=None, amount="2500", receipt="rcpt_custom_1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["amount"], 295000)
        self.assertEqual(response.json()["receipt"], "rcpt_custom_1")
        self.assertIsNone(PaymentAttempt.objects.get().order_id)

    def test_reused_receipt_conflicts(self):
        self.login(self.client_user)
        self.open_intent(orderId=None, receipt="rcpt_dupe")
        response = self.open_intent(orderId=None, receipt="rcpt_dupe")
        self.assertEqual(response.status_code, 409)

    def test_amount_must_match_order_and_be_positive(self):
        self.login(self.client_user)
        mismatch = self.open_intent(amount=999)
        self.assertEqual(mismatch.status_code, 400)
        self.assertEqual(mismatch.json()["error"]["field"], "amount")
        for amount in (0, True, "x"):
            self.assertEqual(self.open_intent(orderId=None, amount=amount).status_code, 400)
        self.assertEqual(PaymentAttempt.objects.count(), 0)

    def test_foreign_order_rejected(self):
        self.login(self.other_client)
        self.assertEqual(self.open_intent().status_code, 403)

    def test_cancelled_order_cannot_be_paid(self):
        Order.objects.filter(pk=self.order.pk).update(status=OrderStatus.CANCELLED.value)
        self.login(self.client_user)
        self.assertEqual(self.open_intent().status_code, 409)

    def test_reattempt_replaces_gateway_order_id(self):
        self.login(self.client_user)
        first = self.open_intent().json()["id"]
        second = self.open_intent().json()["id"]
        self.assertNotEqual(first, second)
        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_order_id, second)
        self.assertEqual(PaymentAttempt.objects.filter(order=self.order).count(), 2)

    def test_requires_authentication(self):
        self.assertEqual(self.open_intent().status_code, 401)

    @override_settings(PAYMENT_GATEWAY="stripe")
    def test_unknown_gateway_is_a_server_error(self):
        self.login(self.client_user)
        response = self.open_intent()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["message"], "Payment gateway is not configured.")


@override_settings(PAYMENT_GATEWAY="razorpay", RAZORPAY_API_BASE="https://gateway.test/v1")
class RazorpayGatewayApiTests(PaymentApiTestCase):
    def _response(self, status_code: int, body):
        response = mock.Mock(status_code=status_code)
        response.json.return_value = body
        return response

    def test_gateway_request_shape(self):
        self.login(self.client_user)
        body = {"id": "order_RZP1", "amount": 118000, "currency": "INR", "receipt": "r", "status": "created"}
        with mock.patch.object(requests.Session, "request", return_value=self._response(200, body)) as request:
            response = self.open_intent(receipt="r")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], "order_RZP1")
        self.assertEqual(response.json()["keyId"], "rzp_test_key")
        method, url = request.call_args.args
        self.assertEqual((method, url), ("POST", "https://gateway.test/v1/orders"))
        self.assertEqual(request.call_args.kwargs["json"]["amount"], 118000)
        self.assertEqual(request.call_args.kwargs["json"]["payment_capture"], 1)
        self.assertEqual(request.call_args.kwargs["timeout"], 10)

    def test_gateway_rejection_passes_description_through(self):
        self.login(self.client_user)
        body = {"error": {"code": "BAD_REQUEST_ERROR", "description": "The amount must be atleast INR 1.00"}}
        with mock.patch.object(requests.Session, "request", return_value=self._response(400, body)):
            response = self.open_intent()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["message"], "The amount must be atleast INR 1.00")
        attempt = PaymentAttempt.objects.get()
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_FAILED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_order_id, "")

    def test_gateway_timeout_is_retryable_and_leaves_attempt_for_reconcile(self):
        self.login(self.client_user)
        with mock.patch.object(requests.Session, "request", side_effect=requests.Timeout("read timed out")):
            with self.assertLogs("consultdesk.payments", level="ERROR"):
                response = self.open_intent()
        self.assertEqual(response.status_code, 500)
        error = response.json()["error"]
        self.assertTrue(error["retryable"])
        self.assertNotIn("timed out", error["message"])
        self.assertNotIn(KEY_SECRET, response.content.decode())
        self.assertEqual(PaymentAttempt.objects.get().status, PaymentAttempt.STATUS_INITIATED)

    def test_gateway_5xx_is_retryable(self):
        self.login(self.client_user)
        with mock.patch.object(requests.Session, "request", return_value=self._response(502, {})):
            response = self.open_intent()
        self.assertEqual(response.status_code, 500)
        self.assertTrue(response.json()["error"]["retryable"])

    @override_settings(RAZORPAY_KEY_ID="")
    def test_missing_credentials(self):
        with self.assertRaises(PaymentConfigurationError):
            PaymentGatewayFacade.get()


class VerifyPaymentApiTests(PaymentApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login(self.client_user)
        self.gateway_order_id = self.open_intent().json()["id"]

    def test_valid_signature_marks_order_paid_and_emails_client(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "orderId": self.order.pk, "paymentId": "pay_TEST123"})

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)
        self.assertTrue(self.order.payment_verified)
        self.assertEqual(self.order.gateway_payment_id, "pay_TEST123")
        self.assertEqual(self.order.timeline.last().message, "Payment verified")
        self.assertEqual(PaymentAttempt.objects.get().status, PaymentAttempt.STATUS_PAID)
        self.assertEqual(len(mail.outbox), 1)

    def test_wrong_secret_cancels_order(self):
        response = self.verify(gateway_order_id=self.gateway_order_id, secret="not-the-secret")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "signature")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self.order.payment_status, PaymentStatus.FAILED)
        self.assertFalse(self.order.payment_verified)
        self.assertEqual(self.order.timeline.last().message, "Payment verification failed")

    def test_repeat_verification_is_idempotent(self):
        self.verify(gateway_order_id=self.gateway_order_id)
        self.order.refresh_from_db()
        version = self.order.version
        entries = self.order.timeline.count()

        response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.version, version)
        self.assertEqual(self.order.timeline.count(), entries)

    def test_bad_signature_after_verification_does_not_cancel(self):
        self.verify(gateway_order_id=self.gateway_order_id)
        response = self.verify(gateway_order_id=self.gateway_order_id, secret="forged")
        self.assertEqual(response.status_code, 400)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)
        self.assertTrue(self.order.payment_verified)

    def test_second_payment_on_verified_order_conflicts(self):
        self.verify(gateway_order_id=self.gateway_order_id)
        response = self.verify(gateway_order_id=self.gateway_order_id, payment_id="pay_OTHER")
        self.assertEqual(response.status_code, 409)
        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_payment_id, "pay_TEST123")

    def test_gateway_order_of_another_order_is_rejected(self):
        other_order = Order.objects.create(
            client=self.client_user,
            service=self.service,
            service_name=self.service.name,
            amount=Decimal("1000.00"),
            client_details={"name": "Asha Rao"},
        )
        other_gateway_id = self.open_intent(orderId=other_order.pk).json()["id"]
        response = self.verify(gateway_order_id=other_gateway_id)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "gatewayOrderId")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_missing_fields_and_unknown_order(self):
        response = self.verify(gateway_order_id=self.gateway_order_id, signature="")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "signature")
        response = self.verify(gateway_order_id=self.gateway_order_id, orderId="ord_missing")
        self.assertEqual(response.status_code, 404)

    def test_other_client_cannot_verify(self):
        self.login(self.other_client)
        response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 403)

    def test_payment_after_cancellation_keeps_order_cancelled(self):
        cancel = self.api.post(
            f"/api/orders/{self.order.pk}/cancel", data={"reason": "Budget constraints"}, format="json"
        )
        self.assertEqual(cancel.status_code, 200)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)
        self.assertTrue(self.order.payment_verified)
        entry = self.order.timeline.last()
        self.assertEqual(entry.event, TimelineEvent.PAYMENT_AFTER_CANCELLATION)
        self.assertEqual(entry.message, "Payment received after cancellation")
        self.assertEqual(PaymentAttempt.objects.get().status, PaymentAttempt.STATUS_PAID)
        self.assertEqual(len(mail.outbox), 0)


class VerifyUnlinkedIntentApiTests(PaymentApiTestCase):
    """Intents opened with only amount, currency and receipt."""

    def setUp(self) -> None:
        super().setUp()
        self.login(self.client_user)
        self.gateway_order_id = self.open_intent(orderId=None, receipt="r1").json()["id"]

    def test_valid_signature_links_attempt_and_verifies(self):
        response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(self.order.gateway_order_id, self.gateway_order_id)
        attempt = PaymentAttempt.objects.get()
        self.assertEqual(attempt.order_id, self.order.pk)
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_PAID)

    def test_wrong_secret_cancels_order(self):
        response = self.verify(gateway_order_id=self.gateway_order_id, secret="not-the-secret")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "signature")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self.order.payment_status, PaymentStatus.FAILED)
        attempt = PaymentAttempt.objects.get()
        self.assertEqual(attempt.order_id, self.order.pk)
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_FAILED)

    def test_attempt_claimed_by_another_order_is_rejected(self):
        other_order = Order.objects.create(
            client=self.client_user,
            service=self.service,
            service_name=self.service.name,
            amount=Decimal("1000.00"),
            client_details={"name": "Asha Rao"},
        )
        self.assertEqual(self.verify(gateway_order_id=self.gateway_order_id, orderId=other_order.pk).status_code, 200)

        response = self.verify(gateway_order_id=self.gateway_order_id)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "gatewayOrderId")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_intent_of_another_client_cannot_be_claimed(self):
        self.login(self.other_client)
        foreign_id = self.open_intent(orderId=None, receipt="r2").json()["id"]
        self.login(self.client_user)

        response = self.verify(gateway_order_id=foreign_id)
        self.assertEqual(response.status_code, 400)
        self.assertIsNone(PaymentAttempt.objects.get(receipt="r2").order_id)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_intent_for_a_different_amount_is_rejected(self):
        smaller_id = self.open_intent(orderId=None, receipt="r3", amount=500).json()["id"]
        response = self.verify(gateway_order_id=smaller_id)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "amount")
        self.assertIsNone(PaymentAttempt.objects.get(receipt="r3").order_id)


class PaymentWebhookApiTests(PaymentApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login(self.client_user)
        self.gateway_order_id = self.open_intent().json()["id"]
        self.api.credentials()

    def post_event(self, event: str, *, payment_id: str = "pay_HOOK1", event_id: str = "evt_1", secret=WEBHOOK_SECRET):
        body = json.dumps(
            {
                "event": event,
                "payload": {
                    "payment": {
                        "entity": {
                            "id": payment_id,
                            "order_id": self.gateway_order_id,
                            "error_description": "Card declined",
                        }
                    }
                },
            }
        ).encode()
        headers = {"HTTP_X_RAZORPAY_SIGNATURE": compute_webhook_signature(body, secret)}
        if event_id:
            headers["HTTP_X_RAZORPAY_EVENT_ID"] = event_id
        return self.api.post("/api/payments/webhook", data=body, content_type="application/json", **headers)

    def test_captured_event_verifies_order(self):
        response = self.post_event("payment.captured")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], PaymentEvent.STATUS_PROCESSED)
        self.order.refresh_from_db()
        self.assertTrue(self.order.payment_verified)
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)
        self.assertEqual(self.order.timeline.last().actor_label, "gateway")

    def test_captured_event_on_cancelled_order_keeps_it_cancelled(self):
        Order.objects.filter(pk=self.order.pk).update(status=OrderStatus.CANCELLED.value)
        response = self.post_event("payment.captured")
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(self.order.timeline.last().event, TimelineEvent.PAYMENT_AFTER_CANCELLATION)

    def test_duplicate_delivery_is_processed_once(self):
        self.post_event("payment.captured")
        self.order.refresh_from_db()
        version = self.order.version
        response = self.post_event("payment.captured")
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.version, version)
        self.assertEqual(PaymentEvent.objects.count(), 1)

    def test_dedupe_without_event_id_uses_payment_and_type(self):
        self.post_event("payment.captured", event_id="")
        self.post_event("payment.captured", event_id="")
        self.assertEqual(PaymentEvent.objects.get().event_id, "pay_HOOK1:payment.captured")

    def test_bad_signature_rejected_without_ledger_entry(self):
        response = self.post_event("payment.captured", secret="forged")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(PaymentEvent.objects.count(), 0)
        self.order.refresh_from_db()
        self.assertFalse(self.order.payment_verified)

    def test_failed_payment_keeps_order_open(self):
        response = self.post_event("payment.failed")
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        self.assertEqual(self.order.payment_status, PaymentStatus.FAILED)
        self.assertEqual(self.order.timeline.last().message, "Payment failed: Card declined")

    def test_failed_event_after_verification_is_ignored(self):
        self.post_event("payment.captured")
        self.post_event("payment.failed", event_id="evt_2", payment_id="pay_HOOK2")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.COMPLETED)

    def test_unknown_order_is_recorded_as_ignored(self):
        self.gateway_order_id = "order_unknown"
        response = self.post_event("payment.captured", event_id="evt_x")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], PaymentEvent.STATUS_IGNORED)


@override_settings(**GATEWAY_SETTINGS)
class ReconcilePaymentsTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        SandboxGateway.reset()
        self.user = make_user("client@example.com")
        service = Service.objects.create(id="svc-1", name="Annual Tax Filing", category="tax", price_amount=5000)
        self.order = Order.objects.create(
            client=self.user,
            service=service,
            service_name=service.name,
            amount=Decimal("1000.00"),
            client_details={"name": "Asha Rao"},
        )
        self.later = timezone.now() + timedelta(hours=1)

    def _attempt(self, receipt: str, order=None) -> PaymentAttempt:
        return PaymentAttempt.objects.create(
            receipt=receipt,
            order=order,
            created_by=self.user,
            gateway_code="sandbox",
            amount=Decimal("1000.00"),
            amount_minor=118000,
            currency="INR",
        )

    def test_links_attempt_found_at_gateway(self):
        attempt = self._attempt("rcpt_found", order=self.order)
        gateway_order = SandboxGateway().create_order(
            amount_minor=118000, currency="INR", receipt="rcpt_found", notes={}
        )

        result = ReconcilePaymentsUseCase.execute(ReconcilePaymentsCommand(now=self.later))
        self.assertEqual((result.linked, result.abandoned, result.errors), (1, 0, 0))
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_CREATED)
        self.assertEqual(attempt.gateway_order_id, gateway_order.id)
        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_order_id, gateway_order.id)
        self.assertEqual(self.order.timeline.get().message, "Payment initiated (reconciled)")

    def test_abandons_attempt_unknown_to_gateway(self):
        attempt = self._attempt("rcpt_lost", order=self.order)
        result = ReconcilePaymentsUseCase.execute(ReconcilePaymentsCommand(now=self.later))
        self.assertEqual(result.abandoned, 1)
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_ABANDONED)
        self.assertEqual(self.order.timeline.count(), 0)

    def test_recent_attempts_are_left_alone(self):
        attempt = self._attempt("rcpt_fresh")
        result = ReconcilePaymentsUseCase.execute(ReconcilePaymentsCommand())
        self.assertEqual((result.linked, result.abandoned), (0, 0))
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, PaymentAttempt.STATUS_INITIATED)

    def test_management_command(self):
        attempt = self._attempt("rcpt_cmd")
        PaymentAttempt.objects.filter(pk=attempt.pk).update(created_at=timezone.now() - timedelta(hours=2))
        out = StringIO()
        call_command("reconcile_payments", "--grace-minutes", "30", stdout=out)
        self.assertIn("abandoned=1", out.getvalue())

    def test_version_conflict_on_one_attempt_does_not_stop_the_batch(self):
        second_order = Order.objects.create(
            client=self.user,
            service=self.order.service,
            service_name=self.order.service_name,
            amount=Decimal("1000.00"),
            client_details={"name": "Asha Rao"},
        )
        conflicting = self._attempt("rcpt_conflict", order=self.order)
        healthy = self._attempt("rcpt_healthy", order=second_order)
        for receipt in ("rcpt_conflict", "rcpt_healthy"):
            SandboxGateway().create_order(amount_minor=118000, currency="INR", receipt=receipt, notes={})

        apply_change = OrderService.apply_change

        def conflict_on_first_order(order, **kwargs):
            if order.pk == self.order.pk:
                raise OrderConcurrencyError()
            return apply_change(order, **kwargs)

        with mock.patch.object(OrderService, "apply_change", side_effect=conflict_on_first_order):
            with self.assertLogs("consultdesk.payments", level="ERROR"):
                result = ReconcilePaymentsUseCase.execute(ReconcilePaymentsCommand(now=self.later))

        self.assertEqual((result.linked, result.abandoned, result.errors), (1, 0, 1))
        conflicting.refresh_from_db()
        self.assertEqual(conflicting.status, PaymentAttempt.STATUS_INITIATED)
        healthy.refresh_from_db()
        self.assertEqual(healthy.status, PaymentAttempt.STATUS_CREATED)
        second_order.refresh_from_db()
        self.assertEqual(second_order.gateway_order_id, healthy.gateway_order_id)

    def test_misconfigured_gateway_is_counted_per_attempt(self):
        PaymentAttempt.objects.create(
            receipt="rcpt_other_gateway",
            created_by=self.user,
            gateway_code="stripe",
            amount=Decimal("1000.00"),
            amount_minor=118000,
            currency="INR",
        )
        self._attempt("rcpt_lost_too")
        with self.assertLogs("consultdesk.payments", level="ERROR"):
            result = ReconcilePaymentsUseCase.execute(ReconcilePaymentsCommand(now=self.later))
        self.assertEqual((result.linked, result.abandoned, result.errors), (0, 1, 1))

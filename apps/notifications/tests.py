from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings

from apps.catalog.models import Service
from apps.notifications.domain.errors import EmailGatewayError
from apps.notifications.models import EmailLog
from apps.notifications.services.email_dispatcher import EmailDispatchService
from apps.notifications.services.order_notifications import OrderNotificationService
from apps.orders.models import Order


class EmailDispatchServiceTests(TestCase):
    def queue(self, key: str = "order:ord_1:status:v2", to_email: str = "client@example.com"):
        return EmailDispatchService.queue(
            idempotency_key=key,
            template="order_status_updated",
            to_email=to_email,
            subject="Order update",
            context={
                "client_name": "Asha",
                "order": {"id": "ord_1", "service_name": "GST Compliance", "status": "processing"},
                "message": "Started",
            },
            order_id="ord_1",
        )

    def test_sends_after_commit_only(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            log = self.queue()
        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(log.status, EmailLog.STATUS_QUEUED)

        for callback in callbacks:
            callback()
        log.refresh_from_db()
        self.assertEqual(log.status, EmailLog.STATUS_SENT)
        self.assertEqual(log.attempts, 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")

    def test_same_key_is_sent_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.queue()
            self.queue()
        self.assertEqual(EmailLog.objects.count(), 1)
        self.assertEqual(len(mail.outbox), 1)

    def test_missing_recipient_is_skipped(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.assertIsNone(self.queue(to_email=""))
        self.assertFalse(EmailLog.objects.exists())

    def test_gateway_failure_is_recorded_not_raised(self):
        with mock.patch.object(
            EmailDispatchService.gateway, "send", side_effect=EmailGatewayError("connection refused")
        ):
            with self.assertLogs("consultdesk.notifications", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    log = self.queue()
        log.refresh_from_db()
        self.assertEqual(log.status, EmailLog.STATUS_FAILED)
        self.assertEqual(log.last_error, "connection refused")


@override_settings(ADMIN_NOTIFICATION_EMAIL="")
class OrderNotificationServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        user = get_user_model().objects.create_user(
            username="client@example.com", email="client@example.com", password="StrongPass12345!"
        )
        service = Service.objects.create(id="svc-1", name="Annual Tax Filing", category="tax", price_amount=5000)
        self.order = Order.objects.create(
            client=user,
            service=service,
            service_name=service.name,
            amount=Decimal("5000.00"),
            client_details={"name": "Asha Rao"},
            cancellation_reason="Budget constraints",
        )

    def test_cancellation_without_admin_address_only_mails_client(self):
        with self.captureOnCommitCallbacks(execute=True):
            OrderNotificationService.queue_cancellation(self.order, reason="Budget constraints", cancelled_by="client")
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ["client@example.com"])
        self.assertIn(self.order.pk, message.subject)
        self.assertIn("Budget constraints", message.body)
        self.assertIn("Asha Rao", message.body)

    def test_payment_confirmation_key_is_per_payment(self):
        self.order.gateway_payment_id = "pay_1"
        with self.captureOnCommitCallbacks(execute=True):
            OrderNotificationService.queue_payment_confirmation(self.order)
            OrderNotificationService.queue_payment_confirmation(self.order)
        self.assertEqual(EmailLog.objects.get().idempotency_key, f"order:{self.order.pk}:paid:pay_1")
        self.assertEqual(len(mail.outbox), 1)

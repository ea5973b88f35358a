from __future__ import annotations

import shutil
import tempfile
from datetime import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.catalog.models import Service
from apps.notifications.models import EmailLog
from apps.orders.domain.errors import OrderConcurrencyError, OrderValidationError
from apps.orders.domain.policies import resolve_cancellation_reason, validate_amount
from apps.orders.domain.status import OrderStatus, PaymentStatus, TimelineEvent
from apps.orders.models import Order, OrderComplaint, OrderDocument, OrderMessage, OrderTimelineEntry
from apps.orders.services.order_service import OrderService
from apps.orders.services.order_stats import OrderStatsService

PASSWORD = "StrongPass12345!"

CLIENT_DETAILS = {"name": "Asha Rao", "email": "asha@example.com", "phone": "9000000000"}


def make_user(email: str, role: UserRole = UserRole.CLIENT, display_name: str = ""):
    user = get_user_model().objects.create_user(username=email, email=email, password=PASSWORD)
    AccountProfile.objects.create(user=user, role=role.value, display_name=display_name or email.split("@")[0])
    return user


def make_service(service_id: str = "svc-1", **overrides) -> Service:
    values = {"name": "Annual Tax Filing", "category": "tax", "price_amount": Decimal("5000")}
    values.update(overrides)
    return Service.objects.create(id=service_id, **values)


def make_order(client, service, **overrides) -> Order:
    values = {
        "client": client,
        "service": service,
        "service_name": service.name,
        "amount": Decimal("5000.00"),
        "currency": "INR",
        "client_details": CLIENT_DETAILS,
    }
    values.update(overrides)
    return Order.objects.create(**values)


class OrderPolicyTests(TestCase):
    def test_amount_boundaries(self):
        self.assertEqual(validate_amount(0.01), Decimal("0.01"))
        self.assertEqual(validate_amount("1500.505"), Decimal("1500.51"))
        self.assertEqual(validate_amount(1000), Decimal("1000.00"))
        for raw in (0, -1, "-0.01", 0.004, True, False, "abc", "NaN", "Infinity", None, "", [], {}):
            with self.assertRaises(OrderValidationError, msg=repr(raw)):
                validate_amount(raw)

    def test_cancellation_reason_rules(self):
        self.assertEqual(resolve_cancellation_reason("Budget constraints"), "Budget constraints")
        self.assertEqual(resolve_cancellation_reason("Other", "  Moved abroad "), "Moved abroad")
        with self.assertRaises(OrderValidationError):
            resolve_cancellation_reason("Because")
        with self.assertRaises(OrderValidationError) as ctx:
            resolve_cancellation_reason("Other", "   ")
        self.assertEqual(ctx.exception.field, "otherReason")


class OrderServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client_user = make_user("client@example.com")
        self.order = make_order(self.client_user, make_service())

    def test_apply_change_bumps_version_and_appends_one_entry(self):
        before = self.order.updated_at
        OrderService.apply_change(
            self.order,
            changes={"status": OrderStatus.ON_HOLD.value},
            event=TimelineEvent.STATUS_UPDATED,
            message="Waiting on documents",
        )
        stored = Order.objects.get(pk=self.order.pk)
        self.assertEqual(stored.version, 2)
        self.assertEqual(stored.status, OrderStatus.ON_HOLD)
        self.assertGreaterEqual(stored.updated_at, before)
        entries = list(stored.timeline.all())
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].actor_label, "system")
        self.assertEqual(entries[0].status, OrderStatus.ON_HOLD)

    def test_stale_version_is_rejected_without_side_effects(self):
        stale = Order.objects.get(pk=self.order.pk)
        OrderService.apply_change(
            self.order,
            changes={"status": OrderStatus.IN_PROGRESS.value},
            event=TimelineEvent.STATUS_UPDATED,
            message="Started",
        )
        with self.assertRaises(OrderConcurrencyError) as ctx:
            OrderService.apply_change(
                stale,
                changes={"status": OrderStatus.CANCELLED.value},
                event=TimelineEvent.CANCELLED,
                message="Cancelled",
            )
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.http_status, 409)
        stored = Order.objects.get(pk=self.order.pk)
        self.assertEqual(stored.status, OrderStatus.IN_PROGRESS)
        self.assertEqual(stored.timeline.count(), 1)


class OrderApiTestCase(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.api = APIClient()
        self.service = make_service()
        self.client_user = make_user("client@example.com", UserRole.CLIENT, "Asha Rao")
        self.other_client = make_user("other@example.com", UserRole.CLIENT)
        self.employee = make_user("employee@example.com", UserRole.EMPLOYEE, "Ravi Kumar")
        self.manager = make_user("manager@example.com", UserRole.MANAGER)
        self.admin = make_user("admin@example.com", UserRole.ADMIN)

    def login(self, user) -> None:
        token = AccountIdentityService.issue_tokens(user)["access"]
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def create_order_via_api(self, **overrides):
        payload = {
            "serviceId": self.service.pk,
            "amount": 5000,
            "currency": "INR",
            "clientDetails": CLIENT_DETAILS,
        }
        payload.update(overrides)
        return self.api.post("/api/orders/create", data=payload, format="json")


class CreateOrderApiTests(OrderApiTestCase):
    def test_create_starts_pending_with_one_timeline_entry(self):
        self.login(self.client_user)
        response = self.create_order_via_api()
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])

        order = Order.objects.get(pk=payload["orderId"])
        self.assertTrue(order.pk.startswith("ord_"))
        self.assertEqual(order.client, self.client_user)
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.payment_status, PaymentStatus.PENDING)
        self.assertFalse(order.payment_verified)
        self.assertEqual(order.service_name, "Annual Tax Filing")
        entries = list(order.timeline.all())
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].message, "Order created")
        self.assertEqual(entries[0].actor_label, str(self.client_user.pk))

    def test_requires_authentication(self):
        response = self.create_order_via_api()
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_fields(self):
        self.login(self.client_user)
        for field in ("serviceId", "amount", "currency", "clientDetails"):
            response = self.create_order_via_api(**{field: None})
            self.assertEqual(response.status_code, 400, field)
            self.assertEqual(response.json()["error"]["field"], field)
        self.assertEqual(Order.objects.count(), 0)

    def test_amount_edge_values(self):
        self.login(self.client_user)
        for amount in (True, 0, -5, "abc"):
            response = self.create_order_via_api(amount=amount)
            self.assertEqual(response.status_code, 400, amount)
            self.assertEqual(response.json()["error"]["field"], "amount")
        self.assertEqual(self.create_order_via_api(amount=0.01).status_code, 201)
        self.assertEqual(self.create_order_via_api(amount="1500.50").status_code, 201)

    def test_currency_must_be_three_letters(self):
        self.login(self.client_user)
        response = self.create_order_via_api(currency="RUPEES")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "currency")
        self.assertEqual(self.create_order_via_api(currency="inr").status_code, 201)

    def test_unknown_or_inactive_service_is_404(self):
        make_service("svc-off", name="Retired", is_active=False)
        self.login(self.client_user)
        for service_id in ("svc-missing", "svc-off"):
            response = self.create_order_via_api(serviceId=service_id)
            self.assertEqual(response.status_code, 404)
        self.assertEqual(Order.objects.count(), 0)


class ReadOrderApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.own = make_order(self.client_user, self.service)
        self.foreign = make_order(self.other_client, self.service, assigned_to=self.employee)

    def test_detail_for_owner_and_staff_only(self):
        self.login(self.client_user)
        response = self.api.get(f"/api/orders/{self.own.pk}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["order"]["id"], self.own.pk)
        self.assertEqual(self.api.get(f"/api/orders/{self.foreign.pk}").status_code, 403)
        self.assertEqual(self.api.get("/api/orders/ord_missing").status_code, 404)

        self.login(self.employee)
        self.assertEqual(self.api.get(f"/api/orders/{self.own.pk}").status_code, 200)

    def test_list_scoping(self):
        self.login(self.client_user)
        ids = [row["id"] for row in self.api.get("/api/orders/").json()["orders"]]
        self.assertEqual(ids, [self.own.pk])

        self.login(self.employee)
        ids = [row["id"] for row in self.api.get("/api/orders/").json()["orders"]]
        self.assertEqual(ids, [self.foreign.pk])

        self.login(self.admin)
        ids = {row["id"] for row in self.api.get("/api/orders/").json()["orders"]}
        self.assertEqual(ids, {self.own.pk, self.foreign.pk})

    def test_list_status_filter(self):
        self.login(self.admin)
        response = self.api.get("/api/orders/", {"status": "pending"})
        self.assertEqual(len(response.json()["orders"]), 2)
        self.assertEqual(self.api.get("/api/orders/", {"status": "lost"}).status_code, 400)


@override_settings(ADMIN_NOTIFICATION_EMAIL="ops@consultdesk.local")
class CancelOrderApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.order = make_order(self.client_user, self.service)

    def test_owner_cancels_with_listed_reason_and_emails_go_out_after_commit(self):
        self.login(self.client_user)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.api.post(
                f"/api/orders/{self.order.pk}/cancel",
                data={"reason": "Budget constraints"},
                format="json",
            )
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self.order.cancellation_reason, "Budget constraints")
        entry = self.order.timeline.get()
        self.assertEqual(entry.event, TimelineEvent.CANCELLED)
        self.assertEqual(entry.message, "Order cancelled by client. Reason: Budget constraints")

        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["client@example.com", "ops@consultdesk.local"])
        self.assertEqual(EmailLog.objects.filter(status=EmailLog.STATUS_SENT).count(), 2)

    def test_other_reason_requires_text(self):
        self.login(self.client_user)
        response = self.api.post(f"/api/orders/{self.order.pk}/cancel", data={"reason": "Other"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "otherReason")

        response = self.api.post(
            f"/api/orders/{self.order.pk}/cancel",
            data={"reason": "Other", "otherReason": "Hired in-house accountant"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.cancellation_reason, "Hired in-house accountant")

    def test_other_client_cannot_cancel(self):
        self.login(self.other_client)
        response = self.api.post(
            f"/api/orders/{self.order.pk}/cancel", data={"reason": "Timeline issues"}, format="json"
        )
        self.assertEqual(response.status_code, 403)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_closed_orders_cannot_be_cancelled(self):
        Order.objects.filter(pk=self.order.pk).update(status=OrderStatus.COMPLETED.value)
        self.login(self.client_user)
        response = self.api.post(
            f"/api/orders/{self.order.pk}/cancel", data={"reason": "Timeline issues"}, format="json"
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(OrderTimelineEntry.objects.filter(order=self.order).count(), 0)

    def test_staff_cancellation_names_the_role(self):
        self.login(self.manager)
        response = self.api.post(
            f"/api/orders/{self.order.pk}/cancel", data={"reason": "Service no longer needed"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(self.order.timeline.get().message.startswith("Order cancelled by manager."))


class StaffOrderApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.order = make_order(self.client_user, self.service)

    def test_staff_status_update_records_entry_and_emails_client(self):
        self.login(self.employee)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.api.post(
                f"/api/orders/{self.order.pk}/status",
                data={"status": "in-progress", "paymentStatus": "partial"},
                format="json",
            )
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.IN_PROGRESS)
        self.assertEqual(self.order.payment_status, PaymentStatus.PARTIAL)
        self.assertEqual(self.order.timeline.get().message, "Status updated to in-progress")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["client@example.com"])

    def test_client_cannot_update_status(self):
        self.login(self.client_user)
        response = self.api.post(
            f"/api/orders/{self.order.pk}/status", data={"status": "completed"}, format="json"
        )
        self.assertEqual(response.status_code, 403)

    def test_invalid_status_rejected(self):
        self.login(self.admin)
        response = self.api.post(f"/api/orders/{self.order.pk}/status", data={"status": "done"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "status")

    def test_each_update_is_its_own_entry(self):
        self.login(self.admin)
        for status in ("processing", "on-hold", "processing"):
            self.api.post(f"/api/orders/{self.order.pk}/status", data={"status": status}, format="json")
        self.order.refresh_from_db()
        self.assertEqual(self.order.timeline.count(), 3)
        self.assertEqual(self.order.version, 4)

    def test_assign_handler(self):
        self.login(self.manager)
        response = self.api.post(
            f"/api/orders/{self.order.pk}/assign", data={"assigneeId": self.employee.pk}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.assigned_to, self.employee)
        self.assertEqual(self.order.timeline.get().message, "Assigned to Ravi Kumar")

    def test_assign_rules(self):
        self.login(self.employee)
        denied = self.api.post(
            f"/api/orders/{self.order.pk}/assign", data={"assigneeId": self.employee.pk}, format="json"
        )
        self.assertEqual(denied.status_code, 403)

        self.login(self.admin)
        not_staff = self.api.post(
            f"/api/orders/{self.order.pk}/assign", data={"assigneeId": self.other_client.pk}, format="json"
        )
        self.assertEqual(not_staff.status_code, 400)
        bad_id = self.api.post(f"/api/orders/{self.order.pk}/assign", data={"assigneeId": "x"}, format="json")
        self.assertEqual(bad_id.status_code, 400)


class OrderDocumentApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()
        self.order = make_order(self.client_user, self.service)

    def tearDown(self) -> None:
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)
        super().tearDown()

    def upload(self, **overrides):
        data = {
            "file": SimpleUploadedFile("pan card.pdf", b"%PDF-1.4 test", content_type="application/pdf"),
            "category": "identification",
        }
        data.update(overrides)
        return self.api.post(f"/api/orders/{self.order.pk}/documents", data=data, format="multipart")

    def test_upload_stores_file_and_records_entry(self):
        self.login(self.client_user)
        response = self.upload()
        self.assertEqual(response.status_code, 201)
        document = OrderDocument.objects.get()
        self.assertTrue(document.file.name.startswith(f"orders/{self.order.pk}/documents/identification/"))
        self.assertEqual(document.size, len(b"%PDF-1.4 test"))
        self.assertTrue(default_storage.exists(document.file.name))
        self.assertEqual(self.order.timeline.get().message, 'Document "pan card.pdf" uploaded')

        listing = self.api.get(f"/api/orders/{self.order.pk}/documents")
        self.assertEqual(len(listing.json()["documents"]), 1)

    def test_unknown_category_rejected(self):
        self.login(self.client_user)
        response = self.upload(category="selfie")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(OrderDocument.objects.count(), 0)

    def test_delete_removes_file_after_commit(self):
        self.login(self.client_user)
        self.upload()
        document = OrderDocument.objects.get()
        path = document.file.name

        with self.captureOnCommitCallbacks(execute=True):
            response = self.api.delete(f"/api/orders/{self.order.pk}/documents/{document.pk}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(OrderDocument.objects.exists())
        self.assertFalse(default_storage.exists(path))
        self.assertEqual(self.order.timeline.count(), 2)

    def test_other_client_cannot_upload(self):
        self.login(self.other_client)
        self.assertEqual(self.upload().status_code, 403)

    def test_cancelled_order_rejects_documents(self):
        Order.objects.filter(pk=self.order.pk).update(status=OrderStatus.CANCELLED.value)
        self.login(self.client_user)
        self.assertEqual(self.upload().status_code, 409)


class OrderMessageApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()
        self.order = make_order(self.client_user, self.service)
        self.url = f"/api/orders/{self.order.pk}/messages"

    def tearDown(self) -> None:
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)
        super().tearDown()

    def test_client_and_staff_exchange_messages_without_touching_the_order(self):
        self.login(self.client_user)
        response = self.api.post(self.url, data={"message": "  When will the draft be ready?  "}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"]["body"], "When will the draft be ready?")
        self.assertEqual(response.json()["message"]["sender_role"], "client")
        self.assertEqual(response.json()["message"]["sender_name"], "Asha Rao")

        self.login(self.employee)
        self.api.post(self.url, data={"message": "Friday."}, format="json")
        listing = self.api.get(self.url).json()["messages"]
        self.assertEqual([item["body"] for item in listing], ["When will the draft be ready?", "Friday."])

        self.order.refresh_from_db()
        self.assertEqual(self.order.version, 1)
        self.assertFalse(self.order.timeline.exists())

    def test_attachment_only_message(self):
        self.login(self.client_user)
        attachment = SimpleUploadedFile("form16.pdf", b"%PDF-1.4 form", content_type="application/pdf")
        response = self.api.post(self.url, data={"attachment": attachment}, format="multipart")
        self.assertEqual(response.status_code, 201)
        message = OrderMessage.objects.get()
        self.assertEqual(message.body, "")
        self.assertEqual(message.attachment_name, "form16.pdf")
        self.assertEqual(message.attachment_size, len(b"%PDF-1.4 form"))
        self.assertTrue(message.attachment.name.startswith(f"orders/{self.order.pk}/attachments/"))
        self.assertTrue(default_storage.exists(message.attachment.name))

    def test_empty_message_rejected(self):
        self.login(self.client_user)
        response = self.api.post(self.url, data={"message": "   "}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "message")
        self.assertFalse(OrderMessage.objects.exists())

    def test_other_client_cannot_read_or_send(self):
        self.login(self.other_client)
        self.assertEqual(self.api.get(self.url).status_code, 403)
        self.assertEqual(self.api.post(self.url, data={"message": "hi"}, format="json").status_code, 403)

    def test_mark_read_only_touches_the_other_side(self):
        self.login(self.client_user)
        self.api.post(self.url, data={"message": "Question"}, format="json")
        self.login(self.employee)
        self.api.post(self.url, data={"message": "Answer"}, format="json")

        self.login(self.client_user)
        response = self.api.post(f"{self.url}/read")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["updated"], 1)
        self.assertTrue(OrderMessage.objects.get(body="Answer").is_read)
        self.assertFalse(OrderMessage.objects.get(body="Question").is_read)

        self.assertEqual(self.api.post(f"{self.url}/read").json()["updated"], 0)


class OrderComplaintApiTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.order = make_order(self.client_user, self.service, status=OrderStatus.COMPLETED.value)
        self.url = f"/api/orders/{self.order.pk}/complaints"

    def submit(self, **overrides):
        payload = {"complaintType": "poor-quality", "description": "The return was filed with the wrong PAN."}
        payload.update(overrides)
        return self.api.post(self.url, data=payload, format="json")

    def test_owner_submits_complaint_with_timeline_entry(self):
        self.login(self.client_user)
        response = self.submit()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["complaint"]["status"], "submitted")

        self.order.refresh_from_db()
        self.assertTrue(self.order.has_complaint)
        self.assertEqual(self.order.version, 2)
        entry = self.order.timeline.get()
        self.assertEqual(entry.event, TimelineEvent.COMPLAINT_SUBMITTED.value)
        self.assertEqual(entry.message, "Client submitted a complaint")

        listing = self.api.get(self.url).json()["complaints"]
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0]["complaint_type"], "poor-quality")

    def test_only_the_order_owner_can_complain(self):
        for user in (self.other_client, self.employee):
            self.login(user)
            self.assertEqual(self.submit().status_code, 403)
        self.assertFalse(OrderComplaint.objects.exists())

    def test_complaint_validation(self):
        self.login(self.client_user)
        response = self.submit(complaintType="rude")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "complaintType")

        response = self.submit(description="  ")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "description")

        self.order.refresh_from_db()
        self.assertFalse(self.order.has_complaint)
        self.assertFalse(self.order.timeline.exists())

    def test_staff_resolves_complaint(self):
        self.login(self.client_user)
        complaint_id = self.submit().json()["complaint"]["id"]

        self.login(self.employee)
        response = self.api.patch(
            f"{self.url}/{complaint_id}",
            data={"status": "resolved", "resolution": "Revised return filed."},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        complaint = OrderComplaint.objects.get(pk=complaint_id)
        self.assertEqual(complaint.status, "resolved")
        self.assertEqual(complaint.resolution, "Revised return filed.")
        self.assertEqual(
            list(self.order.timeline.values_list("event", flat=True)),
            [TimelineEvent.COMPLAINT_SUBMITTED.value, TimelineEvent.COMPLAINT_UPDATED.value],
        )

    def test_complaint_update_rules(self):
        self.login(self.client_user)
        complaint_id = self.submit().json()["complaint"]["id"]
        response = self.api.patch(f"{self.url}/{complaint_id}", data={"status": "resolved"}, format="json")
        self.assertEqual(response.status_code, 403)

        self.login(self.manager)
        response = self.api.patch(f"{self.url}/{complaint_id}", data={"status": "closed"}, format="json")
        self.assertEqual(response.status_code, 400)
        response = self.api.patch(f"{self.url}/{complaint_id + 100}", data={"status": "resolved"}, format="json")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(OrderComplaint.objects.get(pk=complaint_id).status, "submitted")


class OrderStatsTests(OrderApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.now = timezone.make_aware(datetime(2026, 10, 15, 12, 0))
        second = make_service("svc-2", name="GST Registration", price_amount=Decimal("2000"))
        paid = {"payment_status": PaymentStatus.COMPLETED.value, "payment_verified": True}
        make_order(
            self.client_user,
            self.service,
            status=OrderStatus.COMPLETED.value,
            created_at=timezone.make_aware(datetime(2026, 10, 3, 9, 0)),
            **paid,
        )
        make_order(
            self.client_user,
            second,
            amount=Decimal("2000.00"),
            status=OrderStatus.PROCESSING.value,
            created_at=timezone.make_aware(datetime(2026, 8, 20, 9, 0)),
            **paid,
        )
        make_order(self.other_client, self.service)
        make_order(self.other_client, self.service, status=OrderStatus.CANCELLED.value)

    def test_revenue_counts_paid_orders_only(self):
        self.assertEqual(OrderStatsService.total_revenue(), {"INR": "7000.00"})

    def test_orders_by_status_is_zero_filled(self):
        counts = OrderStatsService.orders_by_status()
        self.assertEqual(set(counts), {status.value for status in OrderStatus})
        self.assertEqual(counts["pending"], 1)
        self.assertEqual(counts["completed"], 1)
        self.assertEqual(counts["processing"], 1)
        self.assertEqual(counts["cancelled"], 1)

    def test_top_services_by_order_count(self):
        top = OrderStatsService.top_services()
        self.assertEqual(top[0]["serviceId"], self.service.pk)
        self.assertEqual(top[0]["orders"], 3)
        self.assertEqual(top[0]["paidOrders"], 1)
        self.assertEqual(top[1]["serviceName"], "GST Registration")

    def test_revenue_by_month(self):
        months = OrderStatsService.revenue_by_month(months=6, now=self.now)
        self.assertEqual(
            [row["month"] for row in months],
            ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"],
        )
        by_month = {row["month"]: row["revenue"] for row in months}
        self.assertEqual(by_month["2026-08"], {"INR": "2000.00"})
        self.assertEqual(by_month["2026-10"], {"INR": "5000.00"})
        self.assertEqual(by_month["2026-09"], {})

    def test_revenue_by_month_crosses_the_year(self):
        months = OrderStatsService.revenue_by_month(months=3, now=timezone.make_aware(datetime(2027, 1, 31, 8, 0)))
        self.assertEqual([row["month"] for row in months], ["2026-11", "2026-12", "2027-01"])

    def test_stats_api_is_for_admins_and_managers(self):
        self.login(self.manager)
        response = self.api.get("/api/dashboard/stats")
        self.assertEqual(response.status_code, 200)
        stats = response.json()["stats"]
        self.assertEqual(stats["totalOrders"], 4)
        self.assertEqual(stats["clients"], 2)
        self.assertEqual(stats["staff"], 3)

        self.login(self.client_user)
        self.assertEqual(self.api.get("/api/dashboard/stats").status_code, 403)
        self.login(self.employee)
        self.assertEqual(self.api.get("/api/dashboard/stats").status_code, 403)

    def test_admin_dashboard_shows_stats(self):
        web = Client()
        web.cookies["auth-token"] = AccountIdentityService.issue_tokens(self.admin)["access"]
        response = web.get("/admin/")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Top services")
        self.assertContains(response, "INR 7000.00")
        self.assertContains(response, "GST Registration")

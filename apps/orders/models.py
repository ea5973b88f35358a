from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.text import get_valid_filename

from apps.orders.domain.policies import new_order_id
from apps.orders.domain.status import ComplaintStatus, ComplaintType, DocumentCategory, OrderStatus, PaymentStatus


class Order(models.Model):
    STATUS_CHOICES = OrderStatus.choices()
    PAYMENT_STATUS_CHOICES = PaymentStatus.choices()

    id = models.CharField(max_length=40, primary_key=True, default=new_order_id, editable=False)
    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    service = models.ForeignKey("catalog.Service", on_delete=models.PROTECT, related_name="orders")
    service_name = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="INR")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OrderStatus.PENDING.value)
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PaymentStatus.PENDING.value
    )
    payment_verified = models.BooleanField(default=False)
    gateway_order_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    client_details = models.JSONField(default=dict, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="assigned_orders",
    )
    cancellation_reason = models.CharField(max_length=500, blank=True, default="")
    has_complaint = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["client", "created_at"], name="orders_orde_client__2b7c4e_idx"),
            models.Index(fields=["status"], name="orders_orde_status_9d1f3a_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.status}/{self.payment_status})"


class OrderTimelineEntry(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="timeline")
    status = models.CharField(max_length=20, choices=Order.STATUS_CHOICES)
    event = models.CharField(max_length=50)
    message = models.TextField()
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="order_timeline_entries",
    )
    actor_label = models.CharField(max_length=64, default="system")
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.event}"


def order_document_upload_to(instance: "OrderDocument", filename: str) -> str:
    stamp = timezone.now().strftime("%Y%m%d%H%M%S%f")
    return f"orders/{instance.order_id}/documents/{instance.category}/{stamp}-{get_valid_filename(filename)}"


class OrderDocument(models.Model):
    CATEGORY_CHOICES = DocumentCategory.choices()

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="documents")
    name = models.CharField(max_length=255)
    file = models.FileField(upload_to=order_document_upload_to, max_length=500)
    content_type = models.CharField(max_length=120, blank=True, default="")
    size = models.PositiveBigIntegerField(default=0)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=DocumentCategory.OTHER.value)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="uploaded_order_documents",
    )
    uploaded_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["-uploaded_at", "-id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.order_id})"


def order_message_upload_to(instance: "OrderMessage", filename: str) -> str:
    stamp = timezone.now().strftime("%Y%m%d%H%M%S%f")
    return f"orders/{instance.order_id}/attachments/{stamp}-{get_valid_filename(filename)}"


class OrderMessage(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="order_messages",
    )
    sender_name = models.CharField(max_length=200)
    sender_role = models.CharField(max_length=20)
    body = models.TextField(blank=True, default="")
    attachment = models.FileField(upload_to=order_message_upload_to, max_length=500, blank=True)
    attachment_name = models.CharField(max_length=255, blank=True, default="")
    attachment_content_type = models.CharField(max_length=120, blank=True, default="")
    attachment_size = models.PositiveBigIntegerField(default=0)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [models.Index(fields=["order", "is_read"], name="orders_message_unread_idx")]

    def __str__(self) -> str:
        return f"{self.order_id}: message from {self.sender_name}"


def complaint_upload_to(instance: "OrderComplaint", filename: str) -> str:
    stamp = timezone.now().strftime("%Y%m%d%H%M%S%f")
    return f"complaints/{instance.order_id}/{stamp}-{get_valid_filename(filename)}"


class OrderComplaint(models.Model):
    TYPE_CHOICES = ComplaintType.choices()
    STATUS_CHOICES = ComplaintStatus.choices()

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="complaints")
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="order_complaints",
    )
    complaint_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ComplaintStatus.SUBMITTED.value)
    resolution = models.TextField(blank=True, default="")
    attachment = models.FileField(upload_to=complaint_upload_to, max_length=500, blank=True)
    attachment_name = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.complaint_type} ({self.status})"

from __future__ import annotations

from django.db import models


class EmailLog(models.Model):
    STATUS_QUEUED = "queued"
    STATUS_SENT = "sent"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_QUEUED, "Queued"),
        (STATUS_SENT, "Sent"),
        (STATUS_FAILED, "Failed"),
    ]

    idempotency_key = models.CharField(max_length=200, unique=True)
    template = models.CharField(max_length=100)
    to_email = models.EmailField(max_length=254)
    subject = models.CharField(max_length=255)
    order_id = models.CharField(max_length=40, blank=True, default="", db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_QUEUED)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"EmailLog({self.template} -> {self.to_email}, {self.status})"

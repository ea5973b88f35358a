from __future__ import annotations

from django.db import models


class Service(models.Model):
    BILLING_ONE_TIME = "one-time"
    BILLING_MONTHLY = "monthly"
    BILLING_YEARLY = "yearly"

    BILLING_CHOICES = [
        (BILLING_ONE_TIME, "One-time"),
        (BILLING_MONTHLY, "Monthly"),
        (BILLING_YEARLY, "Yearly"),
    ]

    id = models.SlugField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    short_description = models.CharField(max_length=500, blank=True, default="")
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=64, db_index=True)
    price_amount = models.DecimalField(max_digits=12, decimal_places=2)
    price_currency = models.CharField(max_length=3, default="INR")
    billing_type = models.CharField(max_length=20, choices=BILLING_CHOICES, default=BILLING_ONE_TIME)
    features = models.JSONField(default=list, blank=True)
    requirements = models.JSONField(default=list, blank=True)
    deliverables = models.JSONField(default=list, blank=True)
    estimated_duration = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.feedback.domain.types import FeedbackCategory


class Feedback(models.Model):
    CATEGORY_CHOICES = FeedbackCategory.choices()

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="feedback",
    )
    name = models.CharField(max_length=200)
    email = models.EmailField()
    rating = models.PositiveSmallIntegerField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=FeedbackCategory.GENERAL.value)
    message = models.TextField()
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.rating}/5)"

from __future__ import annotations

from django.conf import settings
from django.db import models

from apps.accounts.domain.roles import UserRole


class AccountProfile(models.Model):
    ROLE_CHOICES = UserRole.choices()

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account_profile",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=UserRole.CLIENT.value)
    display_name = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["role"], name="accounts_ac_role_5f2c1e_idx"),
        ]

    def __str__(self) -> str:
        return f"AccountProfile(user_id={self.user_id}, role={self.role})"


class AccountAuditLog(models.Model):
    ACTION_REGISTERED = "registered"
    ACTION_LOGIN_SUCCEEDED = "login_succeeded"
    ACTION_LOGIN_FAILED = "login_failed"
    ACTION_SESSION_OPENED = "session_opened"
    ACTION_SESSION_CLOSED = "session_closed"
    ACTION_ROLE_CHANGED = "role_changed"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="account_audit_logs",
    )
    action = models.CharField(max_length=64)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["action", "created_at"], name="accounts_ac_action_3b9d0a_idx"),
            models.Index(fields=["user", "created_at"], name="accounts_ac_user_id_8e41c7_idx"),
        ]

    def __str__(self) -> str:
        return f"AccountAuditLog(action={self.action}, user_id={self.user_id})"

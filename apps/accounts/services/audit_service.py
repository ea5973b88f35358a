from __future__ import annotations

import logging

from apps.accounts.models import AccountAuditLog

logger = logging.getLogger("consultdesk.accounts")

USER_AGENT_MAX_LENGTH = 512
_REDACTED_KEYS = frozenset({"password", "token", "access", "refresh", "secret"})


class AccountAuditService:
    """Sign-up, sign-in, session and role events for one account."""

    ACTION_REGISTERED = AccountAuditLog.ACTION_REGISTERED
    ACTION_LOGIN_SUCCEEDED = AccountAuditLog.ACTION_LOGIN_SUCCEEDED
    ACTION_LOGIN_FAILED = AccountAuditLog.ACTION_LOGIN_FAILED
    ACTION_SESSION_OPENED = AccountAuditLog.ACTION_SESSION_OPENED
    ACTION_SESSION_CLOSED = AccountAuditLog.ACTION_SESSION_CLOSED
    ACTION_ROLE_CHANGED = AccountAuditLog.ACTION_ROLE_CHANGED

    @staticmethod
    def client_ip(request) -> str | None:
        value = request.META.get("HTTP_X_FORWARDED_FOR") or request.META.get("REMOTE_ADDR")
        if not value:
            return None
        return value.split(",")[0].strip() or None

    @staticmethod
    def user_agent(request) -> str:
        return (request.META.get("HTTP_USER_AGENT") or "")[:USER_AGENT_MAX_LENGTH]

    @staticmethod
    def record_action(
        *,
        user: object | None,
        action: str,
        ip_address: str | None = None,
        user_agent: str = "",
        metadata: dict | None = None,
    ) -> AccountAuditLog:
        cleaned = {key: value for key, value in (metadata or {}).items() if key.lower() not in _REDACTED_KEYS}
        entry = AccountAuditLog.objects.create(
            user_id=getattr(user, "pk", None),
            action=action,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:USER_AGENT_MAX_LENGTH],
            metadata=cleaned,
        )
        logger.info("account_audit", extra={"action": action, "user_id": entry.user_id})
        return entry

    @staticmethod
    def record_request(
        request, *, action: str, user: object | None = None, metadata: dict | None = None
    ) -> AccountAuditLog:
        return AccountAuditService.record_action(
            user=user,
            action=action,
            ip_address=AccountAuditService.client_ip(request),
            user_agent=AccountAuditService.user_agent(request),
            metadata=metadata,
        )

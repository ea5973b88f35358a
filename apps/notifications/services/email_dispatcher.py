from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from apps.notifications.domain.errors import EmailGatewayError
from apps.notifications.domain.ports import EmailGatewayPort
from apps.notifications.domain.types import EmailMessage
from apps.notifications.infrastructure.gateways.django_mail import DjangoMailGateway
from apps.notifications.models import EmailLog

logger = logging.getLogger("consultdesk.notifications")


class EmailDispatchService:
    """
    Records an `EmailLog` row inside the caller's transaction and sends after
    commit. A key that was already used is not sent twice.
    """

    gateway: EmailGatewayPort = DjangoMailGateway()

    @staticmethod
    def render(template: str, context: dict) -> tuple[str, str]:
        html = render_to_string(f"notifications/emails/{template}.html", context)
        return html, strip_tags(html).strip()

    @classmethod
    def queue(
        cls,
        *,
        idempotency_key: str,
        template: str,
        to_email: str,
        subject: str,
        context: dict,
        order_id: str = "",
    ) -> EmailLog | None:
        if not to_email:
            logger.info("email_skipped_no_recipient", extra={"template": template, "order_id": order_id})
            return None

        log, created = EmailLog.objects.get_or_create(
            idempotency_key=idempotency_key,
            defaults={
                "template": template,
                "to_email": to_email,
                "subject": subject,
                "order_id": order_id,
            },
        )
        if not created:
            return log

        html, text = cls.render(template, context)
        message = EmailMessage(to_email=to_email, subject=subject, text=text, html=html)
        transaction.on_commit(lambda: cls.send_now(email_log_id=log.pk, message=message))
        return log

    @classmethod
    def send_now(cls, *, email_log_id: int, message: EmailMessage) -> None:
        log = EmailLog.objects.filter(pk=email_log_id).first()
        if log is None or log.status == EmailLog.STATUS_SENT:
            return

        log.attempts += 1
        try:
            cls.gateway.send(message=message, from_email=settings.DEFAULT_FROM_EMAIL)
        except EmailGatewayError as exc:
            log.status = EmailLog.STATUS_FAILED
            log.last_error = str(exc)[:2000]
            log.save(update_fields=["status", "attempts", "last_error"])
            logger.exception(
                "email_send_failed",
                extra={"email_log_id": log.pk, "template": log.template, "order_id": log.order_id},
            )
            return

        log.status = EmailLog.STATUS_SENT
        log.sent_at = timezone.now()
        log.last_error = ""
        log.save(update_fields=["status", "attempts", "last_error", "sent_at"])
        logger.info("email_sent", extra={"email_log_id": log.pk, "template": log.template, "order_id": log.order_id})

from __future__ import annotations

from smtplib import SMTPException

from django.core.mail import EmailMultiAlternatives

from apps.notifications.domain.errors import EmailGatewayError
from apps.notifications.domain.types import EmailMessage


class DjangoMailGateway:
    """Sends through whatever `EMAIL_BACKEND` the project is configured with."""

    name = "django"

    def send(self, *, message: EmailMessage, from_email: str) -> None:
        email = EmailMultiAlternatives(
            subject=message.subject,
            body=message.text or "",
            from_email=from_email,
            to=[message.to_email],
            headers=dict(message.headers or {}),
        )
        if message.html:
            email.attach_alternative(message.html, "text/html")
        try:
            email.send(fail_silently=False)
        except (SMTPException, OSError) as exc:
            raise EmailGatewayError(str(exc)) from exc

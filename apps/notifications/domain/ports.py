from __future__ import annotations

from typing import Protocol

from apps.notifications.domain.types import EmailMessage


class EmailGatewayPort(Protocol):
    name: str

    def send(self, *, message: EmailMessage, from_email: str) -> None:
        ...

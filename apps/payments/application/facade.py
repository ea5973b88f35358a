from __future__ import annotations

from django.conf import settings

from apps.payments.domain.errors import PaymentConfigurationError
from apps.payments.domain.ports import PaymentGatewayPort
from apps.payments.infrastructure.gateways.razorpay import RazorpayGateway
from apps.payments.infrastructure.gateways.sandbox import SandboxGateway


class PaymentGatewayFacade:
    _registry: dict[str, type] = {
        RazorpayGateway.code: RazorpayGateway,
        SandboxGateway.code: SandboxGateway,
    }

    @classmethod
    def get(cls, provider_code: str | None = None) -> PaymentGatewayPort:
        key = (provider_code or getattr(settings, "PAYMENT_GATEWAY", "") or "").strip().lower()
        if key not in cls._registry:
            raise PaymentConfigurationError(f"Unknown payment provider: {key or '(empty)'}")
        return cls._registry[key].from_settings()

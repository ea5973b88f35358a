from __future__ import annotations

import logging

import requests
from django.conf import settings

from apps.payments.domain.errors import GatewayRejectedError, GatewayUnavailableError, PaymentConfigurationError
from apps.payments.domain.ports import GatewayOrder

logger = logging.getLogger("consultdesk.payments")


def _gateway_order(data: dict) -> GatewayOrder:
    return GatewayOrder(
        id=str(data.get("id") or ""),
        amount=int(data.get("amount") or 0),
        currency=str(data.get("currency") or ""),
        receipt=str(data.get("receipt") or ""),
        status=str(data.get("status") or ""),
        raw=data,
    )


class RazorpayGateway:
    code = "razorpay"
    name = "Razorpay"

    def __init__(self, *, key_id: str, key_secret: str, api_base: str, timeout: float) -> None:
        if not key_id or not key_secret:
            raise PaymentConfigurationError("Razorpay credentials are not configured.")
        self._key_id = key_id
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self.session = requests.Session()
        self.session.auth = (key_id, key_secret)
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_settings(cls) -> "RazorpayGateway":
        return cls(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            api_base=settings.RAZORPAY_API_BASE,
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        )

    @property
    def key_id(self) -> str:
        return self._key_id

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self._api_base}{path}"
        try:
            response = self.session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            logger.exception("gateway_transport_failed", extra={"method": method, "path": path})
            raise GatewayUnavailableError("Payment gateway request failed.") from exc

        if response.status_code >= 500:
            logger.error("gateway_server_error", extra={"path": path, "status_code": response.status_code})
            raise GatewayUnavailableError("Payment gateway returned a server error.")

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("gateway_invalid_json", extra={"path": path, "status_code": response.status_code})
            raise GatewayUnavailableError("Payment gateway returned an unreadable response.") from exc

        if response.status_code >= 400:
            error = data.get("error") if isinstance(data, dict) else None
            description = (error or {}).get("description") or "Failed to create payment order"
            logger.warning(
                "gateway_rejected",
                extra={"path": path, "status_code": response.status_code, "code": (error or {}).get("code")},
            )
            raise GatewayRejectedError(description, status_code=response.status_code, field=(error or {}).get("field"))
        return data

    def create_order(self, *, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        data = self._request(
            "POST",
            "/orders",
            json={
                "amount": amount_minor,
                "currency": currency,
                "receipt": receipt,
                "payment_capture": 1,
                "notes": notes,
            },
        )
        return _gateway_order(data)

    def find_order_by_receipt(self, *, receipt: str) -> GatewayOrder | None:
        data = self._request("GET", "/orders", params={"receipt": receipt})
        items = data.get("items") or []
        if not items:
            return None
        return _gateway_order(items[0])

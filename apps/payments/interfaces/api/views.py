from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.interfaces.api.permissions import HasRole
from apps.orders.domain.errors import OrderDomainError
from apps.payments.application.use_cases.handle_webhook_event import (
    HandleWebhookEventCommand,
    HandleWebhookEventUseCase,
)
from apps.payments.application.use_cases.open_payment_intent import (
    OpenPaymentIntentCommand,
    OpenPaymentIntentUseCase,
)
from apps.payments.application.use_cases.verify_payment import VerifyPaymentCommand, VerifyPaymentUseCase
from apps.payments.domain.errors import PaymentDomainError
from consultdesk.api_errors import domain_error_response

PAYMENT_ERRORS = (PaymentDomainError, OrderDomainError)


class PaymentCreateOrderAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole]

    def post(self, request):
        data = request.data
        try:
            result = OpenPaymentIntentUseCase.execute(
                OpenPaymentIntentCommand(
                    actor=request.user,
                    identity=request.identity,
                    amount=data.get("amount"),
                    currency=data.get("currency") or "INR",
                    receipt=data.get("receipt"),
                    order_id=data.get("orderId"),
                )
            )
        except PAYMENT_ERRORS as exc:
            return domain_error_response(exc)

        gateway_order = result.gateway_order
        return Response(
            {
                "id": gateway_order.id,
                "amount": gateway_order.amount,
                "currency": gateway_order.currency,
                "receipt": gateway_order.receipt,
                "status": gateway_order.status,
                "keyId": result.key_id,
            }
        )


class PaymentVerifyAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole]

    def post(self, request):
        data = request.data
        try:
            result = VerifyPaymentUseCase.execute(
                VerifyPaymentCommand(
                    identity=request.identity,
                    actor=request.user,
                    order_id=data.get("orderId"),
                    gateway_payment_id=data.get("gatewayPaymentId"),
                    gateway_order_id=data.get("gatewayOrderId"),
                    signature=data.get("signature"),
                )
            )
        except PAYMENT_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "orderId": result.order.pk, "paymentId": result.order.gateway_payment_id}
        )


class PaymentWebhookAPI(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        try:
            event = HandleWebhookEventUseCase.execute(
                HandleWebhookEventCommand(
                    body=request.body,
                    signature=request.headers.get("X-Razorpay-Signature", ""),
                    event_id=request.headers.get("X-Razorpay-Event-Id", ""),
                )
            )
        except PAYMENT_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "status": event.processing_status}, status=status.HTTP_200_OK)

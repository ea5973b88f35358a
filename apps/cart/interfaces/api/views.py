from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.interfaces.api.permissions import HasRole
from apps.cart.application.use_cases.checkout_cart import CheckoutCartCommand, CheckoutCartUseCase
from apps.cart.domain.errors import CartDomainError
from apps.cart.services.cart_service import CartService
from apps.catalog.domain.errors import CatalogDomainError
from apps.orders.domain.errors import OrderDomainError
from consultdesk.api_errors import domain_error_response

CART_ERRORS = (CartDomainError, CatalogDomainError, OrderDomainError)


def _cart_payload(user) -> dict:
    lines = CartService.lines(user=user)
    totals = CartService.totals(user=user)
    return {
        "success": True,
        "items": [
            {
                "serviceId": line.service_id,
                "serviceName": line.service_name,
                "unitPrice": str(line.unit_price),
                "quantity": line.quantity,
                "lineTotal": str(line.line_total),
            }
            for line in lines
        ],
        "subtotal": str(totals.subtotal),
        "tax": str(totals.tax),
        "total": str(totals.total),
        "currency": totals.currency,
    }


class CartAPIView(APIView):
    permission_classes = [IsAuthenticated, HasRole]


class CartAPI(CartAPIView):
    def get(self, request):
        return Response(_cart_payload(request.user))

    def delete(self, request):
        CartService.clear(user=request.user)
        return Response(_cart_payload(request.user))


class CartItemsAPI(CartAPIView):
    def post(self, request):
        try:
            CartService.add_item(
                user=request.user,
                service_id=request.data.get("serviceId") or "",
                quantity=request.data.get("quantity", 1),
            )
        except CART_ERRORS as exc:
            return domain_error_response(exc)
        return Response(_cart_payload(request.user), status=status.HTTP_201_CREATED)


class CartItemAPI(CartAPIView):
    def patch(self, request, service_id: str):
        try:
            CartService.update_quantity(user=request.user, service_id=service_id, quantity=request.data.get("quantity"))
        except CART_ERRORS as exc:
            return domain_error_response(exc)
        return Response(_cart_payload(request.user))

    def delete(self, request, service_id: str):
        try:
            CartService.remove_item(user=request.user, service_id=service_id)
        except CART_ERRORS as exc:
            return domain_error_response(exc)
        return Response(_cart_payload(request.user))


class CartCheckoutAPI(CartAPIView):
    def post(self, request):
        try:
            result = CheckoutCartUseCase.execute(
                CheckoutCartCommand(client=request.user, client_details=request.data.get("clientDetails"))
            )
        except CART_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "orderIds": [order.pk for order in result.orders]},
            status=status.HTTP_201_CREATED,
        )

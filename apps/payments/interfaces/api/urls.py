from django.urls import path

from .views import PaymentCreateOrderAPI, PaymentVerifyAPI, PaymentWebhookAPI

urlpatterns = [
    path("payments/create-order", PaymentCreateOrderAPI.as_view(), name="api_payment_create_order"),
    path("payments/verify", PaymentVerifyAPI.as_view(), name="api_payment_verify"),
    path("payments/webhook", PaymentWebhookAPI.as_view(), name="api_payment_webhook"),
]

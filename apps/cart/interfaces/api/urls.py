from django.urls import path

from .views import CartAPI, CartCheckoutAPI, CartItemAPI, CartItemsAPI

urlpatterns = [
    path("cart/", CartAPI.as_view(), name="api_cart"),
    path("cart/items", CartItemsAPI.as_view(), name="api_cart_items"),
    path("cart/items/<slug:service_id>", CartItemAPI.as_view(), name="api_cart_item"),
    path("cart/checkout", CartCheckoutAPI.as_view(), name="api_cart_checkout"),
]

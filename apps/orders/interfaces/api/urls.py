from django.urls import path

from .views import (
    DashboardStatsAPI,
    OrderAssignAPI,
    OrderCancelAPI,
    OrderComplaintsAPI,
    OrderComplaintUpdateAPI,
    OrderCreateAPI,
    OrderDetailAPI,
    OrderDocumentDeleteAPI,
    OrderDocumentsAPI,
    OrderListAPI,
    OrderMessagesAPI,
    OrderMessagesReadAPI,
    OrderStatusUpdateAPI,
)

urlpatterns = [
    path("orders/", OrderListAPI.as_view(), name="api_orders"),
    path("orders/create", OrderCreateAPI.as_view(), name="api_order_create"),
    path("orders/<str:order_id>", OrderDetailAPI.as_view(), name="api_order_detail"),
    path("orders/<str:order_id>/cancel", OrderCancelAPI.as_view(), name="api_order_cancel"),
    path("orders/<str:order_id>/status", OrderStatusUpdateAPI.as_view(), name="api_order_status"),
    path("orders/<str:order_id>/assign", OrderAssignAPI.as_view(), name="api_order_assign"),
    path("orders/<str:order_id>/documents", OrderDocumentsAPI.as_view(), name="api_order_documents"),
    path(
        "orders/<str:order_id>/documents/<int:document_id>",
        OrderDocumentDeleteAPI.as_view(),
        name="api_order_document_delete",
    ),
    path("orders/<str:order_id>/messages", OrderMessagesAPI.as_view(), name="api_order_messages"),
    path("orders/<str:order_id>/messages/read", OrderMessagesReadAPI.as_view(), name="api_order_messages_read"),
    path("orders/<str:order_id>/complaints", OrderComplaintsAPI.as_view(), name="api_order_complaints"),
    path(
        "orders/<str:order_id>/complaints/<int:complaint_id>",
        OrderComplaintUpdateAPI.as_view(),
        name="api_order_complaint_update",
    ),
    path("dashboard/stats", DashboardStatsAPI.as_view(), name="api_dashboard_stats"),
]

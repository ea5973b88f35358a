from __future__ import annotations

from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.domain.roles import UserRole
from apps.accounts.interfaces.api.permissions import HasRole
from apps.catalog.domain.errors import CatalogDomainError
from apps.orders.application.use_cases.assign_order import AssignOrderCommand, AssignOrderUseCase
from apps.orders.application.use_cases.cancel_order import CancelOrderCommand, CancelOrderUseCase
from apps.orders.application.use_cases.complaints import (
    ListComplaintsUseCase,
    SubmitComplaintCommand,
    SubmitComplaintUseCase,
    UpdateComplaintCommand,
    UpdateComplaintUseCase,
)
from apps.orders.application.use_cases.create_order import CreateOrderCommand, CreateOrderUseCase
from apps.orders.application.use_cases.documents import (
    AttachDocumentCommand,
    AttachDocumentUseCase,
    DeleteDocumentCommand,
    DeleteDocumentUseCase,
)
from apps.orders.application.use_cases.messages import (
    ListOrderMessagesUseCase,
    MarkOrderMessagesReadUseCase,
    SendOrderMessageCommand,
    SendOrderMessageUseCase,
)
from apps.orders.application.use_cases.read_orders import (
    GetOrderCommand,
    GetOrderUseCase,
    ListOrdersCommand,
    ListOrdersUseCase,
)
from apps.orders.application.use_cases.update_order_status import UpdateOrderStatusCommand, UpdateOrderStatusUseCase
from apps.orders.domain.errors import OrderDomainError
from apps.orders.interfaces.api.serializers import (
    OrderComplaintSerializer,
    OrderDetailSerializer,
    OrderDocumentSerializer,
    OrderMessageSerializer,
    OrderSummarySerializer,
)
from apps.orders.services.order_stats import OrderStatsService
from consultdesk.api_errors import domain_error_response, error_response

ORDER_ERRORS = (OrderDomainError, CatalogDomainError)


class OrderAPIView(APIView):
    permission_classes = [IsAuthenticated, HasRole]


class OrderCreateAPI(OrderAPIView):
    def post(self, request):
        data = request.data
        try:
            result = CreateOrderUseCase.execute(
                CreateOrderCommand(
                    client=request.user,
                    service_id=data.get("serviceId"),
                    amount=data.get("amount"),
                    currency=data.get("currency"),
                    client_details=data.get("clientDetails"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "orderId": result.order.pk}, status=status.HTTP_201_CREATED)


class OrderListAPI(OrderAPIView):
    def get(self, request):
        try:
            orders = ListOrdersUseCase.execute(
                ListOrdersCommand(identity=request.identity, status=request.query_params.get("status"))
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "orders": OrderSummarySerializer(orders, many=True).data})


class OrderDetailAPI(OrderAPIView):
    def get(self, request, order_id: str):
        try:
            order = GetOrderUseCase.execute(GetOrderCommand(identity=request.identity, order_id=order_id))
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "order": OrderDetailSerializer(order).data})


class OrderCancelAPI(OrderAPIView):
    def post(self, request, order_id: str):
        try:
            order = CancelOrderUseCase.execute(
                CancelOrderCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    reason=request.data.get("reason"),
                    other_reason=request.data.get("otherReason"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "orderId": order.pk, "status": order.status})


class OrderStatusUpdateAPI(OrderAPIView):
    def post(self, request, order_id: str):
        try:
            order = UpdateOrderStatusUseCase.execute(
                UpdateOrderStatusCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    status=request.data.get("status") or "",
                    message=request.data.get("message") or "",
                    payment_status=request.data.get("paymentStatus"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "orderId": order.pk, "status": order.status, "paymentStatus": order.payment_status}
        )


class OrderAssignAPI(OrderAPIView):
    def post(self, request, order_id: str):
        raw_assignee = request.data.get("assigneeId")
        try:
            assignee_id = int(raw_assignee)
        except (TypeError, ValueError):
            return error_response(message="assigneeId must be a user id.", field="assigneeId")
        try:
            order = AssignOrderUseCase.execute(
                AssignOrderCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    assignee_id=assignee_id,
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "orderId": order.pk, "assignedTo": order.assigned_to_id})


class OrderDocumentsAPI(OrderAPIView):
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request, order_id: str):
        try:
            order = GetOrderUseCase.execute(GetOrderCommand(identity=request.identity, order_id=order_id))
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "documents": OrderDocumentSerializer(order.documents.all(), many=True).data})

    def post(self, request, order_id: str):
        try:
            document = AttachDocumentUseCase.execute(
                AttachDocumentCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    uploaded_file=request.FILES.get("file"),
                    category=request.data.get("category"),
                    name=request.data.get("name") or "",
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "document": OrderDocumentSerializer(document).data},
            status=status.HTTP_201_CREATED,
        )


class OrderDocumentDeleteAPI(OrderAPIView):
    def delete(self, request, order_id: str, document_id: int):
        try:
            DeleteDocumentUseCase.execute(
                DeleteDocumentCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    document_id=document_id,
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True})


class OrderMessagesAPI(OrderAPIView):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get(self, request, order_id: str):
        try:
            messages = ListOrderMessagesUseCase.execute(identity=request.identity, order_id=order_id)
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "messages": OrderMessageSerializer(messages, many=True).data})

    def post(self, request, order_id: str):
        try:
            message = SendOrderMessageUseCase.execute(
                SendOrderMessageCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    body=request.data.get("message") or "",
                    attachment=request.FILES.get("attachment"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "message": OrderMessageSerializer(message).data},
            status=status.HTTP_201_CREATED,
        )


class OrderMessagesReadAPI(OrderAPIView):
    def post(self, request, order_id: str):
        try:
            updated = MarkOrderMessagesReadUseCase.execute(identity=request.identity, order_id=order_id)
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "updated": updated})


class OrderComplaintsAPI(OrderAPIView):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get(self, request, order_id: str):
        try:
            complaints = ListComplaintsUseCase.execute(identity=request.identity, order_id=order_id)
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "complaints": OrderComplaintSerializer(complaints, many=True).data})

    def post(self, request, order_id: str):
        try:
            complaint = SubmitComplaintUseCase.execute(
                SubmitComplaintCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    complaint_type=request.data.get("complaintType"),
                    description=request.data.get("description"),
                    attachment=request.FILES.get("attachment"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "complaint": OrderComplaintSerializer(complaint).data},
            status=status.HTTP_201_CREATED,
        )


class OrderComplaintUpdateAPI(OrderAPIView):
    def patch(self, request, order_id: str, complaint_id: int):
        try:
            complaint = UpdateComplaintUseCase.execute(
                UpdateComplaintCommand(
                    actor=request.user,
                    identity=request.identity,
                    order_id=order_id,
                    complaint_id=complaint_id,
                    status=request.data.get("status"),
                    resolution=request.data.get("resolution"),
                )
            )
        except ORDER_ERRORS as exc:
            return domain_error_response(exc)
        return Response({"success": True, "complaint": OrderComplaintSerializer(complaint).data})


class DashboardStatsAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole.of(UserRole.ADMIN, UserRole.MANAGER)]

    def get(self, request):
        return Response({"success": True, "stats": OrderStatsService.snapshot()})

from __future__ import annotations

from rest_framework import serializers

from apps.orders.models import Order, OrderComplaint, OrderDocument, OrderMessage, OrderTimelineEntry


class OrderTimelineEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderTimelineEntry
        fields = ["id", "status", "event", "message", "actor_label", "created_at"]


class OrderDocumentSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = OrderDocument
        fields = ["id", "name", "category", "content_type", "size", "url", "uploaded_by", "uploaded_at"]

    def get_url(self, obj: OrderDocument) -> str:
        return obj.file.url if obj.file else ""


class OrderMessageSerializer(serializers.ModelSerializer):
    attachment_url = serializers.SerializerMethodField()

    class Meta:
        model = OrderMessage
        fields = [
            "id",
            "sender",
            "sender_name",
            "sender_role",
            "body",
            "attachment_name",
            "attachment_content_type",
            "attachment_size",
            "attachment_url",
            "is_read",
            "created_at",
        ]

    def get_attachment_url(self, obj: OrderMessage) -> str:
        return obj.attachment.url if obj.attachment else ""


class OrderComplaintSerializer(serializers.ModelSerializer):
    attachment_url = serializers.SerializerMethodField()

    class Meta:
        model = OrderComplaint
        fields = [
            "id",
            "complaint_type",
            "description",
            "status",
            "resolution",
            "attachment_name",
            "attachment_url",
            "submitted_by",
            "created_at",
            "updated_at",
        ]

    def get_attachment_url(self, obj: OrderComplaint) -> str:
        return obj.attachment.url if obj.attachment else ""


class OrderSummarySerializer(serializers.ModelSerializer):
    service_id = serializers.CharField(source="service.pk", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "service_id",
            "service_name",
            "amount",
            "currency",
            "status",
            "payment_status",
            "payment_verified",
            "assigned_to",
            "created_at",
            "updated_at",
        ]


class OrderDetailSerializer(OrderSummarySerializer):
    timeline = OrderTimelineEntrySerializer(many=True, read_only=True)
    documents = OrderDocumentSerializer(many=True, read_only=True)

    class Meta(OrderSummarySerializer.Meta):
        fields = OrderSummarySerializer.Meta.fields + [
            "client",
            "client_details",
            "gateway_order_id",
            "gateway_payment_id",
            "cancellation_reason",
            "has_complaint",
            "version",
            "timeline",
            "documents",
        ]

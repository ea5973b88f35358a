from django.contrib import admin

from .models import Order, OrderComplaint, OrderDocument, OrderMessage, OrderTimelineEntry


class OrderTimelineInline(admin.TabularInline):
    model = OrderTimelineEntry
    extra = 0
    can_delete = False
    readonly_fields = ("status", "event", "message", "actor", "actor_label", "created_at")


class OrderDocumentInline(admin.TabularInline):
    model = OrderDocument
    extra = 0
    readonly_fields = ("name", "file", "category", "size", "uploaded_by", "uploaded_at")


class OrderMessageInline(admin.TabularInline):
    model = OrderMessage
    extra = 0
    can_delete = False
    readonly_fields = ("sender", "sender_role", "body", "attachment", "is_read", "created_at")


class OrderComplaintInline(admin.StackedInline):
    model = OrderComplaint
    extra = 0
    readonly_fields = ("submitted_by", "complaint_type", "description", "attachment", "created_at", "updated_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "service_name", "amount", "currency", "status", "payment_status", "created_at")
    search_fields = ("id", "client__email", "service_name", "gateway_order_id", "gateway_payment_id")
    list_filter = ("status", "payment_status", "payment_verified", "has_complaint")
    list_select_related = ("client",)
    readonly_fields = ("version", "gateway_order_id", "gateway_payment_id", "payment_verified", "created_at", "updated_at")
    inlines = [OrderTimelineInline, OrderDocumentInline, OrderMessageInline, OrderComplaintInline]


@admin.register(OrderComplaint)
class OrderComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "complaint_type", "status", "created_at")
    list_filter = ("status", "complaint_type")
    search_fields = ("order__id", "description")

from django.contrib import admin

from .models import PaymentAttempt, PaymentEvent


@admin.register(PaymentAttempt)
class PaymentAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "receipt", "order", "gateway_order_id", "amount_minor", "currency", "status", "created_at")
    search_fields = ("receipt", "gateway_order_id", "gateway_payment_id", "order__id")
    list_filter = ("status", "gateway_code")
    list_select_related = ("order",)


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_id", "event_type", "order_id", "processing_status", "created_at")
    search_fields = ("event_id", "order_id")
    list_filter = ("event_type", "processing_status")

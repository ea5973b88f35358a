from django.contrib import admin

from .models import EmailLog


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ("id", "template", "to_email", "order_id", "status", "attempts", "created_at", "sent_at")
    search_fields = ("to_email", "order_id", "idempotency_key")
    list_filter = ("status", "template")
    readonly_fields = ("idempotency_key", "last_error")

from django.contrib import admin

from .models import Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price_amount", "price_currency", "billing_type", "is_active")
    search_fields = ("id", "name", "short_description")
    list_filter = ("category", "billing_type", "is_active")

from __future__ import annotations

from rest_framework import serializers

from apps.catalog.models import Service


class ServiceSerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "short_description",
            "description",
            "category",
            "price",
            "features",
            "requirements",
            "deliverables",
            "estimated_duration",
        ]

    def get_price(self, obj: Service) -> dict:
        return {
            "amount": str(obj.price_amount),
            "currency": obj.price_currency,
            "billing_type": obj.billing_type,
        }

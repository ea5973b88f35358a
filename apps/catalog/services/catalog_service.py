from __future__ import annotations

from django.db.models import QuerySet

from apps.catalog.domain.errors import ServiceNotFoundError
from apps.catalog.models import Service


class CatalogService:
    @staticmethod
    def list_active(*, category: str | None = None) -> QuerySet[Service]:
        queryset = Service.objects.filter(is_active=True)
        if category:
            queryset = queryset.filter(category=category.strip().lower())
        return queryset

    @staticmethod
    def get_active(service_id: str) -> Service:
        """Inactive services are treated as missing so they cannot be ordered."""
        service = Service.objects.filter(pk=(service_id or "").strip(), is_active=True).first()
        if service is None:
            raise ServiceNotFoundError()
        return service

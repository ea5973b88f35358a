from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.catalog.domain.errors import CatalogDomainError
from apps.catalog.interfaces.api.serializers import ServiceSerializer
from apps.catalog.services.catalog_service import CatalogService
from consultdesk.api_errors import domain_error_response


class ServiceListAPI(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        services = CatalogService.list_active(category=request.query_params.get("category"))
        return Response({"success": True, "data": ServiceSerializer(services, many=True).data})


class ServiceDetailAPI(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, service_id: str):
        try:
            service = CatalogService.get_active(service_id)
        except CatalogDomainError as exc:
            return domain_error_response(exc)
        return Response({"success": True, "data": ServiceSerializer(service).data})

from django.urls import path

from .views import ServiceDetailAPI, ServiceListAPI

urlpatterns = [
    path("services/", ServiceListAPI.as_view(), name="api_services"),
    path("services/<slug:service_id>", ServiceDetailAPI.as_view(), name="api_service_detail"),
]

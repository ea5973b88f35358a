"""
URL configuration for the consultdesk project.

`/admin/` is the admin role dashboard; the Django admin site lives under
`/django-admin/`.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from apps.accounts.interfaces.web.views import dashboard_redirect_view, unauthorized_view
from apps.observability.views import healthz, readyz

from . import web_views

handler404 = "consultdesk.error_views.handle_404"
handler500 = "consultdesk.error_views.handle_500"

urlpatterns = [
    path("healthz", healthz, name="healthz"),
    path("readyz", readyz, name="readyz"),
    path("django-admin/", admin.site.urls),
    path("api/", include("consultdesk.api_urls")),
    path("auth/", include(("apps.accounts.interfaces.web.auth_urls", "auth"), namespace="auth")),
    path("unauthorized", unauthorized_view, name="unauthorized"),
    path("dashboard", dashboard_redirect_view, name="dashboard"),
    path("client/", web_views.client_dashboard, name="client_dashboard"),
    path("employee/", web_views.employee_dashboard, name="employee_dashboard"),
    path("admin/", web_views.admin_dashboard, name="admin_dashboard"),
    path("services", web_views.service_list, name="service_list"),
    path("", web_views.home, name="home"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

from __future__ import annotations

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET

from apps.accounts.domain.roles import UserRole
from apps.accounts.interfaces.web.decorators import access_required
from apps.catalog.services.catalog_service import CatalogService
from apps.orders.application.use_cases.read_orders import ListOrdersCommand, ListOrdersUseCase
from apps.orders.domain.status import CLOSED_STATUSES, OrderStatus
from apps.orders.services.order_stats import OrderStatsService

RECENT_ORDERS_LIMIT = 20


def _dashboard_context(request: HttpRequest, title: str) -> dict:
    orders = ListOrdersUseCase.execute(ListOrdersCommand(identity=request.identity))
    open_count = orders.exclude(status__in=[status.value for status in CLOSED_STATUSES]).count()
    return {
        "title": title,
        "orders": orders[:RECENT_ORDERS_LIMIT],
        "open_count": open_count,
        "completed_count": orders.filter(status=OrderStatus.COMPLETED.value).count(),
    }


@require_GET
def home(request: HttpRequest) -> HttpResponse:
    return render(request, "web/home.html", {"services": CatalogService.list_active()[:6]})


@require_GET
def service_list(request: HttpRequest) -> HttpResponse:
    category = request.GET.get("category") or None
    return render(
        request,
        "web/services.html",
        {"services": CatalogService.list_active(category=category), "category": category},
    )


@require_GET
@access_required({UserRole.CLIENT, UserRole.ADMIN})
def client_dashboard(request: HttpRequest) -> HttpResponse:
    return render(request, "web/dashboard.html", _dashboard_context(request, "My orders"))


@require_GET
@access_required({UserRole.EMPLOYEE, UserRole.MANAGER, UserRole.ADMIN})
def employee_dashboard(request: HttpRequest) -> HttpResponse:
    return render(request, "web/dashboard.html", _dashboard_context(request, "Assigned work"))


@require_GET
@access_required({UserRole.ADMIN})
def admin_dashboard(request: HttpRequest) -> HttpResponse:
    context = _dashboard_context(request, "All orders")
    context["stats"] = OrderStatsService.snapshot()
    return render(request, "web/dashboard.html", context)

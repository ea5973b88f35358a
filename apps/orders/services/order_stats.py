from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.accounts.domain.roles import STAFF_ROLES, UserRole
from apps.accounts.models import AccountProfile
from apps.orders.domain.status import OrderStatus, PaymentStatus
from apps.orders.models import Order

DEFAULT_TOP_SERVICES = 5
DEFAULT_REVENUE_MONTHS = 6


def _money(value) -> str:
    return str((value or Decimal("0")).quantize(Decimal("0.01")))


def _month_keys(now: datetime, months: int) -> list[str]:
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class OrderStatsService:
    """
    Figures for the admin dashboard. Revenue counts orders whose payment is
    completed and is reported per currency; amounts are decimal strings.
    """

    @staticmethod
    def paid_orders():
        return Order.objects.filter(payment_status=PaymentStatus.COMPLETED.value)

    @staticmethod
    def total_revenue() -> dict[str, str]:
        rows = OrderStatsService.paid_orders().values("currency").annotate(total=Sum("amount")).order_by("currency")
        return {row["currency"]: _money(row["total"]) for row in rows}

    @staticmethod
    def orders_by_status() -> dict[str, int]:
        counts = {status.value: 0 for status in OrderStatus}
        for row in Order.objects.order_by().values("status").annotate(count=Count("id")):
            counts[row["status"]] = row["count"]
        return counts

    @staticmethod
    def top_services(limit: int = DEFAULT_TOP_SERVICES) -> list[dict]:
        rows = (
            Order.objects.values("service_id", "service_name")
            .annotate(
                orders=Count("id"),
                paid_orders=Count("id", filter=Q(payment_status=PaymentStatus.COMPLETED.value)),
            )
            .order_by("-orders", "service_name")[:limit]
        )
        return [
            {
                "serviceId": row["service_id"],
                "serviceName": row["service_name"],
                "orders": row["orders"],
                "paidOrders": row["paid_orders"],
            }
            for row in rows
        ]

    @staticmethod
    def revenue_by_month(months: int = DEFAULT_REVENUE_MONTHS, now: datetime | None = None) -> list[dict]:
        """Zero-filled, oldest month first, bucketed by the order's local creation month."""
        now = timezone.localtime(now or timezone.now())
        keys = _month_keys(now, months)
        buckets: dict[str, dict[str, Decimal]] = {key: defaultdict(Decimal) for key in keys}

        first_year, first_month = (int(part) for part in keys[0].split("-"))
        start = now.replace(year=first_year, month=first_month, day=1, hour=0, minute=0, second=0, microsecond=0)
        for created_at, currency, amount in OrderStatsService.paid_orders().filter(
            created_at__gte=start
        ).values_list("created_at", "currency", "amount"):
            key = timezone.localtime(created_at).strftime("%Y-%m")
            if key in buckets:
                buckets[key][currency] += amount

        return [
            {"month": key, "revenue": {currency: _money(total) for currency, total in sorted(buckets[key].items())}}
            for key in keys
        ]

    @staticmethod
    def people_counts() -> dict[str, int]:
        staff = [role.value for role in STAFF_ROLES]
        return {
            "clients": AccountProfile.objects.filter(role=UserRole.CLIENT.value).count(),
            "staff": AccountProfile.objects.filter(role__in=staff).count(),
        }

    @staticmethod
    def snapshot(now: datetime | None = None) -> dict:
        return {
            "totalOrders": Order.objects.count(),
            "totalRevenue": OrderStatsService.total_revenue(),
            "ordersByStatus": OrderStatsService.orders_by_status(),
            "topServices": OrderStatsService.top_services(),
            "revenueByMonth": OrderStatsService.revenue_by_month(now=now),
            **OrderStatsService.people_counts(),
        }

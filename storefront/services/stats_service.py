# storefront/services/stats_service.py
"""Statystyki dashboardu admina.

Wszystko liczone na zadanie, tylko odczyt. Kazda metryka liczona osobno:
blad jednej (np. przychodu) jest logowany i zastepowany wartoscia domyslna,
reszta dashboardu dalej sie zwraca.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from sqlalchemy.orm import Session

from storefront.domain.status import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.settings import LOW_STOCK_THRESHOLD, RECENT_ACTIVITY_LIMIT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

WELCOME_ACTIVITY = {
    "title": "Welcome to Admin Panel",
    "description": "Start managing your store to see activities here",
    "time": "Just now",
}


def _utc(value: datetime) -> datetime:
    # sqlite oddaje naive datetime, zapisujemy zawsze UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_time_ago(then: datetime | None, now: datetime) -> str:
    if then is None:
        return "Recently"

    diff = _utc(now) - _utc(then)
    minutes = int(diff.total_seconds() // 60)
    hours = int(diff.total_seconds() // 3600)
    days = diff.days

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days < 7:
        return f"{days} days ago"
    return f"{then.day} {then:%b %Y}"


class StatsService:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] | None = None,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        recent_limit: int = RECENT_ACTIVITY_LIMIT,
    ):
        self.db = db
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.low_stock_threshold = low_stock_threshold
        self.recent_limit = recent_limit

    def get_dashboard_stats(self) -> dict[str, Any]:
        now = _utc(self.clock())
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total_orders = self._safe("total_orders", self.orders.count_orders, 0)
        total_revenue = self._safe("total_revenue", self.orders.sum_revenue, Decimal("0.00"))

        recent = self._safe(
            "recent_activities",
            lambda: self._recent_activities(now),
            [],
        )

        return {
            "total_products": self._safe("total_products", self.products.count_products, 0),
            "low_stock_items": self._safe(
                "low_stock_items",
                lambda: self.products.count_low_stock(self.low_stock_threshold),
                0,
            ),
            "total_orders": total_orders,
            "todays_orders": self._safe(
                "todays_orders",
                lambda: self.orders.count_created_since(start_of_day),
                0,
            ),
            "pending_orders": self._safe(
                "pending_orders",
                lambda: self.orders.count_by_status(OrderStatus.PENDING),
                0,
            ),
            "total_revenue": total_revenue,
            "avg_order_value": average_order_value(total_revenue, total_orders),
            "total_users": self._safe("total_users", self.users.count_users, 0),
            "new_users_today": self._safe(
                "new_users_today",
                lambda: self.users.count_created_since(start_of_day),
                0,
            ),
            "recent_activities": recent,
            "generated_at": now,
        }

    def _recent_activities(self, now: datetime) -> list[dict[str, str]]:
        orders = self.orders.recent_orders(self.recent_limit)
        # placeholder tylko dla pustej historii, blad zapytania daje []
        if not orders:
            return [dict(WELCOME_ACTIVITY)]

        return [
            {
                "title": "New Order",
                "description": f"Order #{order.order_number} placed",
                "time": format_time_ago(order.created_at, now),
            }
            for order in orders
        ]

    def _safe(self, name: str, compute: Callable[[], Any], default: Any) -> Any:
        try:
            return compute()
        except Exception:
            logger.exception(f"Metryka {name} nie policzona, uzywam wartosci domyslnej")
            # po bledzie zapytania transakcja w postgresie jest przerwana
            self.db.rollback()
            return default


def average_order_value(total_revenue: Decimal, total_orders: int) -> Decimal:
    if not total_orders:
        return Decimal("0.00")
    return (Decimal(total_revenue) / total_orders).quantize(Decimal("0.01"))

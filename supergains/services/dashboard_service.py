# supergains/services/dashboard_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from supergains.repos.inventory_repo import InventoryRepo
from supergains.repos.order_repo import OrderRepo

PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "month": "%Y-%m",
}


class DashboardService:
    """Read-only reports, nothing here writes."""

    def __init__(self, db: Session):
        self.order_repo = OrderRepo(db)
        self.inventory_repo = InventoryRepo(db)

    def summary(self) -> dict:
        sales = self.order_repo.sales_stats()
        stock = self.inventory_repo.stats()
        return {
            "total_orders": sales["total_orders"],
            "total_revenue": Decimal(sales["total_revenue"]).quantize(Decimal("0.01")),
            "average_order_value": Decimal(sales["average_order_value"]).quantize(Decimal("0.01")),
            "items_sold": sales["items_sold"],
            "orders_by_status": sales["orders_by_status"],
            "low_stock": stock["low_stock"],
            "out_of_stock": stock["out_of_stock"],
        }

    def top_products(self, limit: int = 5) -> list[dict]:
        return self.order_repo.top_products(min(50, max(1, limit)))

    def sales_by_period(self, group_by: str = "day") -> list[dict]:
        fmt = PERIOD_FORMATS.get(group_by)
        if not fmt:
            raise ValueError(f"group_by must be one of {', '.join(PERIOD_FORMATS)}")

        buckets: dict[str, dict] = {}
        for order in self.order_repo.non_cancelled_orders():
            period = order.created_at.strftime(fmt)
            bucket = buckets.setdefault(period, {"period": period, "orders": 0, "revenue": Decimal("0.00")})
            bucket["orders"] += 1
            bucket["revenue"] += Decimal(order.total)
        return list(buckets.values())

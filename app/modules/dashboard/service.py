# app/modules/dashboard/service.py
from sqlalchemy.orm import Session
from typing import Any, Dict, List
from datetime import datetime, timedelta
from collections import OrderedDict

from .repository import DashboardRepository
from .schemas import SalesPeriod
from app.config.settings import settings
from app.shared.database.models import InventoryItem, Sale

PERIOD_DAYS = {
    SalesPeriod.WEEK: 7,
    SalesPeriod.MONTH: 30,
    SalesPeriod.YEAR: 365,
}

class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = DashboardRepository(db)

    async def get_summary(self) -> Dict[str, Any]:
        """Resumen general: inventario, ventas y usuarios"""
        items = self.repository.get_inventory_items()
        low_stock_items = [item for item in items if self._is_low_stock(item)]

        now = datetime.utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        first_day_of_month = today.replace(day=1)

        all_sales = self.repository.get_sales_summary()
        today_sales = self.repository.get_sales_summary(since=today)
        month_sales = self.repository.get_sales_summary(since=first_day_of_month)
        roles = self.repository.get_user_roles()

        return {
            "inventory": {
                "total_items": len(items),
                "total_value": self._inventory_value(items),
                "low_stock_count": len(low_stock_items),
                "out_of_stock_count": sum(1 for item in items if item.quantity == 0),
                "categories": len({item.category for item in items}),
                "low_stock_items": [
                    {
                        "id": item.id,
                        "name": item.name,
                        "quantity": item.quantity,
                        "reorder_level": self._threshold(item)
                    }
                    for item in low_stock_items
                ]
            },
            "sales": {
                "total_sales": all_sales["count"],
                "total_revenue": all_sales["revenue"],
                "today_sales": today_sales["count"],
                "today_revenue": today_sales["revenue"],
                "month_sales": month_sales["count"],
                "month_revenue": month_sales["revenue"],
                "recent_sales": [self._sale_summary(sale) for sale in self.repository.get_recent_sales(5)],
                "top_products": self.repository.get_top_selling(5)
            },
            "users": {
                "total_users": sum(roles.values()),
                "roles": roles
            }
        }

    async def get_sales_by_period(self, period: SalesPeriod) -> List[Dict[str, Any]]:
        """Ventas agrupadas por fecha dentro del periodo, en orden cronológico"""
        end = datetime.utcnow()
        start = end - timedelta(days=PERIOD_DAYS[period])

        grouped: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for sale in self.repository.get_sales_between(start, end):
            key = sale.created_at.date().isoformat()
            bucket = grouped.setdefault(key, {"date": key, "count": 0, "revenue": 0.0})
            bucket["count"] += 1
            bucket["revenue"] += float(sale.total)

        return list(grouped.values())

    async def get_inventory_status(self) -> Dict[str, Any]:
        """Estado del inventario agrupado por categoría"""
        items = self.repository.get_inventory_items()

        categories: Dict[str, Dict[str, Any]] = {}
        for item in items:
            entry = categories.setdefault(
                item.category,
                {"category": item.category, "count": 0, "value": 0.0, "low_stock": 0}
            )
            entry["count"] += 1
            entry["value"] += float(item.price * item.quantity)
            if self._is_low_stock(item):
                entry["low_stock"] += 1

        return {
            "categories": sorted(categories.values(), key=lambda x: x["category"]),
            "total_items": len(items),
            "total_value": self._inventory_value(items),
            "low_stock_count": sum(1 for item in items if self._is_low_stock(item)),
            "out_of_stock_count": sum(1 for item in items if item.quantity == 0)
        }

    async def get_top_selling(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self.repository.get_top_selling(limit)

    async def get_recent_sales(self, limit: int = 10) -> List[Dict[str, Any]]:
        return [self._sale_summary(sale) for sale in self.repository.get_recent_sales(limit)]

    # MÉTODOS PRIVADOS HELPERS

    @staticmethod
    def _threshold(item: InventoryItem) -> int:
        # Sin nivel de reorden configurado se usa el umbral por defecto
        return item.reorder_level or settings.default_reorder_threshold

    def _is_low_stock(self, item: InventoryItem) -> bool:
        return item.quantity <= self._threshold(item)

    @staticmethod
    def _inventory_value(items: List[InventoryItem]) -> float:
        return float(sum((item.price * item.quantity for item in items), 0))

    @staticmethod
    def _sale_summary(sale: Sale) -> Dict[str, Any]:
        return {
            "id": sale.id,
            "customer": sale.customer,
            "total": float(sale.total),
            "status": sale.status,
            "date": sale.created_at.isoformat(),
            "items": len(sale.items)
        }

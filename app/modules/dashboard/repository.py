# app/modules/dashboard/repository.py
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.shared.database.models import InventoryItem, Sale, SaleItem, User

class DashboardRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_inventory_items(self) -> List[InventoryItem]:
        return self.db.query(InventoryItem).order_by(InventoryItem.quantity.asc()).all()

    def get_sales_summary(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Conteo e ingresos de ventas.

        Optimización: aggregate query en vez de cargar todas las ventas
        """
        query = self.db.query(
            func.count(Sale.id).label('count'),
            func.coalesce(func.sum(Sale.total), 0).label('revenue')
        )
        if since is not None:
            query = query.filter(Sale.created_at >= since)
        row = query.one()
        return {"count": row.count or 0, "revenue": float(row.revenue or 0)}

    def get_sales_between(self, start: datetime, end: datetime) -> List[Sale]:
        return self.db.query(Sale).filter(
            Sale.created_at >= start,
            Sale.created_at <= end
        ).order_by(Sale.created_at.asc()).all()

    def get_recent_sales(self, limit: int) -> List[Sale]:
        return self.db.query(Sale).options(
            selectinload(Sale.items)
        ).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()

    def get_top_selling(self, limit: int) -> List[Dict[str, Any]]:
        """Items más vendidos por cantidad"""
        total_quantity = func.sum(SaleItem.quantity).label('total_quantity')
        rows = self.db.query(
            SaleItem.item_id,
            func.max(SaleItem.item_name).label('item_name'),
            total_quantity,
            func.sum(SaleItem.subtotal).label('total_revenue')
        ).group_by(
            SaleItem.item_id
        ).order_by(
            total_quantity.desc(), SaleItem.item_id.asc()
        ).limit(limit).all()

        return [
            {
                "item_id": row.item_id,
                "name": row.item_name or "Producto desconocido",
                "total_quantity": int(row.total_quantity),
                "total_revenue": float(row.total_revenue or 0)
            }
            for row in rows
        ]

    def get_user_roles(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

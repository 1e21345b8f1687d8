# app/modules/sales/repository.py
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func
from typing import Dict, Any, List, Optional, Iterable
from decimal import Decimal
import logging

from app.shared.database.models import Sale, SaleItem, InventoryItem

logger = logging.getLogger(__name__)

# Número de periodos devueltos por cada granularidad
STATS_LIMITS = {"daily": 30, "monthly": 12, "yearly": 5}


class SalesRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_sale(
        self,
        sale_data: Dict[str, Any],
        lines: Iterable[Dict[str, Any]],
        total: Decimal,
        user_id: int
    ) -> Sale:
        """
        Persistir venta e items en una sola transacción.

        No toca el inventario: las reservas ya fueron aplicadas por el ledger.
        """
        sale = Sale(
            customer=sale_data['customer'],
            payment_method=sale_data['payment_method'],
            status=sale_data['status'],
            notes=sale_data.get('notes'),
            total=total,
            user_id=user_id
        )
        sale.items = [
            SaleItem(
                position=position,
                item_id=line['item_id'],
                item_name=line.get('item_name'),
                quantity=line['quantity'],
                price=line['price'],
                subtotal=line['subtotal']
            )
            for position, line in enumerate(lines)
        ]

        self.db.add(sale)
        self.db.commit()
        self.db.refresh(sale)

        logger.info(f"Venta creada con ID: {sale.id}")
        return sale

    def get_sale(self, sale_id: int) -> Optional[Sale]:
        return self.db.query(Sale).options(
            selectinload(Sale.items)
        ).filter(Sale.id == sale_id).first()

    def list_sales(self, status: Optional[str] = None) -> List[Sale]:
        query = self.db.query(Sale).options(selectinload(Sale.items))
        if status:
            query = query.filter(Sale.status == status)
        return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()

    def update_sale(self, sale: Sale, updates: Dict[str, Any]) -> Sale:
        for field, value in updates.items():
            setattr(sale, field, value)
        self.db.commit()
        self.db.refresh(sale)
        return sale

    def delete_sale(self, sale: Sale) -> None:
        self.db.delete(sale)
        self.db.commit()

    def get_item_names(self, item_ids: Iterable[int]) -> Dict[int, str]:
        """Nombres actuales de los items, para guardar una copia en la venta"""
        ids = set(item_ids)
        if not ids:
            return {}
        rows = self.db.query(InventoryItem.id, InventoryItem.name).filter(
            InventoryItem.id.in_(ids)
        ).all()
        return {item_id: name for item_id, name in rows}

    def get_stats_by_period(self, period: str, status: str = "Completed") -> List[Dict[str, Any]]:
        """
        Conteo y total de ventas agrupados por día, mes o año.

        Optimización: agregación en BD, más recientes primero.
        """
        year = func.extract('year', Sale.created_at)
        month = func.extract('month', Sale.created_at)
        day = func.extract('day', Sale.created_at)

        group_columns = {
            "daily": [year, month, day],
            "monthly": [year, month],
            "yearly": [year],
        }[period]
        labels = ["year", "month", "day"][:len(group_columns)]

        rows = self.db.query(
            *[column.label(label) for column, label in zip(group_columns, labels)],
            func.count(Sale.id).label('count'),
            func.coalesce(func.sum(Sale.total), 0).label('total')
        ).filter(
            Sale.status == status
        ).group_by(
            *group_columns
        ).order_by(
            *[column.desc() for column in group_columns]
        ).limit(STATS_LIMITS[period]).all()

        return [
            {
                **{label: int(getattr(row, label)) for label in labels},
                "count": row.count,
                "total": float(row.total)
            }
            for row in rows
        ]

# app/modules/inventory/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Any, Dict, List, Optional

from app.shared.database.models import InventoryItem

class InventoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_item(self, item_data: Dict[str, Any], user_id: int) -> InventoryItem:
        """Crear item de inventario"""
        item = InventoryItem(**item_data, created_by=user_id)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def get_item(self, item_id: int) -> Optional[InventoryItem]:
        return self.db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    def list_items(self, category: Optional[str] = None) -> List[InventoryItem]:
        query = self.db.query(InventoryItem)
        if category:
            query = query.filter(InventoryItem.category == category)
        return query.order_by(InventoryItem.name.asc()).all()

    def update_item(self, item: InventoryItem, updates: Dict[str, Any]) -> InventoryItem:
        """Actualizar campos descriptivos (la cantidad pasa por el ledger)"""
        for field, value in updates.items():
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item: InventoryItem) -> None:
        self.db.delete(item)
        self.db.commit()

    def get_low_stock_items(self) -> List[InventoryItem]:
        """Items con cantidad en o bajo su nivel de reorden"""
        return self.db.query(InventoryItem).filter(
            InventoryItem.quantity <= InventoryItem.reorder_level
        ).order_by(InventoryItem.quantity.asc()).all()

    def get_categories(self) -> List[str]:
        rows = self.db.query(InventoryItem.category).distinct().order_by(InventoryItem.category).all()
        return [category for (category,) in rows]

    def search_items(self, text: str) -> List[InventoryItem]:
        """Búsqueda sin distinguir mayúsculas en nombre, descripción y categoría"""
        pattern = f"%{text}%"
        return self.db.query(InventoryItem).filter(
            or_(
                InventoryItem.name.ilike(pattern),
                InventoryItem.description.ilike(pattern),
                InventoryItem.category.ilike(pattern)
            )
        ).order_by(InventoryItem.name.asc()).all()

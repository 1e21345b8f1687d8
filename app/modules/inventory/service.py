# app/modules/inventory/service.py
from fastapi import HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging

from .repository import InventoryRepository
from .schemas import InventoryItemCreate, InventoryItemUpdate
from app.core.exceptions import InvalidArgument, ItemNotFound
from app.shared.database.models import InventoryItem
from app.shared.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)

# Columnas NOT NULL: un null explícito en el patch se ignora
NON_NULLABLE_FIELDS = {"name", "category", "unit", "price", "cost", "reorder_level"}

class InventoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = InventoryRepository(db)
        self.ledger = InventoryLedger(db)

    async def create_item(self, item_data: InventoryItemCreate, user_id: int) -> InventoryItem:
        """Crear item de inventario"""
        try:
            item = self.repository.create_item(item_data.model_dump(), user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Error inesperado creando item de inventario")
            raise HTTPException(500, detail=f"Error creando item: {str(e)}")
        logger.info(f"Item {item.id} '{item.name}' creado por usuario {user_id} (cantidad {item.quantity})")
        return item

    async def get_item(self, item_id: int) -> InventoryItem:
        item = self.repository.get_item(item_id)
        if not item:
            raise ItemNotFound(item_id)
        return item

    async def list_items(self, category: Optional[str] = None) -> List[InventoryItem]:
        return self.repository.list_items(category)

    async def update_item(self, item_id: int, patch: InventoryItemUpdate, user_id: int) -> InventoryItem:
        """
        Actualizar item.

        Un cambio de cantidad es un ajuste administrativo y se registra
        en el ledger; el resto de campos se actualiza directamente.
        """
        item = await self.get_item(item_id)

        updates = patch.model_dump(exclude_unset=True)
        new_quantity = updates.pop('quantity', None)
        updates = {
            field: value for field, value in updates.items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }

        if new_quantity is not None and new_quantity != item.quantity:
            self.ledger.adjust(item_id, new_quantity, user_id=user_id)
            item = await self.get_item(item_id)

        if updates:
            item = self.repository.update_item(item, updates)

        return item

    async def delete_item(self, item_id: int) -> None:
        item = await self.get_item(item_id)
        try:
            self.repository.delete_item(item)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Error inesperado eliminando item {item_id}")
            raise HTTPException(500, detail=f"Error eliminando item: {str(e)}")
        logger.info(f"Item {item_id} eliminado")

    async def get_low_stock_items(self) -> List[InventoryItem]:
        return self.repository.get_low_stock_items()

    async def get_categories(self) -> List[str]:
        return self.repository.get_categories()

    async def search_items(self, query: Optional[str]) -> List[InventoryItem]:
        if not query or not query.strip():
            raise InvalidArgument("Debe indicar un texto de búsqueda")
        return self.repository.search_items(query.strip())

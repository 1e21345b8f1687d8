# app/modules/inventory/router.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user, get_current_user, get_manager_user
from app.modules.notifications.service import NotificationsService
from app.shared.database.models import User
from app.shared.services.notification_hub import NotificationHub, get_notification_hub
from .service import InventoryService
from .schemas import (
    CategoriesResponse, InventoryItemCreate, InventoryItemData, InventoryItemResponse,
    InventoryItemUpdate, InventoryListResponse
)

router = APIRouter()

def _list_response(items) -> InventoryListResponse:
    return InventoryListResponse(
        success=True,
        count=len(items),
        data=[InventoryItemData.model_validate(item) for item in items]
    )

@router.get("/", response_model=InventoryListResponse)
async def get_inventory_items(
    category: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Listar items de inventario, opcionalmente por categoría"""
    service = InventoryService(db)
    return _list_response(await service.list_items(category))

@router.post("/", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    item_data: InventoryItemCreate,
    current_user: User = Depends(get_manager_user),
    db: Session = Depends(get_db)
):
    """Crear item de inventario (administrador / gerente)"""
    service = InventoryService(db)
    item = await service.create_item(item_data, current_user.id)
    return InventoryItemResponse(
        success=True,
        message="Item creado exitosamente",
        data=InventoryItemData.model_validate(item)
    )

@router.get("/low-stock", response_model=InventoryListResponse)
async def get_low_stock_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Items con cantidad en o bajo su nivel de reorden"""
    service = InventoryService(db)
    return _list_response(await service.get_low_stock_items())

@router.get("/categories", response_model=CategoriesResponse)
async def get_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    categories = await service.get_categories()
    return CategoriesResponse(success=True, count=len(categories), data=categories)

@router.get("/search", response_model=InventoryListResponse)
async def search_inventory(
    query: Optional[str] = Query(None, description="Texto a buscar en nombre, descripción o categoría"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return _list_response(await service.search_items(query))

@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    item = await service.get_item(item_id)
    return InventoryItemResponse(success=True, data=InventoryItemData.model_validate(item))

@router.put("/{item_id}", response_model=InventoryItemResponse)
async def update_inventory_item(
    item_id: int,
    patch: InventoryItemUpdate,
    current_user: User = Depends(get_manager_user),
    hub: Optional[NotificationHub] = Depends(get_notification_hub),
    db: Session = Depends(get_db)
):
    """Actualizar item; los cambios de cantidad quedan registrados como ajuste"""
    service = InventoryService(db)
    item = await service.update_item(item_id, patch, current_user.id)
    item_data = InventoryItemData.model_validate(item)

    if patch.quantity is not None or patch.reorder_level is not None:
        NotificationsService(db, hub).check_stock_levels([item_id])

    return InventoryItemResponse(
        success=True,
        message="Item actualizado",
        data=item_data
    )

@router.delete("/{item_id}")
async def delete_inventory_item(
    item_id: int,
    current_user: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Eliminar item (solo administrador)"""
    service = InventoryService(db)
    await service.delete_item(item_id)
    return {"success": True, "message": f"Item {item_id} eliminado", "data": {}}

# app/modules/sales/router.py
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, get_manager_user
from app.modules.notifications.service import NotificationsService
from app.shared.database.models import User
from app.shared.services.notification_hub import NotificationHub, get_notification_hub
from .service import SalesService
from .schemas import (
    SaleCreateRequest, SaleUpdateRequest, SaleResponse, SaleListResponse,
    SaleData, SaleStatus, SalesStatsResponse, StatsPeriod
)

router = APIRouter()

@router.get("/", response_model=SaleListResponse)
async def get_sales(
    sale_status: Optional[SaleStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Listar ventas, más recientes primero"""
    service = SalesService(db)
    sales = await service.list_sales(sale_status)
    return SaleListResponse(
        success=True,
        count=len(sales),
        data=[SaleData.model_validate(sale) for sale in sales]
    )

@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_request: SaleCreateRequest,
    current_user: User = Depends(get_current_user),
    hub: Optional[NotificationHub] = Depends(get_notification_hub),
    db: Session = Depends(get_db)
):
    """
    Registrar venta

    **Incluye:**
    - Reserva de inventario por cada línea (todo o nada)
    - Total calculado en el servidor
    - Alertas de stock bajo / agotado para los items vendidos
    """
    service = SalesService(db)
    sale = await service.create_sale(sale_request, owner_id=current_user.id)
    sale_data = SaleData.model_validate(sale)

    NotificationsService(db, hub).check_stock_levels(item.item_id for item in sale_data.items)

    return SaleResponse(
        success=True,
        message="Venta registrada exitosamente",
        data=sale_data
    )

@router.get("/health")
async def sales_health():
    """Health check del módulo de ventas"""
    return {
        "service": "sales",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Registro de ventas con reserva de inventario",
            "Reversión automática ante fallos parciales",
            "Estadísticas por periodo"
        ]
    }

@router.get("/stats/{period}", response_model=SalesStatsResponse)
async def get_sales_stats(
    period: StatsPeriod,
    current_user: User = Depends(get_manager_user),
    db: Session = Depends(get_db)
):
    """Estadísticas de ventas completadas: daily (30 días), monthly (12 meses), yearly (5 años)"""
    service = SalesService(db)
    return SalesStatsResponse(
        success=True,
        period=period,
        data=await service.get_stats(period)
    )

@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    sale = await service.get_sale(sale_id)
    return SaleResponse(success=True, data=SaleData.model_validate(sale))

@router.put("/{sale_id}", response_model=SaleResponse)
async def update_sale(
    sale_id: int,
    patch: SaleUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Actualizar estado, notas, cliente o método de pago (no cantidades)"""
    service = SalesService(db)
    sale = await service.update_sale(sale_id, patch, current_user.id, current_user.role)
    return SaleResponse(
        success=True,
        message="Venta actualizada",
        data=SaleData.model_validate(sale)
    )

@router.delete("/{sale_id}")
async def delete_sale(
    sale_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Eliminar venta y devolver sus cantidades al inventario"""
    service = SalesService(db)
    await service.delete_sale(sale_id, current_user.id, current_user.role)
    return {
        "success": True,
        "message": f"Venta {sale_id} eliminada",
        "data": {}
    }


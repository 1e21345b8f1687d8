# app/modules/dashboard/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, get_manager_user
from app.shared.database.models import User
from .service import DashboardService
from .schemas import (
    DashboardSummaryResponse, InventoryStatusResponse, RankingResponse,
    SalesByPeriodResponse, SalesPeriod
)

router = APIRouter()

@router.get("/", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Resumen del dashboard

    **Incluye:**
    - Totales y valor del inventario, stock bajo y agotado
    - Ventas totales, del día y del mes
    - Ventas recientes y productos más vendidos
    - Usuarios por rol
    """
    service = DashboardService(db)
    return DashboardSummaryResponse(success=True, data=await service.get_summary())

@router.get("/sales-by-period", response_model=SalesByPeriodResponse)
async def get_sales_by_period(
    period: SalesPeriod = SalesPeriod.WEEK,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = DashboardService(db)
    return SalesByPeriodResponse(
        success=True,
        period=period,
        data=await service.get_sales_by_period(period)
    )

@router.get("/inventory-status", response_model=InventoryStatusResponse)
async def get_inventory_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = DashboardService(db)
    return InventoryStatusResponse(success=True, data=await service.get_inventory_status())

@router.get("/top-selling", response_model=RankingResponse)
async def get_top_selling_items(
    current_user: User = Depends(get_manager_user),
    db: Session = Depends(get_db)
):
    """Top 10 items por cantidad vendida (administrador / gerente)"""
    service = DashboardService(db)
    items = await service.get_top_selling()
    return RankingResponse(success=True, count=len(items), data=items)

@router.get("/recent-sales", response_model=RankingResponse)
async def get_recent_sales(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = DashboardService(db)
    sales = await service.get_recent_sales()
    return RankingResponse(success=True, count=len(sales), data=sales)

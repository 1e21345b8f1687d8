# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.modules.users import router as users_router
from app.modules.inventory import router as inventory_router
from app.modules.sales import router as sales_router
from app.modules.dashboard import router as dashboard_router
from app.modules.notifications import router as notifications_router

# Crear router principal de la API v1
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"]
)

api_router.include_router(
    inventory_router,
    prefix="/inventory",
    tags=["Inventory Management"]
)

api_router.include_router(
    sales_router,
    prefix="/sales",
    tags=["Sales"]
)

api_router.include_router(
    dashboard_router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_router.include_router(
    notifications_router,
    prefix="/notifications",
    tags=["Notifications"]
)

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": "Inventory Sales API v1",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "users": "/api/v1/users",
            "inventory": "/api/v1/inventory",
            "sales": "/api/v1/sales",
            "dashboard": "/api/v1/dashboard",
            "notifications": "/api/v1/notifications"
        }
    }

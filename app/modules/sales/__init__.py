# app/modules/sales/__init__.py
"""
Módulo de Ventas - Transacciones de venta contra el inventario

Este módulo maneja el ciclo de vida de las ventas:
- Registro de ventas con reserva de inventario (todo o nada)
- Eliminación con devolución de cantidades
- Cambios de estado (Pending -> Completed / Cancelled)
- Estadísticas diarias, mensuales y anuales

Arquitectura:
- router.py: Endpoints de ventas
- service.py: Lógica de negocio y compensación de reservas
- repository.py: Acceso a datos de ventas
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import SalesService, compute_sale_total
from .repository import SalesRepository

__all__ = [
    "router",
    "SalesService",
    "SalesRepository",
    "compute_sale_total"
]

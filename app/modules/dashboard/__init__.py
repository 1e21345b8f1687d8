# app/modules/dashboard/__init__.py
"""
Módulo de Dashboard - Reportes de solo lectura

Arquitectura:
- router.py: Endpoints de reportes
- service.py: Agrupaciones y métricas
- repository.py: Consultas agregadas
- schemas.py: Modelos de response
"""

from .router import router
from .service import DashboardService
from .repository import DashboardRepository

__all__ = [
    "router",
    "DashboardService",
    "DashboardRepository"
]

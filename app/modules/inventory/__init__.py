# app/modules/inventory/__init__.py
"""
Módulo de Inventario - Gestión de items

- CRUD de items de inventario
- Ajustes administrativos de cantidad (registrados en el ledger)
- Stock bajo, categorías y búsqueda
"""

from .router import router
from .service import InventoryService
from .repository import InventoryRepository

__all__ = [
    "router",
    "InventoryService",
    "InventoryRepository"
]

# app/modules/users/__init__.py
"""
Módulo de Usuarios - Administración de cuentas (solo administrador)
"""

from .router import router
from .service import UsersService
from .repository import UsersRepository

__all__ = [
    "router",
    "UsersService",
    "UsersRepository"
]

# app/modules/notifications/__init__.py
"""
Módulo de Notificaciones - Alertas de inventario

- Alertas de stock bajo y agotado tras cada venta
- Consulta y marcado de notificaciones leídas
- Publicación en el NotificationHub de la aplicación
"""

from .router import router
from .service import NotificationsService
from .repository import NotificationsRepository

__all__ = [
    "router",
    "NotificationsService",
    "NotificationsRepository"
]

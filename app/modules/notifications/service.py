# app/modules/notifications/service.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, List, Optional
import logging

from .repository import NotificationsRepository
from .schemas import NotificationData, NotificationType
from app.core.exceptions import NotFound
from app.shared.database.models import Notification
from app.shared.services.notification_hub import NotificationHub

logger = logging.getLogger(__name__)

class NotificationsService:
    def __init__(self, db: Session, hub: Optional[NotificationHub] = None):
        self.db = db
        self.repository = NotificationsRepository(db)
        self.hub = hub

    def check_stock_levels(self, item_ids: Iterable[int]) -> List[Notification]:
        """
        Generar alertas para items agotados o bajo su nivel de reorden.

        No crítico: un fallo aquí no afecta la venta que lo originó.
        Se omite la alerta si ya existe una igual sin leer para el item.
        """
        created = []
        try:
            for item in self.repository.get_items(item_ids):
                if item.is_out_of_stock:
                    alert_type = NotificationType.OUT_OF_STOCK
                    message = f"{item.name} está agotado"
                elif item.is_low_stock:
                    alert_type = NotificationType.LOW_STOCK
                    message = f"{item.name} tiene stock bajo ({item.quantity} <= {item.reorder_level})"
                else:
                    continue

                if self.repository.has_unread_alert(item.id, alert_type.value):
                    continue

                notification = self.repository.create_notification(alert_type.value, message, item.id)
                created.append(notification)
                logger.info(f"Alerta {alert_type.value} para item {item.id}")
                self._publish(notification)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Error generando alertas de stock (continuando): {e}")

        return created

    async def create_notification(
        self, type: NotificationType, message: str, item_id: Optional[int] = None
    ) -> Notification:
        notification = self.repository.create_notification(type.value, message, item_id)
        self._publish(notification)
        return notification

    async def list_notifications(self, unread_only: bool = False) -> List[Notification]:
        return self.repository.list_notifications(unread_only)

    async def mark_as_read(self, notification_id: int) -> Notification:
        notification = self.repository.get_notification(notification_id)
        if not notification:
            raise NotFound(f"Notificación {notification_id} no encontrada")
        return self.repository.mark_as_read(notification)

    async def mark_all_as_read(self) -> int:
        return self.repository.mark_all_as_read()

    def _publish(self, notification: Notification) -> None:
        if self.hub is None:
            return
        self.hub.publish({
            "event": "notification",
            "data": NotificationData.model_validate(notification).model_dump(mode="json")
        })

# app/modules/notifications/repository.py
from sqlalchemy.orm import Session, joinedload
from typing import Iterable, List, Optional

from app.shared.database.models import InventoryItem, Notification

class NotificationsRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, type: str, message: str, item_id: Optional[int] = None) -> Notification:
        notification = Notification(type=type, message=message, item_id=item_id, read=False)
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def list_notifications(self, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).options(joinedload(Notification.item))
        if unread_only:
            query = query.filter(Notification.read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def get_notification(self, notification_id: int) -> Optional[Notification]:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def mark_as_read(self, notification: Notification) -> Notification:
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self) -> int:
        updated = self.db.query(Notification).filter(
            Notification.read.is_(False)
        ).update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        return updated

    def has_unread_alert(self, item_id: int, type: str) -> bool:
        return self.db.query(Notification.id).filter(
            Notification.item_id == item_id,
            Notification.type == type,
            Notification.read.is_(False)
        ).first() is not None

    def get_items(self, item_ids: Iterable[int]) -> List[InventoryItem]:
        ids = set(item_ids)
        if not ids:
            return []
        return self.db.query(InventoryItem).filter(InventoryItem.id.in_(ids)).all()

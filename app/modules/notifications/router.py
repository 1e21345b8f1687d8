# app/modules/notifications/router.py
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user, get_current_user
from app.shared.database.models import User
from app.shared.services.notification_hub import NotificationHub, get_notification_hub
from .service import NotificationsService
from .schemas import (
    NotificationCreateRequest, NotificationData, NotificationListResponse, NotificationResponse
)

router = APIRouter()

@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Notificaciones, más recientes primero"""
    service = NotificationsService(db)
    notifications = await service.list_notifications(unread_only)
    return NotificationListResponse(
        success=True,
        count=len(notifications),
        data=[NotificationData.model_validate(n) for n in notifications]
    )

@router.post("/", response_model=NotificationResponse, status_code=201)
async def create_notification(
    request: NotificationCreateRequest,
    current_user: User = Depends(get_admin_user),
    hub: Optional[NotificationHub] = Depends(get_notification_hub),
    db: Session = Depends(get_db)
):
    """Crear notificación de sistema o personalizada"""
    service = NotificationsService(db, hub)
    notification = await service.create_notification(request.type, request.message, request.item_id)
    return NotificationResponse(
        success=True,
        message="Notificación creada",
        data=NotificationData.model_validate(notification)
    )

@router.put("/read-all")
async def mark_all_notifications_as_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = NotificationsService(db)
    updated = await service.mark_all_as_read()
    return {
        "success": True,
        "message": "Todas las notificaciones marcadas como leídas",
        "updated": updated
    }

@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = NotificationsService(db)
    notification = await service.mark_as_read(notification_id)
    return NotificationResponse(success=True, data=NotificationData.model_validate(notification))

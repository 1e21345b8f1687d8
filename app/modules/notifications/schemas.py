# app/modules/notifications/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum
from app.shared.schemas.common import BaseResponse

class NotificationType(str, Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    SYSTEM = "system"
    CUSTOM = "custom"

class NotificationItemInfo(BaseModel):
    id: int
    name: str
    category: str
    quantity: int
    reorder_level: int

    class Config:
        from_attributes = True

class NotificationData(BaseModel):
    id: int
    type: NotificationType
    message: str
    item_id: Optional[int] = None
    item: Optional[NotificationItemInfo] = None
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class NotificationResponse(BaseResponse):
    data: NotificationData

class NotificationListResponse(BaseResponse):
    count: int
    data: List[NotificationData]

class NotificationCreateRequest(BaseModel):
    type: NotificationType = NotificationType.CUSTOM
    message: str = Field(..., min_length=1, max_length=500)
    item_id: Optional[int] = None

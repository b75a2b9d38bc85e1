from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams
from ...enum.notifications_enum import NotificationPriority, NotificationType


class NotificationOut(BaseModel):
    id: UUID
    user_id: UUID
    booking_id: Optional[UUID] = None
    payment_id: Optional[UUID] = None
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    action_url: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationRequest(CommonQueryParams):
    unread_only: Optional[bool] = False


class NotificationListResponse(BaseModel):
    notifications: List[NotificationOut]
    total: int


class UnreadCountResponse(BaseModel):
    unread: int

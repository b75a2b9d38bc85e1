from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_rental_db as get_db
from shared.core.schemas import UserToken
from ...crud.notifications import notification_crud as crud
from ...schemas.notifications.notifications_schemas import (
    NotificationListResponse, NotificationOut, NotificationRequest, UnreadCountResponse
)

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=NotificationListResponse)
def get_notifications(
    params: NotificationRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_list(db, current_user.user_uuid, params)


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return {"unread": crud.count_unread(db, current_user.user_uuid)}


@router.put("/read-all", response_model=None)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return {"updated": crud.mark_all_as_read(db, current_user.user_uuid)}


@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.mark_as_read(db, notification_id, current_user.user_uuid)

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List
from uuid import UUID

from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.events import BookingEvent
from ...core.exceptions import NotFoundError
from ...enum.notifications_enum import NotificationPriority, PRIORITY_BY_TYPE
from ...models.notifications.booking_notifications import BookingNotification
from ...schemas.notifications.notifications_schemas import (
    NotificationListResponse, NotificationOut, NotificationRequest
)

logger = logging.getLogger(__name__)


def dispatch(db: Session, events: Iterable[BookingEvent]) -> List[BookingNotification]:
    """Persist one notification per event in the caller's transaction."""
    created = []
    for event in events:
        notification = BookingNotification(
            user_id=event.recipient_id,
            booking_id=event.booking_id,
            payment_id=event.payment_id,
            type=event.type,
            priority=PRIORITY_BY_TYPE.get(event.type, NotificationPriority.LOW),
            title=event.title,
            message=event.message,
            action_url=event.action_url,
        )
        db.add(notification)
        created.append(notification)

    if created:
        db.flush()
        logger.debug("Queued %d booking notifications", len(created))
    return created


def get_list(db: Session, user_id: UUID, params: NotificationRequest) -> NotificationListResponse:
    q = db.query(BookingNotification).filter(BookingNotification.user_id == user_id)
    if params.unread_only:
        q = q.filter(BookingNotification.is_read == False)

    total = q.count()
    rows = (
        q.order_by(BookingNotification.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return {
        "notifications": [NotificationOut.model_validate(r) for r in rows],
        "total": total,
    }


def count_unread(db: Session, user_id: UUID) -> int:
    return (
        db.query(BookingNotification)
        .filter(BookingNotification.user_id == user_id, BookingNotification.is_read == False)
        .count()
    )


def mark_as_read(db: Session, notification_id: UUID, user_id: UUID) -> BookingNotification:
    notification = (
        db.query(BookingNotification)
        .filter(BookingNotification.id == notification_id, BookingNotification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: UUID) -> int:
    updated = (
        db.query(BookingNotification)
        .filter(BookingNotification.user_id == user_id, BookingNotification.is_read == False)
        .update({"is_read": True}, synchronize_session=False)
    )
    db.commit()
    return updated


def cleanup_old_notifications(db: Session, now: datetime = None) -> int:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
    deleted = (
        db.query(BookingNotification)
        .filter(BookingNotification.is_read == True, BookingNotification.created_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Removed %d read notifications older than %s", deleted, cutoff.date())
    return deleted

from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from ..enum.notifications_enum import NotificationType


class BookingEvent(BaseModel):
    """Side effect produced by a booking/payment operation, delivered through the notification outbox."""

    type: NotificationType
    recipient_id: UUID
    title: str
    message: str
    action_url: Optional[str] = None
    booking_id: Optional[UUID] = None
    payment_id: Optional[UUID] = None


def booking_event(type: NotificationType, recipient_id, booking, title: str, message: str,
                  action_url: Optional[str] = None, payment=None) -> BookingEvent:
    return BookingEvent(
        type=type,
        recipient_id=recipient_id,
        title=title,
        message=message,
        action_url=action_url,
        booking_id=booking.id if booking is not None else None,
        payment_id=payment.id if payment is not None else None,
    )


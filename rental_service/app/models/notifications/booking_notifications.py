import uuid
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from shared.core.database import Base

from ...enum.notifications_enum import NotificationPriority, NotificationType


class BookingNotification(Base):
    __tablename__ = "booking_notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    booking_id = Column(UUID(as_uuid=True), ForeignKey(
        "bookings.id", ondelete="CASCADE"), nullable=True)
    payment_id = Column(UUID(as_uuid=True), ForeignKey(
        "monthly_payments.id", ondelete="SET NULL"), nullable=True)
    type = Column(Enum(NotificationType, name="notification_type_enum"), nullable=False)
    priority = Column(
        Enum(NotificationPriority, name="notification_priority_enum"),
        default=NotificationPriority.LOW,
        nullable=False
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(255), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

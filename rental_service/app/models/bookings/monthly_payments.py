import uuid
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base

from ...enum.bookings_enum import PaymentStatus


class MonthlyPayment(Base):
    __tablename__ = "monthly_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey(
        "bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    due_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)  # remaining principal
    late_fee = Column(Numeric(14, 2), nullable=True)  # remaining late fee
    status = Column(
        Enum(PaymentStatus, name="payment_status_enum"),
        default=PaymentStatus.PENDING,
        nullable=False
    )
    paid_date = Column(Date, nullable=True)
    # wallet transaction id
    payment_reference = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking", back_populates="payments")

    @property
    def booking_ref(self):
        return self.booking.ref

    @property
    def total_due(self) -> Decimal:
        return Decimal(self.amount) + Decimal(self.late_fee or 0)

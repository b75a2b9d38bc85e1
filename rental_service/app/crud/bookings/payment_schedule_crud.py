import logging
from datetime import date
from typing import Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...enum.bookings_enum import PaymentStatus
from ...models.bookings.bookings import Booking
from ...models.bookings.monthly_payments import MonthlyPayment

logger = logging.getLogger(__name__)


def next_due_date(db: Session, booking_id: UUID, today: Optional[date] = None) -> date:
    """First day of the current month for a fresh booking, else one month after the latest due date."""
    today = today or date.today()

    latest = (
        db.query(func.max(MonthlyPayment.due_date))
        .filter(MonthlyPayment.booking_id == booking_id)
        .scalar()
    )
    if latest is None:
        return today.replace(day=1)

    return latest + relativedelta(months=1)


def generate_next_payment(db: Session, booking: Booking, today: Optional[date] = None) -> MonthlyPayment:
    payment = MonthlyPayment(
        booking_id=booking.id,
        due_date=next_due_date(db, booking.id, today),
        amount=booking.monthly_rent,
        late_fee=None,
        status=PaymentStatus.PENDING,
    )
    db.add(payment)
    db.flush()

    logger.info("Generated payment %s for booking %s due %s",
                payment.id, booking.id, payment.due_date)
    return payment

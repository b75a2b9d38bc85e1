import asyncio
import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Callable, List, NamedTuple, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.database import RentalSessionLocal
from ...core.config import settings
from ...core.events import BookingEvent, booking_event
from ...enum.bookings_enum import BookingStatus, PaymentStatus
from ...enum.notifications_enum import NotificationType
from ...models.bookings.bookings import Booking
from ...models.bookings.monthly_payments import MonthlyPayment
from ...schemas.scheduler.scheduler_schemas import AccrualSummary, ReminderSummary
from ..bookings.bookings_crud import terminate_booking
from ..notifications import notification_crud

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DAYS_PER_MONTH = Decimal(30)


def calculate_late_fee(amount, rate_percent, chargeable_days: int,
                       max_ratio: Optional[Decimal] = None) -> Decimal:
    """
    Late fee for ``chargeable_days`` past the grace period.

    The monthly percentage is spread over a 30-day month and the result is
    rounded half-up to cents, then capped at ``max_ratio`` of the principal.
    The cap rounds down so the fee never exceeds that share.
    """
    if chargeable_days <= 0:
        return Decimal("0.00")

    amount = Decimal(str(amount))
    rate = Decimal(str(rate_percent))
    ratio = settings.MAX_LATE_FEE_RATIO if max_ratio is None else Decimal(str(max_ratio))

    fee = (amount * rate * Decimal(chargeable_days) / (100 * DAYS_PER_MONTH)).quantize(
        CENT, rounding=ROUND_HALF_UP)
    cap = (amount * ratio).quantize(CENT, rounding=ROUND_DOWN)
    return min(fee, cap)


class AccrualResult(NamedTuple):
    fee_applied: bool = False
    escalated: bool = False
    terminated: bool = False
    events: Tuple[BookingEvent, ...] = ()


# ----------------------------------------------------
# Daily late fee accrual
# ----------------------------------------------------
def _policy(booking: Booking):
    rate = booking.late_fee_rate if booking.late_fee_rate is not None else settings.DEFAULT_LATE_FEE_RATE
    grace = (booking.grace_period_days if booking.grace_period_days is not None
             else settings.DEFAULT_GRACE_PERIOD_DAYS)
    return Decimal(str(rate)), int(grace)


def process_overdue_payment(db: Session, payment_id: UUID, as_of: date) -> AccrualResult:
    """Re-read one payment under lock and apply fee, escalation and termination in one transaction."""
    payment = (
        db.query(MonthlyPayment)
        .filter(MonthlyPayment.id == payment_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    # settled or cancelled since the candidate scan
    if (payment is None or payment.status not in PaymentStatus.unpaid()
            or payment.due_date >= as_of):
        db.rollback()
        return AccrualResult()

    booking = (
        db.query(Booking)
        .filter(Booking.id == payment.booking_id)
        .with_for_update()
        .populate_existing()
        .one()
    )
    rate, grace = _policy(booking)

    days_overdue = (as_of - payment.due_date).days
    if days_overdue <= grace:
        db.rollback()
        return AccrualResult()
    chargeable = days_overdue - grace

    events: List[BookingEvent] = []
    fee = calculate_late_fee(payment.amount, rate, chargeable)
    fee_applied = payment.late_fee is None or Decimal(payment.late_fee) < fee
    if fee_applied:
        payment.late_fee = fee
        payment.status = PaymentStatus.OVERDUE
        db.flush()
        events.append(booking_event(
            NotificationType.PAYMENT_OVERDUE, booking.tenant_id, booking,
            "Payment Overdue - Late Fee Applied",
            f"Your rent payment for '{booking.asset_name}' is {chargeable} days overdue. "
            f"Late fee of {fee} has been applied. Total amount due: {payment.total_due}. "
            f"Please pay immediately to avoid further penalties.",
            "/bookings", payment=payment,
        ))
        logger.info("Applied late fee of %s to payment %s of booking %s",
                    fee, payment.id, payment.booking_ref)

    escalated = terminated = False
    if chargeable >= settings.OVERDUE_ESCALATION_DAYS and booking.status == BookingStatus.ACTIVE:
        escalated = True
        events.append(booking_event(
            NotificationType.PAYMENT_OVERDUE, booking.owner_id, booking,
            "Tenant Payment Severely Overdue",
            f"Tenant payment for '{booking.asset_name}' is {chargeable} days overdue. "
            f"You may consider booking termination. Please review the situation "
            f"and take appropriate action.",
            "/bookings/owner", payment=payment,
        ))
        if chargeable >= settings.OVERDUE_TERMINATION_DAYS:
            events.extend(terminate_booking(db, booking, settings.TERMINATION_REASON, as_of))
            terminated = True

    notification_crud.dispatch(db, events)
    db.commit()
    return AccrualResult(fee_applied, escalated, terminated, tuple(events))


def find_accrual_candidates(db: Session, as_of: date) -> List[UUID]:
    rows = (
        db.query(MonthlyPayment.id)
        .filter(
            MonthlyPayment.status.in_(PaymentStatus.unpaid()),
            MonthlyPayment.due_date < as_of,
        )
        .order_by(MonthlyPayment.due_date.asc())
        .all()
    )
    return [r.id for r in rows]


def run_daily_accrual(db: Session, as_of: Optional[date] = None) -> AccrualSummary:
    """Accrual pass over every unpaid payment past its due date. Safe to re-run for the same day."""
    as_of = as_of or date.today()
    summary = AccrualSummary(as_of=as_of)
    candidates = find_accrual_candidates(db, as_of)
    logger.info("Starting overdue payment processing for %s: %d candidates", as_of, len(candidates))

    for payment_id in candidates:
        try:
            result = process_overdue_payment(db, payment_id, as_of)
        except Exception:
            db.rollback()
            logger.exception("Late fee processing failed for payment %s", payment_id)
            summary.failed.append(payment_id)
            continue

        summary.processed += 1
        summary.fees_applied += int(result.fee_applied)
        summary.escalated += int(result.escalated)
        summary.terminated += int(result.terminated)
        summary.events.extend(result.events)

    logger.info(
        "Completed overdue payment processing: processed=%d fees=%d escalated=%d terminated=%d failed=%d",
        summary.processed, summary.fees_applied, summary.escalated,
        summary.terminated, len(summary.failed),
    )
    return summary


# ----------------------------------------------------
# Weekly reminders
# ----------------------------------------------------
def send_payment_reminders(db: Session, as_of: Optional[date] = None) -> ReminderSummary:
    as_of = as_of or date.today()
    horizon = as_of + timedelta(days=settings.REMINDER_DAYS_AHEAD)

    upcoming = (
        db.query(MonthlyPayment)
        .join(Booking, MonthlyPayment.booking_id == Booking.id)
        .filter(
            MonthlyPayment.status == PaymentStatus.PENDING,
            MonthlyPayment.due_date >= as_of,
            MonthlyPayment.due_date <= horizon,
            Booking.status == BookingStatus.ACTIVE,
        )
        .all()
    )

    events = [
        booking_event(
            NotificationType.PAYMENT_DUE, p.booking.tenant_id, p.booking,
            "Rent Payment Reminder",
            f"Reminder: Your rent payment of {p.amount} for '{p.booking.asset_name}' "
            f"is due on {p.due_date}. Please ensure timely payment to avoid late fees.",
            "/bookings", payment=p,
        )
        for p in upcoming
    ]
    try:
        notification_crud.dispatch(db, events)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Sent %d payment reminders", len(events))
    return ReminderSummary(as_of=as_of, reminders_sent=len(events), events=events)


# ----------------------------------------------------
# Background loop
# ----------------------------------------------------
def _run_pass(job: Callable, session_factory, as_of: date):
    db = session_factory()
    try:
        return job(db, as_of)
    except Exception:
        logger.exception("Scheduled job %s failed", job.__name__)
    finally:
        db.close()


def _cleanup_notifications(db: Session, as_of: date):
    return notification_crud.cleanup_old_notifications(db)


async def run_scheduler(session_factory=RentalSessionLocal, poll_seconds: Optional[int] = None):
    """
    Fire the accrual pass once a day after ACCRUAL_RUN_HOUR and the reminder
    pass once a week on REMINDER_WEEKDAY after REMINDER_RUN_HOUR.
    """
    poll_seconds = poll_seconds or settings.SCHEDULER_POLL_SECONDS
    last_accrual = last_reminder = None
    logger.info("Payment scheduler started")

    while True:
        now = datetime.now()
        today = now.date()

        if now.hour >= settings.ACCRUAL_RUN_HOUR and last_accrual != today:
            await asyncio.to_thread(_run_pass, run_daily_accrual, session_factory, today)
            await asyncio.to_thread(_run_pass, _cleanup_notifications, session_factory, today)
            last_accrual = today

        if (today.weekday() == settings.REMINDER_WEEKDAY
                and now.hour >= settings.REMINDER_RUN_HOUR and last_reminder != today):
            await asyncio.to_thread(_run_pass, send_payment_reminders, session_factory, today)
            last_reminder = today

        await asyncio.sleep(poll_seconds)

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, NamedTuple, Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from shared.core.schemas import CommonQueryParams, UserToken
from ...core.config import settings
from ...core.events import BookingEvent, booking_event
from ...core.exceptions import (
    ConflictError, ForbiddenError, InvalidInputError, InvalidStateError, NotFoundError
)
from ...enum.bookings_enum import BookingKind, BookingStatus, PaymentStatus
from ...enum.notifications_enum import NotificationType
from ...models.assets.properties import PgBed, Property
from ...models.bookings.bookings import Booking
from ...models.bookings.monthly_payments import MonthlyPayment
from ...schemas.bookings.bookings_schemas import (
    BookingApprove, BookingBase, BookingListResponse, BookingOut, PendingApprovalsResponse,
    PgBookingCreate, RentBookingCreate
)
from ..notifications import notification_crud
from .payment_schedule_crud import generate_next_payment

logger = logging.getLogger(__name__)

# open-ended bookings are checked against this horizon
INDEFINITE_HORIZON = relativedelta(years=10)


class BookingOutcome(NamedTuple):
    booking: Booking
    events: List[BookingEvent]
    payment: Optional[MonthlyPayment] = None


# ----------------------------------------------------
# Helpers
# ----------------------------------------------------
def _validate_terms(start_date: date, end_date: Optional[date], monthly_rent, deposit=None,
                    late_fee_rate=None, grace_period_days=None):
    if monthly_rent is None or Decimal(monthly_rent) <= 0:
        raise InvalidInputError("monthly_rent must be positive")
    if deposit is not None and Decimal(deposit) < 0:
        raise InvalidInputError("security_deposit cannot be negative")
    if start_date is None:
        raise InvalidInputError("start_date is required")
    if end_date is not None and end_date < start_date:
        raise InvalidInputError("end_date cannot be before start_date")
    if late_fee_rate is not None and not (0 <= Decimal(late_fee_rate) <= 100):
        raise InvalidInputError("late_fee_rate must be between 0 and 100 percent")
    if grace_period_days is not None and grace_period_days < 0:
        raise InvalidInputError("grace_period_days cannot be negative")


def _asset_filter(kind: BookingKind, asset_id: UUID):
    if kind == BookingKind.rent:
        return Booking.property_id == asset_id
    return Booking.bed_id == asset_id


def find_conflicting_bookings(db: Session, kind: BookingKind, asset_id: UUID, start_date: date,
                              end_date: Optional[date], today: Optional[date] = None,
                              exclude_id: Optional[UUID] = None) -> List[Booking]:
    today = today or date.today()
    window_end = end_date or (today + INDEFINITE_HORIZON)

    q = db.query(Booking).filter(
        _asset_filter(kind, asset_id),
        Booking.status == BookingStatus.ACTIVE,
        or_(
            Booking.end_date.is_(None),
            and_(Booking.start_date <= window_end, Booking.end_date >= start_date),
        ),
    )
    if exclude_id is not None:
        q = q.filter(Booking.id != exclude_id)
    return q.all()


def get_booking(db: Session, booking_id: UUID, for_update: bool = False) -> Booking:
    q = db.query(Booking).filter(Booking.id == booking_id)
    if for_update:
        q = q.with_for_update().populate_existing()
    booking = q.first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def lock_asset(db: Session, booking: Booking):
    """Row-lock the booked property or bed. Taken after the booking lock."""
    if booking.kind == BookingKind.rent:
        q = db.query(Property).filter(Property.id == booking.property_id)
    else:
        q = db.query(PgBed).filter(PgBed.id == booking.bed_id)
    return q.with_for_update().populate_existing().one()


def _ensure_can_manage(booking: Booking, user: UserToken):
    if not (user.is_admin or user.user_uuid == booking.owner_id):
        raise ForbiddenError("Not authorized to manage this booking")


def _ensure_can_cancel(booking: Booking, user: UserToken):
    if not (user.is_admin or booking.involves(user.user_uuid)):
        raise ForbiddenError("Not authorized to cancel this booking")


def _ensure_status(booking: Booking, expected: BookingStatus, action: str):
    if booking.status != expected:
        raise InvalidStateError(
            f"Cannot {action} a booking in status {booking.status.value}",
            current_status=booking.status,
        )


def _cancel_future_payments(db: Session, booking: Booking, as_of: date) -> int:
    """Drop schedule-ahead payments whose cycle has not started yet."""
    return (
        db.query(MonthlyPayment)
        .filter(
            MonthlyPayment.booking_id == booking.id,
            MonthlyPayment.status == PaymentStatus.PENDING,
            MonthlyPayment.due_date > as_of,
        )
        .update({"status": PaymentStatus.CANCELLED}, synchronize_session="fetch")
    )


def _commit(db: Session, events: List[BookingEvent]):
    notification_crud.dispatch(db, events)
    db.commit()


# ----------------------------------------------------
# Create
# ----------------------------------------------------
def _create_booking(db: Session, asset, tenant: UserToken, payload: BookingBase,
                    today: Optional[date]) -> BookingOutcome:
    _validate_terms(payload.start_date, payload.end_date, payload.monthly_rent,
                    payload.security_deposit, payload.late_fee_rate, payload.grace_period_days)

    kind = BookingKind.rent if isinstance(asset, Property) else BookingKind.pg
    if not asset.is_available:
        raise ConflictError(
            "Property is not available for rent" if kind == BookingKind.rent
            else "Bed is already occupied")

    conflicts = find_conflicting_bookings(
        db, kind, asset.id, payload.start_date, payload.end_date, today)
    if conflicts:
        raise ConflictError(
            f"{'Property' if kind == BookingKind.rent else 'Bed'} is not available for the requested dates")

    booking = Booking.for_asset(
        asset,
        tenant_id=tenant.user_uuid,
        owner_id=asset.owner_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        monthly_rent=payload.monthly_rent,
        security_deposit=payload.security_deposit,
        late_fee_rate=(payload.late_fee_rate if payload.late_fee_rate is not None
                       else settings.DEFAULT_LATE_FEE_RATE),
        grace_period_days=(payload.grace_period_days if payload.grace_period_days is not None
                           else settings.DEFAULT_GRACE_PERIOD_DAYS),
        auto_renewal=bool(payload.auto_renewal),
        status=BookingStatus.PENDING_APPROVAL,
    )
    db.add(booking)
    db.flush()

    events = [booking_event(
        NotificationType.BOOKING_CREATED, booking.owner_id, booking,
        "New Booking Request" if kind == BookingKind.rent else "New PG Booking Request",
        f"New booking request for '{booking.asset_name}' starting {booking.start_date}",
        "/bookings/owner",
    )]
    _commit(db, events)
    db.refresh(booking)

    logger.info("Booking %s requested by tenant %s", booking.id, booking.tenant_id)
    return BookingOutcome(booking, events)


def create_rent_booking(db: Session, payload: RentBookingCreate, tenant: UserToken,
                        today: Optional[date] = None) -> BookingOutcome:
    prop = db.query(Property).filter(Property.id == payload.property_id).first()
    if not prop:
        raise NotFoundError("Property not found")
    try:
        return _create_booking(db, prop, tenant, payload, today)
    except Exception:
        db.rollback()
        raise


def create_pg_booking(db: Session, payload: PgBookingCreate, tenant: UserToken,
                      today: Optional[date] = None) -> BookingOutcome:
    bed = db.query(PgBed).filter(PgBed.id == payload.bed_id).first()
    if not bed:
        raise NotFoundError("Bed not found")
    try:
        return _create_booking(db, bed, tenant, payload, today)
    except Exception:
        db.rollback()
        raise


# ----------------------------------------------------
# Owner decisions
# ----------------------------------------------------
def approve_booking(db: Session, booking_id: UUID, approver: UserToken,
                    payload: Optional[BookingApprove] = None,
                    today: Optional[date] = None) -> BookingOutcome:
    today = today or date.today()
    try:
        booking = get_booking(db, booking_id, for_update=True)
        _ensure_can_manage(booking, approver)
        _ensure_status(booking, BookingStatus.PENDING_APPROVAL, "approve")

        if payload and payload.final_rent is not None:
            if payload.final_rent <= 0:
                raise InvalidInputError("final_rent must be positive")
            booking.monthly_rent = payload.final_rent
        if payload and payload.final_deposit is not None:
            if payload.final_deposit < 0:
                raise InvalidInputError("final_deposit cannot be negative")
            booking.security_deposit = payload.final_deposit

        asset = lock_asset(db, booking)
        # another request on the same asset may have been approved meanwhile
        if find_conflicting_bookings(db, booking.kind, booking.property_id or booking.bed_id,
                                     booking.start_date, booking.end_date, today,
                                     exclude_id=booking.id):
            raise ConflictError("Asset already has an active booking for these dates")

        booking.status = BookingStatus.ACTIVE
        booking.approval_date = datetime.now(timezone.utc)
        asset.mark_occupied()
        db.flush()

        payment = generate_next_payment(db, booking, today)

        events = [booking_event(
            NotificationType.BOOKING_APPROVED, booking.tenant_id, booking,
            "Booking Approved!",
            f"Your booking request for '{booking.asset_name}' has been approved! "
            f"You can now proceed with payment.",
            "/bookings",
        )]
        _commit(db, events)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info("Booking %s approved by %s", booking.id, approver.user_id)
    return BookingOutcome(booking, events, payment)


def reject_booking(db: Session, booking_id: UUID, approver: UserToken,
                   reason: Optional[str] = None) -> BookingOutcome:
    try:
        booking = get_booking(db, booking_id, for_update=True)
        _ensure_can_manage(booking, approver)
        _ensure_status(booking, BookingStatus.PENDING_APPROVAL, "reject")

        booking.status = BookingStatus.REJECTED
        booking.rejection_reason = reason
        db.flush()

        message = f"Your booking request for '{booking.asset_name}' has been rejected."
        if reason and reason.strip():
            message += f" Reason: {reason}"
        events = [booking_event(
            NotificationType.BOOKING_REJECTED, booking.tenant_id, booking,
            "Booking Request Rejected", message, "/bookings",
        )]
        _commit(db, events)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info("Booking %s rejected by %s", booking.id, approver.user_id)
    return BookingOutcome(booking, events)


# ----------------------------------------------------
# Leaving ACTIVE
# ----------------------------------------------------
def cancel_booking(db: Session, booking_id: UUID, actor: UserToken, reason: Optional[str] = None,
                   today: Optional[date] = None) -> BookingOutcome:
    today = today or date.today()
    try:
        booking = get_booking(db, booking_id, for_update=True)
        _ensure_can_cancel(booking, actor)
        if booking.status.is_terminal:
            raise InvalidStateError(
                f"Booking is already {booking.status.value}", current_status=booking.status)

        held_asset = booking.status == BookingStatus.ACTIVE
        booking.status = BookingStatus.CANCELLED
        booking.cancellation_reason = reason
        if held_asset:
            lock_asset(db, booking).mark_available()
            _cancel_future_payments(db, booking, today)
        db.flush()

        recipients = []
        if actor.is_admin or actor.user_uuid != booking.tenant_id:
            recipients.append(booking.tenant_id)
        if actor.is_admin or actor.user_uuid != booking.owner_id:
            recipients.append(booking.owner_id)

        message = f"The booking for '{booking.asset_name}' has been cancelled."
        if reason and reason.strip():
            message += f" Reason: {reason}"
        events = [
            booking_event(NotificationType.BOOKING_CANCELLED, user_id, booking,
                          "Booking Cancelled", message, "/bookings")
            for user_id in dict.fromkeys(recipients)
        ]
        _commit(db, events)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info("Booking %s cancelled by %s", booking.id, actor.user_id)
    return BookingOutcome(booking, events)


def terminate_booking(db: Session, booking: Booking, reason: str, as_of: date) -> List[BookingEvent]:
    """Move a locked ACTIVE booking to TERMINATED; no commit. Returns [] when already terminal."""
    if booking.status.is_terminal:
        return []
    _ensure_status(booking, BookingStatus.ACTIVE, "terminate")

    booking.status = BookingStatus.TERMINATED
    booking.termination_reason = reason
    booking.termination_date = as_of
    lock_asset(db, booking).mark_available()
    _cancel_future_payments(db, booking, as_of)
    db.flush()

    logger.info("Booking %s terminated: %s", booking.id, reason)
    return [
        booking_event(
            NotificationType.BOOKING_TERMINATED, booking.tenant_id, booking,
            "Booking Terminated",
            f"Your booking for '{booking.asset_name}' has been terminated. Reason: {reason}",
            "/bookings",
        ),
        booking_event(
            NotificationType.BOOKING_TERMINATED, booking.owner_id, booking,
            "Booking Terminated",
            f"The booking for '{booking.asset_name}' has been terminated. Reason: {reason}",
            "/bookings/owner",
        ),
    ]


def terminate_for_non_payment(db: Session, booking_id: UUID, reason: Optional[str] = None,
                              as_of: Optional[date] = None) -> BookingOutcome:
    as_of = as_of or date.today()
    try:
        booking = get_booking(db, booking_id, for_update=True)
        events = terminate_booking(db, booking, reason or settings.TERMINATION_REASON, as_of)
        _commit(db, events)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    return BookingOutcome(booking, events)


def complete_booking(db: Session, booking_id: UUID, actor: UserToken,
                     as_of: Optional[date] = None) -> BookingOutcome:
    as_of = as_of or date.today()
    try:
        booking = get_booking(db, booking_id, for_update=True)
        _ensure_can_manage(booking, actor)
        _ensure_status(booking, BookingStatus.ACTIVE, "complete")

        booking.status = BookingStatus.COMPLETED
        lock_asset(db, booking).mark_available()
        _cancel_future_payments(db, booking, as_of)
        db.flush()

        events = [
            booking_event(NotificationType.BOOKING_COMPLETED, user_id, booking,
                          "Booking Completed",
                          f"The booking for '{booking.asset_name}' has ended.",
                          "/bookings")
            for user_id in (booking.tenant_id, booking.owner_id)
        ]
        _commit(db, events)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info("Booking %s completed", booking.id)
    return BookingOutcome(booking, events)


# ----------------------------------------------------
# Queries
# ----------------------------------------------------
def _to_out(booking: Booking) -> BookingOut:
    return BookingOut.model_validate(booking)


def get_booking_for_user(db: Session, booking_id: UUID, user: UserToken) -> BookingOut:
    booking = get_booking(db, booking_id)
    if not (user.is_admin or booking.involves(user.user_uuid)):
        raise ForbiddenError("Not authorized to view this booking")
    return _to_out(booking)


def get_my_bookings(db: Session, user: UserToken, params: CommonQueryParams) -> BookingListResponse:
    q = (
        db.query(Booking)
        .filter(Booking.tenant_id == user.user_uuid)
        .order_by(Booking.created_at.desc())
    )
    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()
    return {"bookings": [_to_out(b) for b in rows], "total": total}


def get_pending_approvals(db: Session, user: UserToken) -> PendingApprovalsResponse:
    q = db.query(Booking).filter(Booking.status == BookingStatus.PENDING_APPROVAL)
    if not user.is_admin:
        q = q.filter(Booking.owner_id == user.user_uuid)

    rows = q.order_by(Booking.created_at.asc()).all()
    rent = [_to_out(b) for b in rows if b.kind == BookingKind.rent]
    pg = [_to_out(b) for b in rows if b.kind == BookingKind.pg]
    return {"rent_bookings": rent, "pg_bookings": pg, "total_pending": len(rent) + len(pg)}

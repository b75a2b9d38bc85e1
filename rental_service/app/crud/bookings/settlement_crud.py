import logging
from datetime import date
from decimal import Decimal
from typing import List, NamedTuple, Optional
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from shared.core.schemas import CommonQueryParams, UserToken
from ...core.events import BookingEvent, booking_event
from ...core.exceptions import (
    ForbiddenError, InsufficientFundsError, InvalidStateError, NotFoundError
)
from ...enum.bookings_enum import BookingStatus, PaymentStatus
from ...enum.notifications_enum import NotificationType
from ...models.bookings.bookings import Booking
from ...models.bookings.monthly_payments import MonthlyPayment
from ...models.wallet.wallets import WalletTransaction
from ...schemas.bookings.monthly_payments_schemas import (
    MonthlyPaymentListResponse, MonthlyPaymentOut, OutstandingResponse, PaymentOverview
)
from ..notifications import notification_crud
from ..wallet import wallet_crud
from .bookings_crud import get_booking
from .payment_schedule_crud import generate_next_payment

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


class SettlementOutcome(NamedTuple):
    payment: MonthlyPayment
    transaction: WalletTransaction
    events: List[BookingEvent]
    next_payment: Optional[MonthlyPayment] = None

    @property
    def is_full(self) -> bool:
        return self.payment.status == PaymentStatus.PAID


def _get_payment_for_update(db: Session, payment_id: UUID) -> MonthlyPayment:
    payment = (
        db.query(MonthlyPayment)
        .filter(MonthlyPayment.id == payment_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def _apply_partial(payment: MonthlyPayment, paid: Decimal):
    """Principal absorbs the payment; only the excess over principal touches the late fee."""
    amount = Decimal(payment.amount)
    if paid >= amount:
        payment.late_fee = Decimal(payment.late_fee or 0) - (paid - amount)
        payment.amount = ZERO
    else:
        payment.amount = amount - paid


def settle_payment(db: Session, payment_id: UUID, payer: UserToken,
                   paid_amount: Optional[Decimal] = None,
                   today: Optional[date] = None) -> SettlementOutcome:
    """
    Settle a monthly payment from the payer's wallet.

    Without ``paid_amount`` (or with one covering the total) the payment is
    settled in full: exactly ``total_due`` is debited, the payment becomes PAID
    and the next cycle is generated while the booking is still ACTIVE. A smaller
    amount is a partial settlement and leaves the status unchanged.

    Any failure, including an insufficient balance, rolls back every change.
    """
    today = today or date.today()
    try:
        payment = _get_payment_for_update(db, payment_id)
        # same payment -> booking lock order as the accrual pass
        booking = get_booking(db, payment.booking_id, for_update=True)

        if not (payer.is_admin or payer.user_uuid == booking.tenant_id):
            raise ForbiddenError("Not authorized to pay this payment")
        if payment.status not in PaymentStatus.unpaid():
            raise InvalidStateError(
                f"Payment is already {payment.status.value}", current_status=payment.status)

        total_due = payment.total_due
        paid = total_due if paid_amount is None else Decimal(str(paid_amount)).quantize(CENT)
        is_full = paid >= total_due
        debit_amount = total_due if is_full else paid

        txn = wallet_crud.debit(
            db,
            payer.user_uuid,
            debit_amount,
            f"Rent payment for {booking.asset_name} due {payment.due_date}",
            reference_id=str(payment.id),
        )
        if txn is None:
            raise InsufficientFundsError(
                "Insufficient wallet balance",
                total_due=total_due,
                balance=wallet_crud.get_balance(db, payer.user_uuid),
            )

        next_payment = None
        if is_full:
            payment.status = PaymentStatus.PAID
            payment.paid_date = today
            payment.payment_reference = str(txn.id)
            title = "Payment Received"
            message = (f"Payment of {debit_amount} received for '{booking.asset_name}' "
                       f"(due {payment.due_date}).")
        else:
            _apply_partial(payment, paid)
            title = "Partial Payment Received"
            message = (f"Partial payment of {debit_amount} received for '{booking.asset_name}' "
                       f"(due {payment.due_date}). Remaining: {payment.total_due}.")
        db.flush()

        if is_full and booking.status == BookingStatus.ACTIVE:
            next_payment = generate_next_payment(db, booking, today)

        events = [booking_event(
            NotificationType.PAYMENT_RECEIVED, booking.owner_id, booking,
            title, message, "/payments", payment=payment,
        )]
        notification_crud.dispatch(db, events)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(payment)
    logger.info("Payment %s of booking %s settled with %s by %s (%s)", payment.id,
                payment.booking_ref, debit_amount, payer.user_id,
                "full" if is_full else "partial")
    return SettlementOutcome(payment, txn, events, next_payment)


# ----------------------------------------------------
# Queries
# ----------------------------------------------------
def _tenant_payments(db: Session, tenant_id: UUID):
    return (
        db.query(MonthlyPayment)
        .join(Booking, MonthlyPayment.booking_id == Booking.id)
        .filter(Booking.tenant_id == tenant_id)
    )


def _payment_list(q, params: Optional[CommonQueryParams] = None) -> MonthlyPaymentListResponse:
    total = q.count()
    q = q.order_by(MonthlyPayment.due_date.desc())
    if params:
        q = q.offset(params.skip).limit(params.limit)
    return {
        "payments": [MonthlyPaymentOut.model_validate(p) for p in q.all()],
        "total": total,
    }


def get_my_payments(db: Session, user: UserToken, params: CommonQueryParams) -> MonthlyPaymentListResponse:
    return _payment_list(_tenant_payments(db, user.user_uuid), params)


def get_overdue_payments(db: Session, tenant_id: UUID) -> MonthlyPaymentListResponse:
    q = _tenant_payments(db, tenant_id).filter(MonthlyPayment.status == PaymentStatus.OVERDUE)
    return _payment_list(q)


def calculate_outstanding_amount(db: Session, tenant_id: UUID) -> Decimal:
    unpaid = (
        _tenant_payments(db, tenant_id)
        .filter(MonthlyPayment.status.in_(PaymentStatus.unpaid()))
        .all()
    )
    return sum((p.total_due for p in unpaid), ZERO)


def get_outstanding(db: Session, user: UserToken) -> OutstandingResponse:
    unpaid_count = (
        _tenant_payments(db, user.user_uuid)
        .filter(MonthlyPayment.status.in_(PaymentStatus.unpaid()))
        .count()
    )
    return OutstandingResponse(
        tenant_id=user.user_uuid,
        outstanding_amount=calculate_outstanding_amount(db, user.user_uuid),
        unpaid_payments=unpaid_count,
    )


def get_booking_payments(db: Session, booking_id: UUID, user: UserToken) -> MonthlyPaymentListResponse:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    if not (user.is_admin or booking.involves(user.user_uuid)):
        raise ForbiddenError("Not authorized to view these payments")

    q = db.query(MonthlyPayment).filter(MonthlyPayment.booking_id == booking_id)
    return _payment_list(q)


def get_payment_overview(db: Session, user: UserToken) -> PaymentOverview:
    """Owner-side totals over the payments of the owner's bookings (all bookings for admins)."""
    total = MonthlyPayment.amount + func.coalesce(MonthlyPayment.late_fee, 0)

    def _count(status):
        return func.count(case((MonthlyPayment.status == status, 1)))

    def _sum(status):
        return func.coalesce(func.sum(case((MonthlyPayment.status == status, total), else_=0)), 0)

    q = db.query(
        _count(PaymentStatus.PENDING),
        _count(PaymentStatus.OVERDUE),
        _count(PaymentStatus.PAID),
        _sum(PaymentStatus.PENDING),
        _sum(PaymentStatus.OVERDUE),
        _sum(PaymentStatus.PAID),
    ).join(Booking, MonthlyPayment.booking_id == Booking.id)

    if not user.is_admin:
        q = q.filter(Booking.owner_id == user.user_uuid)

    pending, overdue, paid, pending_amt, overdue_amt, paid_amt = q.one()
    return PaymentOverview(
        pendingPayments=pending or 0,
        overduePayments=overdue or 0,
        paidPayments=paid or 0,
        pendingAmount=Decimal(str(pending_amt or 0)).quantize(CENT),
        overdueAmount=Decimal(str(overdue_amt or 0)).quantize(CENT),
        collectedAmount=Decimal(str(paid_amt or 0)).quantize(CENT),
    )

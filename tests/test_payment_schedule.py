"""Tests for the monthly payment schedule generator."""

from datetime import date
from decimal import Decimal

from rental_service.app.crud.bookings.payment_schedule_crud import (
    generate_next_payment,
    next_due_date,
)
from rental_service.app.enum.bookings_enum import BookingKind, PaymentStatus
from rental_service.app.models.bookings.monthly_payments import MonthlyPayment


class TestNextDueDate:
    """Tests for next_due_date."""

    def test_first_payment_is_first_of_current_month(self, db, pending_booking) -> None:
        """A booking without payments is due on the 1st of today's month."""
        assert next_due_date(db, pending_booking.id, date(2024, 1, 15)) == date(2024, 1, 1)
        assert next_due_date(db, pending_booking.id, date(2024, 3, 31)) == date(2024, 3, 1)

    def test_follows_latest_due_date(self, db, active_booking) -> None:
        """Subsequent payments are due one month after the latest one."""
        assert next_due_date(db, active_booking.id, date(2024, 6, 10)) == date(2024, 2, 1)

    def test_month_end_is_clamped(self, db, pending_booking) -> None:
        """A month-end due date rolls to the last day of the shorter month."""
        db.add(MonthlyPayment(
            booking_id=pending_booking.id,
            due_date=date(2024, 1, 31),
            amount=Decimal("10000.00"),
            status=PaymentStatus.PAID,
        ))
        db.commit()
        assert next_due_date(db, pending_booking.id) == date(2024, 2, 29)


class TestGenerateNextPayment:
    """Tests for generate_next_payment."""

    def test_approval_emits_first_payment(self, first_payment) -> None:
        """Approval leaves exactly one pending payment for the monthly rent."""
        assert first_payment.due_date == date(2024, 1, 1)
        assert first_payment.amount == Decimal("10000.00")
        assert first_payment.late_fee is None
        assert first_payment.status == PaymentStatus.PENDING

    def test_due_dates_strictly_increase(self, db, active_booking) -> None:
        """Repeated generation produces strictly increasing first-of-month dates."""
        for _ in range(3):
            generate_next_payment(db, active_booking, date(2024, 1, 15))
        db.commit()

        due_dates = [p.due_date for p in db.query(MonthlyPayment)
                     .filter(MonthlyPayment.booking_id == active_booking.id)
                     .order_by(MonthlyPayment.due_date)]
        assert due_dates == [date(2024, 1, 1), date(2024, 2, 1),
                             date(2024, 3, 1), date(2024, 4, 1)]
        assert len(set(due_dates)) == len(due_dates)

    def test_uses_current_monthly_rent(self, db, active_booking) -> None:
        """The generated amount tracks the booking's rent at generation time."""
        active_booking.monthly_rent = Decimal("12000.00")
        payment = generate_next_payment(db, active_booking)
        assert payment.amount == Decimal("12000.00")

    def test_payment_references_its_booking(self, active_booking, first_payment) -> None:
        assert first_payment.booking_ref == (BookingKind.rent, active_booking.id)

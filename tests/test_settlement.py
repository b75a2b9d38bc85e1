"""Tests for wallet-funded payment settlement."""

from datetime import date
from decimal import Decimal

import pytest

from rental_service.app.core.exceptions import (
    ForbiddenError,
    InsufficientFundsError,
    InvalidStateError,
)
from rental_service.app.crud.bookings import bookings_crud, settlement_crud
from rental_service.app.crud.scheduler.scheduler_service import run_daily_accrual
from rental_service.app.crud.wallet import wallet_crud
from rental_service.app.enum.bookings_enum import BookingStatus, PaymentStatus
from rental_service.app.enum.notifications_enum import NotificationType
from rental_service.app.models.notifications.booking_notifications import BookingNotification
from rental_service.app.models.wallet.wallets import WalletTransaction
from shared.core.schemas import CommonQueryParams

ACCRUAL_DAY = date(2024, 1, 18)


@pytest.fixture
def overdue_payment(db, first_payment):
    """First payment carrying a 233.33 late fee."""
    run_daily_accrual(db, ACCRUAL_DAY)
    db.refresh(first_payment)
    return first_payment


class TestFullSettlement:
    """Tests for settling the whole amount due."""

    def test_worked_example(self, db, overdue_payment, tenant, owner, fund) -> None:
        """Paying 10233.33 settles the payment and schedules February."""
        fund(tenant, "20000")
        outcome = settlement_crud.settle_payment(
            db, overdue_payment.id, tenant, Decimal("10233.33"), today=ACCRUAL_DAY)

        payment = outcome.payment
        assert outcome.is_full
        assert payment.status == PaymentStatus.PAID
        assert payment.paid_date == ACCRUAL_DAY
        assert payment.payment_reference == str(outcome.transaction.id)
        assert outcome.transaction.amount == Decimal("10233.33")
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("9766.67")

        assert outcome.next_payment.due_date == date(2024, 2, 1)
        assert outcome.next_payment.amount == Decimal("10000.00")
        assert outcome.next_payment.status == PaymentStatus.PENDING

        assert [(e.type, e.recipient_id) for e in outcome.events] == [
            (NotificationType.PAYMENT_RECEIVED, owner.user_uuid)]

    def test_without_amount_debits_total_due(self, db, overdue_payment, tenant, fund) -> None:
        """Omitting the amount settles exactly the total due."""
        fund(tenant, "10233.33")
        outcome = settlement_crud.settle_payment(db, overdue_payment.id, tenant)

        assert outcome.transaction.amount == Decimal("10233.33")
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("0.00")

    def test_overpayment_debits_only_total_due(self, db, first_payment, tenant, fund) -> None:
        """Paying more than due debits only the amount due."""
        fund(tenant, "15000")
        outcome = settlement_crud.settle_payment(db, first_payment.id, tenant, Decimal("12000"))

        assert outcome.transaction.amount == Decimal("10000.00")
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("5000.00")

    def test_no_next_payment_when_booking_ended(self, db, active_booking, first_payment, owner, tenant, fund) -> None:
        """Settling a leftover payment of a cancelled booking schedules nothing."""
        bookings_crud.cancel_booking(db, active_booking.id, owner, today=date(2024, 1, 15))
        fund(tenant, "10000")

        outcome = settlement_crud.settle_payment(db, first_payment.id, tenant)
        assert outcome.payment.status == PaymentStatus.PAID
        assert outcome.next_payment is None
        assert len(active_booking.payments) == 1

    def test_sees_termination_committed_by_another_session(self, db, session_factory, active_booking,
                                                           first_payment, tenant, fund) -> None:
        """The booking is re-read under lock, so a concurrent termination stops the schedule."""
        fund(tenant, "10000")
        assert active_booking.status == BookingStatus.ACTIVE

        other = session_factory()
        bookings_crud.terminate_for_non_payment(other, active_booking.id, as_of=date(2024, 3, 4))
        other.close()

        outcome = settlement_crud.settle_payment(db, first_payment.id, tenant, today=date(2024, 3, 4))
        assert outcome.payment.status == PaymentStatus.PAID
        assert outcome.next_payment is None
        assert active_booking.status == BookingStatus.TERMINATED
        assert len(active_booking.payments) == 1

    def test_admin_pays_from_own_wallet(self, db, first_payment, admin, tenant, fund) -> None:
        """Administrators may settle on behalf of the tenant with their wallet."""
        fund(admin, "10000")
        settlement_crud.settle_payment(db, first_payment.id, admin)

        assert wallet_crud.get_balance(db, admin.user_uuid) == Decimal("0.00")
        assert wallet_crud.get_wallet(db, tenant.user_uuid) is None


class TestPartialSettlement:
    """Tests for partial payments."""

    def test_reduces_principal(self, db, first_payment, tenant, fund) -> None:
        """5000 against 10000 leaves 5000 principal and the same status."""
        fund(tenant, "5000")
        outcome = settlement_crud.settle_payment(db, first_payment.id, tenant, Decimal("5000"))

        payment = outcome.payment
        assert not outcome.is_full
        assert payment.amount == Decimal("5000.00")
        assert (payment.late_fee or 0) == 0
        assert payment.status == PaymentStatus.PENDING
        assert payment.paid_date is None
        assert outcome.next_payment is None

    def test_below_principal_leaves_fee(self, db, overdue_payment, tenant, fund) -> None:
        """A payment just below the principal does not touch the late fee."""
        fund(tenant, "9999")
        payment = settlement_crud.settle_payment(
            db, overdue_payment.id, tenant, Decimal("9999")).payment

        assert payment.amount == Decimal("1.00")
        assert payment.late_fee == Decimal("233.33")
        assert payment.status == PaymentStatus.OVERDUE

    def test_excess_over_principal_reduces_fee(self, db, overdue_payment, tenant, fund) -> None:
        """Covering the principal clears it and the excess lowers the fee."""
        fund(tenant, "10100")
        payment = settlement_crud.settle_payment(
            db, overdue_payment.id, tenant, Decimal("10100")).payment

        assert payment.amount == Decimal("0.00")
        assert payment.late_fee == Decimal("133.33")
        assert payment.status == PaymentStatus.OVERDUE

    def test_partials_add_up_to_full(self, db, first_payment, tenant, fund) -> None:
        """Two partials followed by the remainder settle the payment."""
        fund(tenant, "10000")
        settlement_crud.settle_payment(db, first_payment.id, tenant, Decimal("4000"))
        settlement_crud.settle_payment(db, first_payment.id, tenant, Decimal("4000"))
        outcome = settlement_crud.settle_payment(db, first_payment.id, tenant)

        assert outcome.transaction.amount == Decimal("2000.00")
        assert outcome.payment.status == PaymentStatus.PAID
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("0.00")


class TestSettlementFailures:
    """Failed settlements leave every row untouched."""

    def test_insufficient_funds_is_atomic(self, db, overdue_payment, tenant, owner, fund) -> None:
        """A shortfall reports the total due and changes nothing."""
        fund(tenant, "100")

        with pytest.raises(InsufficientFundsError) as exc_info:
            settlement_crud.settle_payment(db, overdue_payment.id, tenant)

        assert exc_info.value.total_due == Decimal("10233.33")
        assert exc_info.value.data == {"total_due": "10233.33", "balance": "100.00"}

        db.refresh(overdue_payment)
        assert overdue_payment.status == PaymentStatus.OVERDUE
        assert overdue_payment.amount == Decimal("10000.00")
        assert overdue_payment.late_fee == Decimal("233.33")
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("100.00")
        assert db.query(WalletTransaction).count() == 1
        assert db.query(BookingNotification).filter(
            BookingNotification.type == NotificationType.PAYMENT_RECEIVED).count() == 0

    def test_partial_shortfall(self, db, first_payment, tenant, fund) -> None:
        """A partial larger than the balance is refused as well."""
        fund(tenant, "100")
        with pytest.raises(InsufficientFundsError):
            settlement_crud.settle_payment(db, first_payment.id, tenant, Decimal("500"))
        db.refresh(first_payment)
        assert first_payment.amount == Decimal("10000.00")

    def test_no_wallet(self, db, first_payment, tenant) -> None:
        """Tenants without a wallet cannot pay."""
        with pytest.raises(InsufficientFundsError) as exc_info:
            settlement_crud.settle_payment(db, first_payment.id, tenant)
        assert exc_info.value.balance == Decimal("0.00")

    def test_stranger_is_forbidden(self, db, first_payment, stranger, fund) -> None:
        """Only the tenant or an admin may pay."""
        fund(stranger, "10000")
        with pytest.raises(ForbiddenError):
            settlement_crud.settle_payment(db, first_payment.id, stranger)
        assert wallet_crud.get_balance(db, stranger.user_uuid) == Decimal("10000.00")

    def test_paid_payment_cannot_be_settled_again(self, db, first_payment, tenant, fund) -> None:
        """Settling a PAID payment reports its status."""
        fund(tenant, "20000")
        settlement_crud.settle_payment(db, first_payment.id, tenant)

        with pytest.raises(InvalidStateError) as exc_info:
            settlement_crud.settle_payment(db, first_payment.id, tenant)
        assert exc_info.value.data == {"current_status": "PAID"}
        assert wallet_crud.get_balance(db, tenant.user_uuid) == Decimal("10000.00")


class TestPaymentQueries:
    """Tests for tenant and owner payment views."""

    def test_outstanding_amount(self, db, overdue_payment, tenant, stranger) -> None:
        """Outstanding sums principal and fee over unpaid payments."""
        assert settlement_crud.calculate_outstanding_amount(db, tenant.user_uuid) == Decimal("10233.33")
        assert settlement_crud.calculate_outstanding_amount(db, stranger.user_uuid) == Decimal("0.00")

        summary = settlement_crud.get_outstanding(db, tenant)
        assert summary.unpaid_payments == 1

    def test_overdue_list(self, db, overdue_payment, tenant) -> None:
        """Only OVERDUE payments are listed as overdue."""
        result = settlement_crud.get_overdue_payments(db, tenant.user_uuid)
        assert result["total"] == 1
        assert result["payments"][0].total_due == Decimal("10233.33")

    def test_my_payments_and_booking_payments(self, db, active_booking, first_payment, tenant, owner, stranger) -> None:
        """Tenants list their payments; booking payments need a party to the booking."""
        assert settlement_crud.get_my_payments(db, tenant, CommonQueryParams())["total"] == 1
        assert settlement_crud.get_booking_payments(db, active_booking.id, owner)["total"] == 1
        with pytest.raises(ForbiddenError):
            settlement_crud.get_booking_payments(db, active_booking.id, stranger)

    def test_owner_overview(self, db, overdue_payment, tenant, owner, fund) -> None:
        """The overview counts and sums payments per status."""
        fund(tenant, "20000")
        settlement_crud.settle_payment(db, overdue_payment.id, tenant, today=ACCRUAL_DAY)

        overview = settlement_crud.get_payment_overview(db, owner)
        assert overview.paidPayments == 1
        assert overview.pendingPayments == 1
        assert overview.overduePayments == 0
        assert overview.collectedAmount == Decimal("10233.33")
        assert overview.pendingAmount == Decimal("10000.00")

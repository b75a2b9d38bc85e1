from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_rental_db as get_db
from shared.core.schemas import CommonQueryParams, UserToken
from ...crud.bookings import settlement_crud as crud
from ...schemas.bookings.monthly_payments_schemas import (
    MonthlyPaymentListResponse, MonthlyPaymentOut, OutstandingResponse, PaymentOverview,
    PaymentSettle
)

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/my", response_model=MonthlyPaymentListResponse)
def get_my_payments(
    params: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_my_payments(db, current_user, params)


@router.get("/overdue", response_model=MonthlyPaymentListResponse)
def get_overdue_payments(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_overdue_payments(db, current_user.user_uuid)


@router.get("/outstanding", response_model=OutstandingResponse)
def get_outstanding(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_outstanding(db, current_user)


@router.get("/overview", response_model=PaymentOverview)
def get_payment_overview(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_payment_overview(db, current_user)


@router.get("/booking/{booking_id}", response_model=MonthlyPaymentListResponse)
def get_booking_payments(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_booking_payments(db, booking_id, current_user)


@router.post("/{payment_id}/pay", response_model=MonthlyPaymentOut)
def pay(
    payment_id: UUID,
    payload: PaymentSettle,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.settle_payment(db, payment_id, current_user, payload.paid_amount).payment

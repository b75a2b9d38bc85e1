from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_rental_db as get_db
from shared.core.schemas import CommonQueryParams, UserToken
from ...crud.bookings import bookings_crud as crud
from ...schemas.bookings.bookings_schemas import (
    BookingApprove, BookingListResponse, BookingOut, BookingReason, PendingApprovalsResponse,
    PgBookingCreate, RentBookingCreate
)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/rent", response_model=BookingOut)
def create_rent_booking(
    payload: RentBookingCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_rent_booking(db, payload, current_user).booking


@router.post("/pg", response_model=BookingOut)
def create_pg_booking(
    payload: PgBookingCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_pg_booking(db, payload, current_user).booking


@router.get("/my", response_model=BookingListResponse)
def get_my_bookings(
    params: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_my_bookings(db, current_user, params)


@router.get("/pending-approvals", response_model=PendingApprovalsResponse)
def get_pending_approvals(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_pending_approvals(db, current_user)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_booking_for_user(db, booking_id, current_user)


@router.post("/{booking_id}/approve", response_model=BookingOut)
def approve_booking(
    booking_id: UUID,
    payload: Optional[BookingApprove] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.approve_booking(db, booking_id, current_user, payload).booking


@router.post("/{booking_id}/reject", response_model=BookingOut)
def reject_booking(
    booking_id: UUID,
    payload: BookingReason,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.reject_booking(db, booking_id, current_user, payload.reason).booking


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
    booking_id: UUID,
    payload: BookingReason,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.cancel_booking(db, booking_id, current_user, payload.reason).booking


@router.post("/{booking_id}/complete", response_model=BookingOut)
def complete_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.complete_booking(db, booking_id, current_user).booking

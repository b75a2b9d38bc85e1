from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.bookings_enum import BookingKind, BookingStatus


class BookingBase(EmptyStringModel):
    start_date: date
    end_date: Optional[date] = None  # None = indefinite
    monthly_rent: Decimal
    security_deposit: Optional[Decimal] = None
    late_fee_rate: Optional[Decimal] = None
    grace_period_days: Optional[int] = None
    auto_renewal: Optional[bool] = False


class RentBookingCreate(BookingBase):
    property_id: UUID


class PgBookingCreate(BookingBase):
    bed_id: UUID


class BookingApprove(EmptyStringModel):
    final_rent: Optional[Decimal] = None
    final_deposit: Optional[Decimal] = None


class BookingReason(EmptyStringModel):
    reason: Optional[str] = None


class BookingOut(BaseModel):
    id: UUID
    kind: BookingKind
    tenant_id: UUID
    owner_id: UUID
    property_id: Optional[UUID] = None
    bed_id: Optional[UUID] = None
    asset_name: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    monthly_rent: Decimal
    security_deposit: Optional[Decimal] = None
    late_fee_rate: Optional[Decimal] = None
    grace_period_days: Optional[int] = None
    auto_renewal: bool
    status: BookingStatus
    approval_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    termination_reason: Optional[str] = None
    termination_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: List[BookingOut]
    total: int


class PendingApprovalsResponse(BaseModel):
    rent_bookings: List[BookingOut]
    pg_bookings: List[BookingOut]
    total_pending: int

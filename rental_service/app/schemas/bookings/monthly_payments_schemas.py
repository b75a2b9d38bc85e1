from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.bookings_enum import PaymentStatus


class MonthlyPaymentOut(BaseModel):
    id: UUID
    booking_id: UUID
    due_date: date
    amount: Decimal
    late_fee: Optional[Decimal] = None
    total_due: Decimal
    status: PaymentStatus
    paid_date: Optional[date] = None
    payment_reference: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MonthlyPaymentListResponse(BaseModel):
    payments: List[MonthlyPaymentOut]
    total: int


class PaymentSettle(EmptyStringModel):
    # omitted = settle the full amount due
    paid_amount: Optional[Decimal] = None

    @field_validator("paid_amount")
    @classmethod
    def positive_amount(cls, v):
        if v is not None and v <= 0:
            raise ValueError("paid_amount must be positive")
        return v


class OutstandingResponse(BaseModel):
    tenant_id: UUID
    outstanding_amount: Decimal
    unpaid_payments: int


class PaymentOverview(BaseModel):
    pendingPayments: int
    overduePayments: int
    paidPayments: int
    pendingAmount: Decimal
    overdueAmount: Decimal
    collectedAmount: Decimal

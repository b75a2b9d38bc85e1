import uuid
from typing import NamedTuple
from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base

from ...enum.bookings_enum import BookingKind, BookingStatus
from ..assets.properties import PgBed, Property


class BookingRef(NamedTuple):
    kind: BookingKind
    id: uuid.UUID

    def __str__(self):
        return f"{self.kind.value}:{self.id}"


class Booking(Base):
    """Rental agreement over a whole property (rent) or a PG bed (pg)."""

    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    kind = Column(Enum(BookingKind, name="booking_kind_enum"), nullable=False)
    tenant_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    # captured from the asset at creation time
    owner_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    property_id = Column(UUID(as_uuid=True), ForeignKey(
        "properties.id"), nullable=True)
    bed_id = Column(UUID(as_uuid=True), ForeignKey(
        "pg_beds.id"), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # null = indefinite
    monthly_rent = Column(Numeric(14, 2), nullable=False)
    security_deposit = Column(Numeric(14, 2), nullable=True)

    late_fee_rate = Column(Numeric(5, 2), default=5.00)  # percent per month
    grace_period_days = Column(Integer, default=3)
    auto_renewal = Column(Boolean, default=False, nullable=False)

    status = Column(
        Enum(BookingStatus, name="booking_status_enum"),
        default=BookingStatus.PENDING_APPROVAL,
        nullable=False
    )
    approval_date = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    termination_reason = Column(Text, nullable=True)
    termination_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "(kind = 'rent' AND property_id IS NOT NULL AND bed_id IS NULL) OR "
            "(kind = 'pg' AND bed_id IS NOT NULL AND property_id IS NULL)",
            name="ck_booking_single_asset"
        ),
    )

    rent_property = relationship("Property")
    bed = relationship("PgBed")
    payments = relationship(
        "MonthlyPayment", back_populates="booking",
        cascade="all, delete-orphan", order_by="MonthlyPayment.due_date")

    @classmethod
    def for_asset(cls, asset, **fields) -> "Booking":
        if isinstance(asset, Property):
            return cls(kind=BookingKind.rent, rent_property=asset, property_id=asset.id, **fields)
        if isinstance(asset, PgBed):
            return cls(kind=BookingKind.pg, bed=asset, bed_id=asset.id, **fields)
        raise TypeError(f"Unsupported booking asset: {type(asset).__name__}")

    @property
    def asset(self):
        return self.rent_property if self.kind == BookingKind.rent else self.bed

    @property
    def asset_name(self) -> str:
        asset = self.asset
        return asset.display_name if asset is not None else "your booking"

    @property
    def ref(self) -> BookingRef:
        return BookingRef(self.kind, self.id)

    def involves(self, user_id) -> bool:
        return user_id in (self.tenant_id, self.owner_id)

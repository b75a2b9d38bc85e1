import uuid
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base

from ...enum.bookings_enum import PropertyStatus


class Property(Base):
    __tablename__ = "properties"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(UUID(as_uuid=True), nullable=False)
    title = Column(String(255), nullable=False)
    status = Column(
        Enum(PropertyStatus, name="property_status_enum"),
        default=PropertyStatus.for_rent,
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    rooms = relationship("PgRoom", back_populates="property",
                         cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.title

    @property
    def is_available(self) -> bool:
        return self.status == PropertyStatus.for_rent

    def mark_occupied(self):
        self.status = PropertyStatus.rented

    def mark_available(self):
        self.status = PropertyStatus.for_rent


class PgRoom(Base):
    __tablename__ = "pg_rooms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(UUID(as_uuid=True), ForeignKey(
        "properties.id", ondelete="CASCADE"), nullable=False)
    room_number = Column(String(32), nullable=False)

    property = relationship("Property", back_populates="rooms")
    beds = relationship("PgBed", back_populates="room",
                        cascade="all, delete-orphan")


class PgBed(Base):
    __tablename__ = "pg_beds"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_id = Column(UUID(as_uuid=True), ForeignKey(
        "pg_rooms.id", ondelete="CASCADE"), nullable=False)
    bed_number = Column(String(32), nullable=False)
    is_occupied = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    room = relationship("PgRoom", back_populates="beds")

    # bed -> room -> property
    @property
    def owner_id(self):
        return self.room.property.owner_id

    @property
    def display_name(self) -> str:
        return f"Bed {self.bed_number} in {self.room.property.title}"

    @property
    def is_available(self) -> bool:
        return not self.is_occupied

    def mark_occupied(self):
        self.is_occupied = True

    def mark_available(self):
        self.is_occupied = False

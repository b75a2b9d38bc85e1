"""Pytest configuration and fixtures."""

import os

# must be set before the service settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RENTAL_SCHEDULER_ENABLED", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.database import Base
from shared.core.schemas import UserToken
from rental_service.app import models  # noqa: F401
from rental_service.app.crud.bookings import bookings_crud
from rental_service.app.crud.wallet import wallet_crud
from rental_service.app.models.assets.properties import PgBed, PgRoom, Property

from .factories import APPROVAL_DAY, make_user, rent_request


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def tenant() -> UserToken:
    return make_user("tenant", "Tina Tenant")


@pytest.fixture
def owner() -> UserToken:
    return make_user("owner", "Oscar Owner")


@pytest.fixture
def admin() -> UserToken:
    return make_user("admin", "Ada Admin")


@pytest.fixture
def stranger() -> UserToken:
    return make_user("tenant", "Sam Stranger")


@pytest.fixture
def rent_property(db, owner) -> Property:
    """A whole property listed for rent."""
    prop = Property(owner_id=owner.user_uuid, title="Sea View Apartment")
    db.add(prop)
    db.commit()
    return prop


@pytest.fixture
def pg_bed(db, owner) -> PgBed:
    """Bed A in room 101 of a PG property."""
    prop = Property(owner_id=owner.user_uuid, title="Green PG")
    room = PgRoom(property=prop, room_number="101")
    bed = PgBed(room=room, bed_number="A")
    db.add_all([prop, room, bed])
    db.commit()
    return bed


@pytest.fixture
def pending_booking(db, rent_property, tenant):
    return bookings_crud.create_rent_booking(
        db, rent_request(rent_property), tenant, today=APPROVAL_DAY).booking


@pytest.fixture
def active_booking(db, pending_booking, owner):
    """Rent booking approved on 2024-01-15; first payment due 2024-01-01."""
    return bookings_crud.approve_booking(
        db, pending_booking.id, owner, today=APPROVAL_DAY).booking


@pytest.fixture
def first_payment(active_booking):
    return active_booking.payments[0]


@pytest.fixture
def fund(db):
    """Credit a user's wallet and commit."""
    def _fund(user: UserToken, amount: str):
        wallet_crud.credit(db, user.user_uuid, amount, "Test top-up")
        db.commit()
    return _fund

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from shared.core.config import RENTAL_DATABASE_URL, settings

Base = declarative_base()


def make_engine(url: str = RENTAL_DATABASE_URL):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.DB_POOL_SIZE,          # max idle connections
        max_overflow=settings.DB_MAX_OVERFLOW,    # max temporary extra connections
        pool_timeout=30                           # wait time before failing
    )


# Rental DB
rental_engine = make_engine()
RentalSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=rental_engine)


# Dependency


def get_rental_db():
    db = RentalSessionLocal()
    try:
        yield db
    finally:
        db.close()

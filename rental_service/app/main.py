# app/main.py
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings as shared_settings
from shared.core.database import Base, rental_engine
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from .core.config import settings
from .crud.scheduler.scheduler_service import run_scheduler
from . import models  # noqa: F401  registers every table on Base
from .router.bookings import bookings_router, payments_router
from .router.notifications import notifications_router
from .router.scheduler import scheduler_router
from .router.wallet import wallet_router

logging.basicConfig(
    level=shared_settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s]: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables
    Base.metadata.create_all(bind=rental_engine)

    scheduler_task = None
    if settings.SCHEDULER_ENABLED:
        scheduler_task = asyncio.create_task(run_scheduler())

    yield

    if scheduler_task:
        scheduler_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task
        logger.info("Payment scheduler stopped")


# This MUST exist for uvicorn
app = FastAPI(title="Rental Booking Service API", lifespan=lifespan)

# 1️⃣ CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2️⃣ Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# Register exception handlers
setup_exception_handlers(app)

# Routers
app.include_router(bookings_router.router)
app.include_router(payments_router.router)
app.include_router(wallet_router.router)
app.include_router(notifications_router.router)
app.include_router(scheduler_router.router)


@app.get("/api/rental/health")
def health():
    return {"status": "healthy"}

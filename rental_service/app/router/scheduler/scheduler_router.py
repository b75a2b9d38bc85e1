from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_rental_db as get_db
from ...crud.scheduler import scheduler_service as crud
from ...schemas.scheduler.scheduler_schemas import (
    AccrualSummary, ReminderSummary, SchedulerRunRequest
)

# on-demand runs of the background passes
router = APIRouter(
    prefix="/api/scheduler",
    tags=["scheduler"],
    dependencies=[Depends(allow_admin)]
)


@router.post("/accrual", response_model=AccrualSummary)
def run_accrual(
    payload: Optional[SchedulerRunRequest] = None,
    db: Session = Depends(get_db)
):
    return crud.run_daily_accrual(db, payload.as_of if payload else None)


@router.post("/reminders", response_model=ReminderSummary)
def run_reminders(
    payload: Optional[SchedulerRunRequest] = None,
    db: Session = Depends(get_db)
):
    return crud.send_payment_reminders(db, payload.as_of if payload else None)

from datetime import date
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...core.events import BookingEvent


class SchedulerRunRequest(EmptyStringModel):
    as_of: Optional[date] = None


class AccrualSummary(BaseModel):
    as_of: date
    processed: int = 0
    fees_applied: int = 0
    escalated: int = 0
    terminated: int = 0
    failed: List[UUID] = Field(default_factory=list)
    events: List[BookingEvent] = Field(default_factory=list)


class ReminderSummary(BaseModel):
    as_of: date
    reminders_sent: int = 0
    events: List[BookingEvent] = Field(default_factory=list)

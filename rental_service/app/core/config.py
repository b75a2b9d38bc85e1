import os
from decimal import Decimal
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    # late fee policy fallbacks when a booking carries no override
    DEFAULT_LATE_FEE_RATE: Decimal = Decimal("5.00")   # percent per month
    DEFAULT_GRACE_PERIOD_DAYS: int = 3
    MAX_LATE_FEE_RATIO: Decimal = Decimal("0.25")      # of principal

    OVERDUE_ESCALATION_DAYS: int = 30
    OVERDUE_TERMINATION_DAYS: int = 60
    TERMINATION_REASON: str = "Non-payment of rent for 60+ days"

    REMINDER_DAYS_AHEAD: int = 3
    NOTIFICATION_RETENTION_DAYS: int = 90

    # background scheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_POLL_SECONDS: int = 60
    ACCRUAL_RUN_HOUR: int = 2
    REMINDER_WEEKDAY: int = 0  # Monday
    REMINDER_RUN_HOUR: int = 9

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "RENTAL_"
        extra = "ignore"


settings = Settings()

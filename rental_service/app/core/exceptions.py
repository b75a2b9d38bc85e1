from decimal import Decimal
from typing import Optional

from shared.core.exceptions import ServiceError
from shared.utils.app_status_code import AppStatusCode


class ConflictError(ServiceError):
    """Overlapping booking or an asset that cannot be booked right now."""
    status_code = AppStatusCode.BOOKING_CONFLICT
    http_status = 409


class InvalidStateError(ServiceError):
    status_code = AppStatusCode.BOOKING_INVALID_STATE
    http_status = 409

    def __init__(self, message: str, current_status=None):
        status_value = getattr(current_status, "value", current_status)
        super().__init__(message, data={"current_status": status_value})
        self.current_status = current_status


class NotFoundError(ServiceError):
    status_code = AppStatusCode.RECORD_NOT_FOUND
    http_status = 404


class ForbiddenError(ServiceError):
    status_code = AppStatusCode.UNAUTHORIZED_ACTION
    http_status = 403


class InsufficientFundsError(ServiceError):
    status_code = AppStatusCode.WALLET_INSUFFICIENT_FUNDS
    http_status = 402

    def __init__(self, message: str, total_due: Decimal, balance: Optional[Decimal] = None):
        super().__init__(message, data={
            "total_due": str(total_due),
            "balance": str(balance) if balance is not None else None,
        })
        self.total_due = total_due
        self.balance = balance


class InvalidInputError(ServiceError):
    """Malformed amounts or dates."""
    status_code = AppStatusCode.INVALID_INPUT
    http_status = 400

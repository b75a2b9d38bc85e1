from typing import Any, Optional

from shared.utils.app_status_code import AppStatusCode


class ServiceError(Exception):
    """Base for domain errors that map onto a JsonOutResult failure."""

    status_code: str = AppStatusCode.OPERATION_FAILED
    http_status: int = 400

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data

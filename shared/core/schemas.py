from pydantic import BaseModel
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from shared.utils.enums import UserAccountType
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    session_id: Optional[str] = None
    org_id: Optional[UUID] = None
    name: Optional[str] = None
    account_type: str
    status: Optional[str] = None
    exp: Optional[int] = None

    @property
    def user_uuid(self) -> UUID:
        return UUID(str(self.user_id))

    @property
    def is_admin(self) -> bool:
        return self.account_type.lower() in UserAccountType.admin_types()


class CommonQueryParams(EmptyStringModel):
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[Any] = None
    status: str
    status_code: str
    message: str

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.wallet_enum import TransactionType


class WalletOut(BaseModel):
    id: UUID
    user_id: UUID
    balance: Decimal

    model_config = {"from_attributes": True}


class WalletTransactionOut(BaseModel):
    id: UUID
    wallet_id: UUID
    type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WalletTransactionListResponse(BaseModel):
    transactions: List[WalletTransactionOut]
    total: int


class AddMoneyRequest(EmptyStringModel):
    amount: Decimal
    description: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v


class AddMoneyResponse(BaseModel):
    wallet_id: UUID
    new_balance: Decimal
    transaction_id: UUID

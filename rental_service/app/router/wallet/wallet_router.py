from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_rental_db as get_db
from shared.core.schemas import CommonQueryParams, UserToken
from ...crud.wallet import wallet_crud as crud
from ...schemas.wallet.wallet_schemas import (
    AddMoneyRequest, AddMoneyResponse, WalletOut, WalletTransactionListResponse
)

router = APIRouter(
    prefix="/api/wallet",
    tags=["wallet"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=WalletOut)
def get_wallet(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_my_wallet(db, current_user.user_uuid)


@router.get("/transactions", response_model=WalletTransactionListResponse)
def get_transactions(
    params: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_transactions(db, current_user.user_uuid, params)


@router.post("/add", response_model=AddMoneyResponse)
def add_money(
    payload: AddMoneyRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.add_money(db, current_user.user_uuid, payload)

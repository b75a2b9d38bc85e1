import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...core.exceptions import InvalidInputError
from ...enum.wallet_enum import TransactionType
from ...models.wallet.wallets import Wallet, WalletTransaction
from ...schemas.wallet.wallet_schemas import (
    AddMoneyRequest, AddMoneyResponse, WalletTransactionListResponse, WalletTransactionOut
)
from shared.core.schemas import CommonQueryParams

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(amount) -> Decimal:
    value = Decimal(str(amount)).quantize(CENT)
    if value <= 0:
        raise InvalidInputError("Amount must be positive")
    return value


# ----------------------------------------------------
# Wallet lookup (row-locked for balance mutation)
# ----------------------------------------------------
def get_wallet(db: Session, user_id: UUID, for_update: bool = False) -> Optional[Wallet]:
    q = db.query(Wallet).filter(Wallet.user_id == user_id)
    if for_update:
        q = q.with_for_update()
    return q.first()


def get_or_create_wallet(db: Session, user_id: UUID, for_update: bool = False) -> Wallet:
    wallet = get_wallet(db, user_id, for_update=for_update)
    if wallet:
        return wallet

    try:
        # savepoint so a lost insert race leaves the outer transaction usable
        with db.begin_nested():
            wallet = Wallet(user_id=user_id, balance=Decimal("0.00"))
            db.add(wallet)
    except IntegrityError:
        logger.info("Wallet for user %s created concurrently, re-reading", user_id)
        wallet = get_wallet(db, user_id, for_update=for_update)
    return wallet


# ----------------------------------------------------
# Ledger operations - run inside the caller's transaction
# ----------------------------------------------------
def credit(db: Session, user_id: UUID, amount, description: str,
           reference_id: Optional[str] = None) -> WalletTransaction:
    value = _money(amount)
    wallet = get_or_create_wallet(db, user_id, for_update=True)

    txn = WalletTransaction(
        wallet_id=wallet.id,
        type=TransactionType.CREDIT,
        amount=value,
        description=description,
        reference_id=reference_id,
    )
    db.add(txn)
    wallet.balance = Decimal(wallet.balance) + value
    db.flush()

    logger.info("Wallet %s credited %s (%s)", wallet.id, value, description)
    return txn


def debit(db: Session, user_id: UUID, amount, description: str,
          reference_id: Optional[str] = None) -> Optional[WalletTransaction]:
    """Debit the user's wallet; returns None when there is no wallet or not enough balance."""
    value = _money(amount)
    wallet = get_wallet(db, user_id, for_update=True)
    if wallet is None:
        return None

    if Decimal(wallet.balance) < value:
        logger.info("Wallet %s debit of %s refused: balance %s",
                    wallet.id, value, wallet.balance)
        return None

    txn = WalletTransaction(
        wallet_id=wallet.id,
        type=TransactionType.DEBIT,
        amount=value,
        description=description,
        reference_id=reference_id,
    )
    db.add(txn)
    wallet.balance = Decimal(wallet.balance) - value
    db.flush()

    logger.info("Wallet %s debited %s (%s)", wallet.id, value, description)
    return txn


def get_balance(db: Session, user_id: UUID) -> Decimal:
    wallet = get_wallet(db, user_id)
    return Decimal(wallet.balance) if wallet else Decimal("0.00")


# ----------------------------------------------------
# Endpoint helpers
# ----------------------------------------------------
def get_my_wallet(db: Session, user_id: UUID) -> Wallet:
    wallet = get_or_create_wallet(db, user_id)
    db.commit()
    db.refresh(wallet)
    return wallet


def get_transactions(db: Session, user_id: UUID, params: CommonQueryParams) -> WalletTransactionListResponse:
    wallet = get_wallet(db, user_id)
    if not wallet:
        return {"transactions": [], "total": 0}

    q = (
        db.query(WalletTransaction)
        .filter(WalletTransaction.wallet_id == wallet.id)
        .order_by(WalletTransaction.created_at.desc())
    )
    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()

    return {
        "transactions": [WalletTransactionOut.model_validate(r) for r in rows],
        "total": total,
    }


def add_money(db: Session, user_id: UUID, payload: AddMoneyRequest) -> AddMoneyResponse:
    try:
        txn = credit(
            db,
            user_id,
            payload.amount,
            payload.description or "Money added to wallet",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    wallet = get_wallet(db, user_id)
    return AddMoneyResponse(
        wallet_id=wallet.id,
        new_balance=wallet.balance,
        transaction_id=txn.id,
    )

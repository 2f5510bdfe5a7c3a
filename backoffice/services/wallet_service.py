import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backoffice.extensions import db
from backoffice.models.account_balance import AccountBalance
from backoffice.models.wallet_transaction import WalletTransaction, gen_tx_id
from backoffice.utils.exceptions import (
    ServiceError,
    ValidationFailed,
    AccountBalanceNotFound,
    InsufficientBalance,
)
from backoffice.utils.pagination import paginate_query

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

LEDGER_METADATA_FIELDS = (
    "descriptor",
    "created_by",
    "payment_gateway",
    "payment_gateway_session_id",
    "payment_gateway_transaction_id",
    "invoice_url",
    "reference_type",
    "reference_id",
)


def to_amount(value):
    """Parse a money value into a positive Decimal rounded to cents."""
    try:
        amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed("Invalid amount", {"amount": ["Not a valid amount."]})

    if not amount.is_finite() or amount <= 0:
        raise ValidationFailed("Invalid amount", {"amount": ["Amount must be greater than 0."]})
    return amount


def _current_balance(account_id):
    # re-read past the identity map; a conditional update may have matched nothing
    return (
        AccountBalance.query
        .filter_by(account_id=account_id)
        .populate_existing()
        .first()
    )


def _ledger_row(account_id, amount, transaction_type, metadata):
    metadata = metadata or {}
    unknown = set(metadata) - set(LEDGER_METADATA_FIELDS)
    if unknown:
        raise ValueError(f"Unknown ledger metadata: {sorted(unknown)}")

    fields = {k: metadata.get(k) for k in LEDGER_METADATA_FIELDS}
    fields["descriptor"] = fields["descriptor"] or transaction_type.title()
    if fields["created_by"] is not None:
        fields["created_by"] = str(fields["created_by"])
    if fields["reference_id"] is not None:
        fields["reference_id"] = str(fields["reference_id"])

    return WalletTransaction(
        id=gen_tx_id(),
        account_id=str(account_id),
        amount=amount,
        transaction_type=transaction_type,
        **fields,
    )


def _apply(account_id, amount, transaction_type, metadata):
    amount = to_amount(amount)
    account_id = str(account_id)
    tx = _ledger_row(account_id, amount, transaction_type, metadata)

    try:
        q = AccountBalance.query.filter(AccountBalance.account_id == account_id)
        if transaction_type == "debit":
            # the sufficiency check is part of the UPDATE itself
            q = q.filter(AccountBalance.amount >= amount)
            new_amount = func.round(AccountBalance.amount - amount, 2)
        else:
            new_amount = func.round(AccountBalance.amount + amount, 2)

        matched = q.update({AccountBalance.amount: new_amount}, synchronize_session="fetch")
        if not matched:
            balance = _current_balance(account_id)
            if not balance:
                raise AccountBalanceNotFound(account_id)
            raise InsufficientBalance(account_id, balance.amount, amount)

        db.session.add(tx)
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except IntegrityError:
        # duplicate keys in rows committed alongside the ledger row
        db.session.rollback()
        raise
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("wallet %s failed account=%s amount=%s", transaction_type, account_id, amount)
        raise

    logger.info(
        "wallet %s account=%s amount=%s tx=%s",
        transaction_type, account_id, amount, tx.id,
    )
    return tx


def debit_wallet(account_id, amount, metadata=None):
    """Take ``amount`` out of an account's wallet.

    The decrement is a single conditional UPDATE (``amount >= debit``), so
    of two concurrent debits that together exceed the balance exactly one
    matches the row; the other raises InsufficientBalance. The ledger row is
    inserted in the same transaction. Anything already pending in the
    session is committed along with it.

    Raises AccountBalanceNotFound or InsufficientBalance without touching
    the balance or writing a ledger row.
    """
    return _apply(account_id, amount, "debit", metadata)


def credit_wallet(account_id, amount, metadata=None):
    return _apply(account_id, amount, "credit", metadata)


def get_wallet_balance(account_id):
    balance = AccountBalance.query.filter_by(account_id=str(account_id)).first()
    if not balance:
        raise AccountBalanceNotFound(str(account_id))
    return balance


def list_transactions(account_id, page=None, limit=None, transaction_type=None):
    q = WalletTransaction.query.filter_by(account_id=str(account_id))
    if transaction_type:
        q = q.filter(WalletTransaction.transaction_type == transaction_type)

    q = q.order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
    return paginate_query(q, page, limit)

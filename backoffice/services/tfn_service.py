"""Toll-free / DID search and purchase workflow.

purchase_tfn walks an order through
Validated -> VendorResolved -> BalanceChecked -> Debited -> Purchased -> Complete.
An underfunded account is rejected before any vendor HTTP call. The debit
and the order row are committed together before the vendor is called; a
vendor failure after that point is compensated with a wallet
credit so money never leaves the wallet without numbers being recorded.
"""
import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backoffice.extensions import db
from backoffice.models.did_order import (
    DidOrder,
    gen_order_id,
    ORDER_COMPLETED,
    ORDER_DEBITED,
    ORDER_FAILED,
    ORDER_REFUNDED,
)
from backoffice.services import did_gateway
from backoffice.services.vendor_service import get_vendor, resolve_active_vendor
from backoffice.services.wallet_service import credit_wallet, debit_wallet, get_wallet_balance, to_amount
from backoffice.utils.exceptions import (
    DuplicateRequest,
    InsufficientBalance,
    PurchaseFailedAfterDebit,
    ServiceError,
    ValidationFailed,
    VendorDeclined,
)

logger = logging.getLogger(__name__)


def search_tfn(search_type, quantity, npa, session=None):
    vendor = resolve_active_vendor()
    integration = did_gateway.integration_for(vendor, session=session)
    return did_gateway.search(vendor, search_type, quantity, npa, integration=integration)


def _pick_numbers(vendor, integration, did_qty, search_type, npa):
    candidates = did_gateway.search(vendor, search_type, did_qty, npa, integration=integration)
    if len(candidates) < did_qty:
        raise VendorDeclined(
            "Not enough numbers available",
            {"requested": did_qty, "available": len(candidates)},
        )
    return candidates[:did_qty]


def _compensate(order, failure, created_by):
    cause = failure.cause
    order.error = getattr(cause, "message", str(cause))
    vendor_order_id = getattr(cause, "details", {}).get("vendor_order_id")
    if vendor_order_id:
        order.vendor_order_id = vendor_order_id
    order.status = ORDER_REFUNDED

    try:
        refund = credit_wallet(order.account_id, order.amount, {
            "descriptor": "DID Purchase Refund",
            "created_by": created_by,
            "reference_type": "did_order",
            "reference_id": order.id,
        })
        order.refund_transaction_id = refund.id
        db.session.commit()
    except (ServiceError, SQLAlchemyError):
        db.session.rollback()
        order.status = ORDER_FAILED
        order.error = getattr(cause, "message", str(cause))
        db.session.commit()
        logger.critical(
            "order %s: purchase failed after debit and the refund failed; account %s needs a manual refund of %s",
            order.id, order.account_id, order.amount,
        )
        return False

    logger.error(
        "order %s: purchase failed after debit (%s); refunded %s to account %s",
        order.id, order.error, order.amount, order.account_id,
    )
    return True


def purchase_tfn(
    vendor_id,
    did_qty,
    rate,
    account_id,
    dids=None,
    request_id=None,
    search_type="tollfree",
    npa=None,
    created_by=None,
    session=None,
):
    """Buy ``did_qty`` numbers from a vendor, paid from the account wallet.

    ``rate`` is the total amount debited for the whole order.
    Returns ``(order, numbers, replayed)``; ``replayed`` is True when
    ``request_id`` matched an already completed order and nothing was charged.
    """
    if did_qty < 1:
        raise ValidationFailed(details={"didQty": ["Must be at least 1."]})
    if dids is not None:
        if len({did_gateway.did_number(n) for n in dids}) != len(dids):
            raise ValidationFailed(details={"dids": ["The numbers must be distinct."]})
        if len(dids) != did_qty:
            raise ValidationFailed(details={"dids": [f"Exactly {did_qty} numbers are required."]})
    amount = to_amount(rate)
    account_id = str(account_id)

    request_id = request_id or uuid.uuid4().hex
    existing = DidOrder.query.filter_by(request_id=request_id).first()
    if existing:
        if existing.status == ORDER_COMPLETED:
            logger.info("order %s replayed for request %s", existing.id, request_id)
            return existing, list(existing.numbers), True
        raise DuplicateRequest(request_id, existing.status)

    vendor = get_vendor(vendor_id)
    integration = did_gateway.integration_for(vendor, session=session)

    # fail fast before any vendor call; the debit below re-checks atomically
    balance = get_wallet_balance(account_id)
    if balance.amount < amount:
        raise InsufficientBalance(account_id, balance.amount, amount)

    numbers = dids or _pick_numbers(vendor, integration, did_qty, search_type, npa)

    order = DidOrder(
        id=gen_order_id(),
        request_id=request_id,
        account_id=account_id,
        vendor_id=vendor.id,
        quantity=did_qty,
        amount=amount,
        status=ORDER_DEBITED,
        created_by=str(created_by) if created_by is not None else None,
    )
    db.session.add(order)

    # the order row commits with the debit or not at all
    try:
        tx = debit_wallet(account_id, amount, {
            "descriptor": "DID Purchase",
            "created_by": created_by,
            "reference_type": "did_order",
            "reference_id": order.id,
        })
    except IntegrityError:
        raise DuplicateRequest(request_id, "pending")

    order.debit_transaction_id = tx.id
    db.session.commit()

    try:
        details = did_gateway.purchase(
            vendor, account_id, did_qty, amount, numbers, order,
            created_by=created_by, integration=integration,
        )
    except PurchaseFailedAfterDebit as failure:
        refunded = _compensate(order, failure, created_by)
        raise PurchaseFailedAfterDebit(order.id, failure.cause, refunded=refunded)

    return order, details, False

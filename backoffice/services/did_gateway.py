import logging
import time
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from backoffice.extensions import db
from backoffice.models.did_detail import DidDetail
from backoffice.models.did_order import ORDER_DEBITED, ORDER_COMPLETED
from backoffice.services.vendor_service import rate_for
from backoffice.utils.exceptions import (
    NotFound,
    PurchaseFailedAfterDebit,
    ServiceError,
    ValidationFailed,
    VendorDeclined,
    VendorUnavailable,
)
from backoffice.vendors.base import VendorSettings, build_integration
import backoffice.vendors.commio  # noqa: F401  registers the Commio integration

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def vendor_settings():
    return VendorSettings.from_config(current_app.config)


def integration_for(vendor, settings=None, session=None):
    """Raises UnsupportedVendor or VendorMisconfigured."""
    return build_integration(vendor, settings or vendor_settings(), session=session)


def call_with_retry(fn, settings, operation):
    """Run ``fn``, retrying VendorUnavailable with exponential backoff."""
    attempts = max(settings.max_retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except VendorUnavailable as e:
            if attempt == attempts:
                logger.error("%s gave up after %d attempts: %s", operation, attempts, e.message)
                raise
            delay = settings.retry_backoff * (2 ** (attempt - 1))
            logger.warning("%s attempt %d/%d failed (%s), retrying in %.2fs", operation, attempt, attempts, e.message, delay)
            time.sleep(delay)


def search(vendor, search_type, quantity, npa, integration=None):
    integration = integration or integration_for(vendor)
    candidates = call_with_retry(
        lambda: integration.search(search_type, quantity, npa),
        integration.settings,
        f"{vendor.vendor_name} search",
    )

    price = rate_for(vendor.id, "random")
    currency = current_app.config.get("DEFAULT_CURRENCY", "USD")
    for c in candidates:
        c["vendorId"] = vendor.id
        c["currency"] = currency
        c["price"] = float(price) if price is not None else None
    return candidates


def did_number(entry):
    if isinstance(entry, dict):
        return str(entry.get("did") or entry.get("id"))
    return str(entry)


def _number_and_info(entry):
    return did_number(entry), entry if isinstance(entry, dict) else {}


def purchase(vendor, account_id, quantity, rate, numbers, order, created_by=None, integration=None):
    """Buy ``numbers`` from ``vendor`` for an order whose wallet debit is already committed.

    ``numbers`` holds plain numbers or search candidates (dicts). On success one
    DidDetail per acquired number is written and the order is marked completed
    in the same commit. Any vendor failure is reported as PurchaseFailedAfterDebit
    so the caller can compensate the debit.
    """
    if order.status != ORDER_DEBITED:
        raise ValueError(f"order {order.id} is {order.status}, expected {ORDER_DEBITED}")

    integration = integration or integration_for(vendor)
    wanted = dict(_number_and_info(n) for n in numbers)
    if len(wanted) != quantity:
        raise PurchaseFailedAfterDebit(order.id, ValidationFailed(
            f"Expected {quantity} distinct numbers, got {len(wanted)}",
            {"dids": sorted(wanted)},
        ))

    try:
        result = call_with_retry(
            lambda: integration.purchase(list(wanted), order.request_id),
            integration.settings,
            f"{vendor.vendor_name} purchase",
        )
    except ServiceError as e:
        raise PurchaseFailedAfterDebit(order.id, e)

    if not result.numbers:
        raise PurchaseFailedAfterDebit(
            order.id, ServiceError("NO_NUMBERS_ACQUIRED", "Vendor completed the order without numbers")
        )
    if len(result.numbers) != quantity:
        acquired = [r["did"] for r in result.numbers]
        logger.error(
            "order %s: asked %s for %d numbers, got %d: %s",
            order.id, vendor.vendor_name, quantity, len(acquired), acquired,
        )
        raise PurchaseFailedAfterDebit(order.id, VendorDeclined(
            f"Vendor returned {len(acquired)} of {quantity} numbers",
            {"vendor_order_id": result.vendor_order_id, "acquired": acquired},
        ))

    unit_price = (Decimal(rate) / quantity).quantize(CENTS, rounding=ROUND_HALF_UP)
    currency = current_app.config.get("DEFAULT_CURRENCY", "USD")

    details = []
    for row in result.numbers:
        info = wanted.get(row["did"], {})
        details.append(DidDetail(
            account_id=str(account_id),
            did_vendor_id=vendor.id,
            order_id=order.id,
            vendor_order_id=result.vendor_order_id,
            did=row["did"],
            cnam=row.get("cnam", False),
            sms=row.get("sms", False),
            e911=row.get("e911", False),
            tollfree_prefix=info.get("tollfreePrefix"),
            npanxx=info.get("npanxx"),
            ratecenter=info.get("ratecenter"),
            tier=info.get("thinqTier"),
            currency=currency,
            price=unit_price,
            created_by=str(created_by) if created_by is not None else None,
        ))

    order.vendor_order_id = result.vendor_order_id
    order.status = ORDER_COMPLETED
    db.session.add_all(details)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        # numbers are bought and paid for but not recorded
        logger.exception(
            "order %s: vendor order %s completed but DID rows could not be saved: %s",
            order.id, result.vendor_order_id, [r["did"] for r in result.numbers],
        )
        raise

    logger.info("order %s completed: %d numbers from %s", order.id, len(details), vendor.vendor_name)
    return details


def disconnect(detail, integration=None):
    """Release a purchased number at its vendor, then drop its DidDetail row."""
    vendor = detail.vendor
    if vendor is None:
        raise NotFound("Vendor details not found.", "VENDOR_NOT_FOUND", {"did": detail.did})

    integration = integration or integration_for(vendor)
    call_with_retry(
        lambda: integration.disconnect([detail.did]),
        integration.settings,
        f"{vendor.vendor_name} disconnect",
    )

    did, account_id, vendor_name = detail.did, detail.account_id, vendor.vendor_name
    db.session.delete(detail)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("did %s disconnected at %s but its row could not be removed", did, vendor_name)
        raise

    logger.info("did %s disconnected from %s (account %s)", did, vendor_name, account_id)

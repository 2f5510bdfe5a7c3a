import logging

from backoffice.extensions import db
from backoffice.models.did_vendor import DidVendor
from backoffice.models.did_rate_chart import DidRateChart
from backoffice.models.did_order import DidOrder
from backoffice.utils.exceptions import VendorNotFound, NoActiveVendor, ServiceError

logger = logging.getLogger(__name__)


def active_vendors():
    return DidVendor.query.filter_by(status="active").order_by(DidVendor.id).all()


def get_vendor(vendor_id):
    vendor = db.session.get(DidVendor, vendor_id)
    if not vendor:
        raise VendorNotFound(vendor_id)
    return vendor


def resolve_active_vendor():
    vendors = active_vendors()
    if not vendors:
        raise NoActiveVendor()
    if len(vendors) > 1:
        logger.warning(
            "%d active DID vendors (%s); using %s",
            len(vendors), ", ".join(v.vendor_name for v in vendors), vendors[0].vendor_name,
        )
    return vendors[0]


def create_vendor(vendor_name, username, token):
    if DidVendor.query.filter_by(vendor_name=vendor_name).first():
        raise ServiceError(
            code="VALIDATION_ERROR",
            message="validation error",
            details={"vendor_name": ["The vendor name has already been taken."]},
            status=403,
        )

    vendor = DidVendor(vendor_name=vendor_name, username=username, token=token, status="inactive")
    db.session.add(vendor)
    db.session.commit()
    return vendor


def update_vendor(vendor, **changes):
    new_name = changes.get("vendor_name")
    if new_name and new_name != vendor.vendor_name:
        taken = DidVendor.query.filter(DidVendor.vendor_name == new_name, DidVendor.id != vendor.id).first()
        if taken:
            raise ServiceError(
                code="VALIDATION_ERROR",
                message="validation error",
                details={"vendor_name": ["The vendor name has already been taken."]},
                status=403,
            )

    # only one vendor may be active at a time
    if changes.get("status") == "active":
        DidVendor.query.filter(DidVendor.status == "active", DidVendor.id != vendor.id).update(
            {"status": "inactive"}, synchronize_session="fetch"
        )

    for k, v in changes.items():
        if hasattr(vendor, k):
            setattr(vendor, k, v)

    db.session.commit()
    logger.info("DID vendor %s updated: %s", vendor.id, sorted(k for k in changes if k != "token"))
    return vendor


def delete_vendor(vendor):
    if DidOrder.query.filter_by(vendor_id=vendor.id).first():
        raise ServiceError(
            code="VENDOR_IN_USE",
            message="Vendor has DID orders and cannot be deleted",
            details={"vendor_id": vendor.id},
            status=409,
        )
    db.session.delete(vendor)
    db.session.commit()


def rate_for(vendor_id, rate_type="random"):
    chart = DidRateChart.query.filter_by(vendor_id=vendor_id, rate_type=rate_type).first()
    return chart.rate if chart else None

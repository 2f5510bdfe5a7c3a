from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from backoffice.models.did_vendor import DidVendor
from backoffice.schemas.vendor_schema import VendorCreateSchema, VendorUpdateSchema
from backoffice.services.vendor_service import (
    create_vendor,
    delete_vendor,
    get_vendor,
    update_vendor,
)
from backoffice.utils.response_formatter import success_response

bp = Blueprint("did_vendors", __name__, url_prefix="/api/v1/did/vendors")


@bp.route("", methods=["GET"])
@jwt_required()
def list_vendors():
    vendors = DidVendor.query.order_by(DidVendor.id).all()
    return success_response(
        [v.to_dict(with_rates=True) for v in vendors],
        "Successfully fetched all DID Vendors",
    )


@bp.route("", methods=["POST"])
@jwt_required()
def store():
    data = VendorCreateSchema().load(request.get_json(silent=True) or {})
    vendor = create_vendor(data["vendor_name"], data["username"], data["token"])
    return success_response(vendor.to_dict(), "Successfully stored", status=201)


@bp.route("/<int:vendor_id>", methods=["GET"])
@jwt_required()
def show(vendor_id):
    return success_response(get_vendor(vendor_id).to_dict(with_rates=True), "Successfully fetched")


@bp.route("/<int:vendor_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update(vendor_id):
    vendor = get_vendor(vendor_id)
    data = VendorUpdateSchema().load(request.get_json(silent=True) or {})
    vendor = update_vendor(vendor, **data)
    return success_response(vendor.to_dict(), "Successfully updated vendor")


@bp.route("/<int:vendor_id>", methods=["DELETE"])
@jwt_required()
def destroy(vendor_id):
    delete_vendor(get_vendor(vendor_id))
    return success_response(message="Successfully deleted.")

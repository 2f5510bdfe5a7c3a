from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from backoffice.schemas.tfn_schema import TfnSearchSchema, TfnPurchaseSchema
from backoffice.services.tfn_service import search_tfn, purchase_tfn
from backoffice.services.vendor_service import active_vendors
from backoffice.utils.response_formatter import success_response, error_response

bp = Blueprint("tfn", __name__, url_prefix="/api/v1/tfn")

search_schema = TfnSearchSchema()
purchase_schema = TfnPurchaseSchema()


@bp.route("/active-vendor", methods=["GET", "POST"])
@jwt_required()
def get_active_vendor():
    vendors = active_vendors()
    if not vendors:
        return error_response("NO_ACTIVE_VENDOR", "No Available Active Vendor", status=404)
    return success_response([v.to_dict() for v in vendors])


@bp.route("/search", methods=["POST"])
@jwt_required()
def search():
    data = search_schema.load(request.get_json(silent=True) or {})

    candidates = search_tfn(data["searchType"], data["quantity"], data["npa"])
    if not candidates:
        return success_response([], "Data Not Available")

    return success_response(candidates, "Please Select Available TFN")


@bp.route("/purchase", methods=["POST"])
@jwt_required()
def purchase():
    data = purchase_schema.load(request.get_json(silent=True) or {})
    request_id = data["requestId"] or request.headers.get("Idempotency-Key")

    order, numbers, replayed = purchase_tfn(
        vendor_id=data["vendorId"],
        did_qty=data["didQty"],
        rate=data["rate"],
        account_id=data["accountId"],
        dids=data["dids"],
        request_id=request_id,
        search_type=data["searchType"],
        npa=data["npa"],
        created_by=get_jwt_identity(),
    )

    return success_response(
        {
            "order": order.to_dict(),
            "numbers": [n.to_dict() for n in numbers],
            "replayed": replayed,
        },
        "Order Completed",
    )

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from backoffice.extensions import db
from backoffice.models.billing_address import BillingAddress
from backoffice.schemas.billing_address_schema import BillingAddressSchema, SetDefaultAddressSchema
from backoffice.utils.exceptions import NotFound
from backoffice.utils.response_formatter import success_response

bp = Blueprint("billing_addresses", __name__, url_prefix="/api/v1/billing-address")

address_schema = BillingAddressSchema()


def _get_address(address_id):
    address = db.session.get(BillingAddress, address_id)
    if not address:
        raise NotFound("Billing address not found", "BILLING_ADDRESS_NOT_FOUND")
    return address


def _clear_defaults(account_id, keep_id=None):
    q = BillingAddress.query.filter(BillingAddress.account_id == account_id, BillingAddress.default.is_(True))
    if keep_id is not None:
        q = q.filter(BillingAddress.id != keep_id)
    q.update({"default": False}, synchronize_session="fetch")


@bp.route("", methods=["GET"])
@jwt_required()
def list_addresses():
    q = BillingAddress.query
    account_id = request.args.get("account_id")
    if account_id:
        q = q.filter(BillingAddress.account_id == account_id)
    addresses = q.order_by(BillingAddress.id).all()
    return success_response([a.to_dict() for a in addresses], "Successfully fetched all billing addresses")


@bp.route("", methods=["POST"])
@jwt_required()
def store():
    data = address_schema.load(request.get_json(silent=True) or {})
    if data["default"]:
        _clear_defaults(data["account_id"])

    address = BillingAddress(**data)
    db.session.add(address)
    db.session.commit()
    return success_response(address.to_dict(), "Successfully stored", status=201)


@bp.route("/<int:address_id>", methods=["GET"])
@jwt_required()
def show(address_id):
    return success_response(_get_address(address_id).to_dict(), "Successfully fetched")


@bp.route("/<int:address_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update(address_id):
    address = _get_address(address_id)
    data = address_schema.load(request.get_json(silent=True) or {}, partial=True)
    data.pop("account_id", None)

    if data.get("default"):
        _clear_defaults(address.account_id, keep_id=address.id)

    for k, v in data.items():
        setattr(address, k, v)
    db.session.commit()
    return success_response(address.to_dict(), "Successfully updated billing address")


@bp.route("/<int:address_id>", methods=["DELETE"])
@jwt_required()
def destroy(address_id):
    db.session.delete(_get_address(address_id))
    db.session.commit()
    return success_response(message="Successfully deleted.")


@bp.route("/set-default", methods=["POST"])
@jwt_required()
def set_default():
    data = SetDefaultAddressSchema().load(request.get_json(silent=True) or {})
    address = BillingAddress.query.filter_by(id=data["id"], account_id=data["account_id"]).first()
    if not address:
        raise NotFound("Billing address not found", "BILLING_ADDRESS_NOT_FOUND")

    _clear_defaults(address.account_id, keep_id=address.id)
    address.default = True
    db.session.commit()
    return success_response(address.to_dict(), "Default address updated")

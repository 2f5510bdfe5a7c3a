from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from backoffice.extensions import db
from backoffice.models.did_rate_chart import DidRateChart
from backoffice.schemas.vendor_schema import DidRateSchema
from backoffice.services.vendor_service import get_vendor
from backoffice.utils.exceptions import NotFound
from backoffice.utils.response_formatter import success_response

bp = Blueprint("did_rates", __name__, url_prefix="/api/v1/did/rates")


def _get_rate(rate_id):
    rate = db.session.get(DidRateChart, rate_id)
    if not rate:
        raise NotFound("Did rate not found", "RATE_NOT_FOUND")
    return rate


@bp.route("", methods=["GET"])
@jwt_required()
def list_rates():
    q = DidRateChart.query
    vendor_id = request.args.get("vendor_id", type=int)
    if vendor_id:
        q = q.filter_by(vendor_id=vendor_id)
    rates = q.order_by(DidRateChart.id).all()
    return success_response([r.to_dict() for r in rates], "Successfully fetched all DID rates")


@bp.route("", methods=["POST"])
@jwt_required()
def store():
    data = DidRateSchema().load(request.get_json(silent=True) or {})
    get_vendor(data["vendor_id"])

    rate = DidRateChart(**data)
    db.session.add(rate)
    db.session.commit()
    return success_response(rate.to_dict(), "Successfully stored", status=201)


@bp.route("/<int:rate_id>", methods=["GET"])
@jwt_required()
def show(rate_id):
    return success_response(_get_rate(rate_id).to_dict(), "Successfully fetched")


@bp.route("/<int:rate_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update(rate_id):
    rate = _get_rate(rate_id)
    data = DidRateSchema().load(request.get_json(silent=True) or {}, partial=True)
    if "vendor_id" in data:
        get_vendor(data["vendor_id"])

    for k, v in data.items():
        setattr(rate, k, v)
    db.session.commit()
    return success_response(rate.to_dict(), "Successfully updated did rate")


@bp.route("/<int:rate_id>", methods=["DELETE"])
@jwt_required()
def destroy(rate_id):
    db.session.delete(_get_rate(rate_id))
    db.session.commit()
    return success_response(message="Successfully deleted.")

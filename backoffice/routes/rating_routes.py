from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from backoffice.extensions import db
from backoffice.models.destination import Destination
from backoffice.models.destination_rate import DestinationRate
from backoffice.models.rate import Rate
from backoffice.schemas.rating_schema import DestinationSchema, DestinationRateSchema, RateSchema
from backoffice.utils.exceptions import NotFound, ServiceError
from backoffice.utils.response_formatter import success_response

bp = Blueprint("rating", __name__, url_prefix="/api/v1/rating")


def _get(model, object_id, message, code):
    obj = db.session.get(model, object_id)
    if not obj:
        raise NotFound(message, code)
    return obj


def _get_destination(destination_id):
    return _get(Destination, destination_id, "Destination not found", "DESTINATION_NOT_FOUND")


def _get_rate(rate_id):
    return _get(Rate, rate_id, "Rate not found", "RATE_NOT_FOUND")


def _get_destination_rate(destination_rate_id):
    return _get(DestinationRate, destination_rate_id, "Destination rate not found", "DESTINATION_RATE_NOT_FOUND")


def _ensure_unused(column, object_id, code, message):
    if DestinationRate.query.filter(column == object_id).first():
        raise ServiceError(code=code, message=message, details={"id": object_id}, status=409)


def _apply(obj, data):
    for k, v in data.items():
        setattr(obj, k, v)
    db.session.commit()
    return obj


# destinations

@bp.route("/destinations", methods=["GET"])
@jwt_required()
def list_destinations():
    q = Destination.query
    prefix = request.args.get("prefix")
    if prefix:
        q = q.filter(Destination.prefix.startswith(prefix))
    items = q.order_by(Destination.prefix).all()
    return success_response([d.to_dict() for d in items], "Successfully fetched all Destinations")


@bp.route("/destinations", methods=["POST"])
@jwt_required()
def store_destination():
    data = DestinationSchema().load(request.get_json(silent=True) or {})
    destination = Destination(**data)
    db.session.add(destination)
    db.session.commit()
    return success_response(destination.to_dict(), "Successfully stored", status=201)


@bp.route("/destinations/<int:destination_id>", methods=["GET"])
@jwt_required()
def show_destination(destination_id):
    return success_response(_get_destination(destination_id).to_dict(), "Successfully fetched")


@bp.route("/destinations/<int:destination_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update_destination(destination_id):
    destination = _get_destination(destination_id)
    data = DestinationSchema().load(request.get_json(silent=True) or {}, partial=True)
    return success_response(_apply(destination, data).to_dict(), "Successfully updated Destination")


@bp.route("/destinations/<int:destination_id>", methods=["DELETE"])
@jwt_required()
def destroy_destination(destination_id):
    destination = _get_destination(destination_id)
    _ensure_unused(DestinationRate.destination_id, destination.id, "DESTINATION_IN_USE",
                   "Destination is used by a destination rate")
    db.session.delete(destination)
    db.session.commit()
    return success_response(message="Successfully deleted.")


# rates

@bp.route("/rates", methods=["GET"])
@jwt_required()
def list_rates():
    items = Rate.query.order_by(Rate.id).all()
    return success_response([r.to_dict() for r in items], "Successfully fetched all Rates")


@bp.route("/rates", methods=["POST"])
@jwt_required()
def store_rate():
    data = RateSchema().load(request.get_json(silent=True) or {})
    rate = Rate(**data)
    db.session.add(rate)
    db.session.commit()
    return success_response(rate.to_dict(), "Successfully stored", status=201)


@bp.route("/rates/<int:rate_id>", methods=["GET"])
@jwt_required()
def show_rate(rate_id):
    return success_response(_get_rate(rate_id).to_dict(), "Successfully fetched")


@bp.route("/rates/<int:rate_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update_rate(rate_id):
    rate = _get_rate(rate_id)
    data = RateSchema().load(request.get_json(silent=True) or {}, partial=True)
    return success_response(_apply(rate, data).to_dict(), "Successfully updated Rate")


@bp.route("/rates/<int:rate_id>", methods=["DELETE"])
@jwt_required()
def destroy_rate(rate_id):
    rate = _get_rate(rate_id)
    _ensure_unused(DestinationRate.rate_id, rate.id, "RATE_IN_USE", "Rate is used by a destination rate")
    db.session.delete(rate)
    db.session.commit()
    return success_response(message="Successfully deleted.")


# destination rates

@bp.route("/destination-rates", methods=["GET"])
@jwt_required()
def list_destination_rates():
    q = DestinationRate.query
    destination_id = request.args.get("destination_id", type=int)
    if destination_id:
        q = q.filter_by(destination_id=destination_id)
    items = q.order_by(DestinationRate.id).all()
    return success_response([r.to_dict() for r in items], "Successfully fetched all destination rates")


@bp.route("/destination-rates", methods=["POST"])
@jwt_required()
def store_destination_rate():
    data = DestinationRateSchema().load(request.get_json(silent=True) or {})
    _get_destination(data["destination_id"])
    _get_rate(data["rate_id"])

    destination_rate = DestinationRate(**data)
    db.session.add(destination_rate)
    db.session.commit()
    return success_response(destination_rate.to_dict(), "Successfully stored", status=201)


@bp.route("/destination-rates/<int:destination_rate_id>", methods=["GET"])
@jwt_required()
def show_destination_rate(destination_rate_id):
    return success_response(_get_destination_rate(destination_rate_id).to_dict(), "Successfully fetched")


@bp.route("/destination-rates/<int:destination_rate_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update_destination_rate(destination_rate_id):
    destination_rate = _get_destination_rate(destination_rate_id)
    data = DestinationRateSchema().load(request.get_json(silent=True) or {}, partial=True)
    if "destination_id" in data:
        _get_destination(data["destination_id"])
    if "rate_id" in data:
        _get_rate(data["rate_id"])
    return success_response(_apply(destination_rate, data).to_dict(), "Successfully updated Destination Rate")


@bp.route("/destination-rates/<int:destination_rate_id>", methods=["DELETE"])
@jwt_required()
def destroy_destination_rate(destination_rate_id):
    db.session.delete(_get_destination_rate(destination_rate_id))
    db.session.commit()
    return success_response(message="Successfully deleted.")

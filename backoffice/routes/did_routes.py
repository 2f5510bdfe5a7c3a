from flask import Blueprint, request
from flask_jwt_extended import get_jwt, jwt_required

from backoffice.extensions import db
from backoffice.models.did_detail import DidDetail
from backoffice.models.did_order import DidOrder
from backoffice.services import did_gateway
from backoffice.utils.exceptions import Forbidden, NotFound
from backoffice.utils.pagination import paginate_query
from backoffice.utils.response_formatter import success_response

bp = Blueprint("dids", __name__, url_prefix="/api/v1/did")


@bp.route("/numbers", methods=["GET"])
@jwt_required()
def list_numbers():
    q = DidDetail.query
    account_id = request.args.get("account_id")
    if account_id:
        q = q.filter(DidDetail.account_id == account_id)

    items, pagination = paginate_query(
        q.order_by(DidDetail.created_at.desc(), DidDetail.did),
        request.args.get("page", type=int),
        request.args.get("limit", type=int),
    )
    return success_response({
        "numbers": [d.to_dict() for d in items],
        "pagination": pagination,
    }, "Successfully fetched all dids")


@bp.route("/numbers/<did_id>", methods=["GET"])
@jwt_required()
def show_number(did_id):
    detail = db.session.get(DidDetail, did_id)
    if not detail:
        raise NotFound("did details not found", "DID_NOT_FOUND")
    return success_response(detail.to_dict())


@bp.route("/numbers/<did_id>", methods=["DELETE"])
@jwt_required()
def disconnect_number(did_id):
    detail = db.session.get(DidDetail, did_id)
    if not detail:
        raise NotFound("did details not found", "DID_NOT_FOUND")

    # only the owning account may release its numbers
    account_id = get_jwt().get("account_id")
    if account_id is None or str(account_id) != detail.account_id:
        raise Forbidden(details={"did": detail.did})

    did_gateway.disconnect(detail)
    return success_response(message="DIDs successfully disconnected.")


@bp.route("/orders", methods=["GET"])
@jwt_required()
def list_orders():
    q = DidOrder.query
    account_id = request.args.get("account_id")
    status = request.args.get("status")
    if account_id:
        q = q.filter(DidOrder.account_id == account_id)
    if status:
        q = q.filter(DidOrder.status == status)

    items, pagination = paginate_query(
        q.order_by(DidOrder.created_at.desc(), DidOrder.id),
        request.args.get("page", type=int),
        request.args.get("limit", type=int),
    )
    return success_response({
        "orders": [o.to_dict() for o in items],
        "pagination": pagination,
    })


@bp.route("/orders/<order_id>", methods=["GET"])
@jwt_required()
def show_order(order_id):
    order = db.session.get(DidOrder, order_id)
    if not order:
        raise NotFound("DID order not found", "ORDER_NOT_FOUND")
    return success_response(order.to_dict(with_numbers=True))

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from backoffice.services.wallet_service import get_wallet_balance, list_transactions
from backoffice.utils.response_formatter import success_response

bp = Blueprint("wallet", __name__, url_prefix="/api/v1/wallet")


@bp.route("/<account_id>/balance", methods=["GET"])
@jwt_required()
def balance(account_id):
    return success_response(get_wallet_balance(account_id).to_dict())


@bp.route("/<account_id>/transactions", methods=["GET"])
@jwt_required()
def transactions(account_id):
    items, pagination = list_transactions(
        account_id,
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        transaction_type=request.args.get("type"),
    )
    return success_response({
        "transactions": [t.to_dict() for t in items],
        "pagination": pagination,
    })

"""POST /api/v1/tfn/purchase: debit, vendor order, compensation and replay."""
from decimal import Decimal

import requests

from backoffice.models.did_detail import DidDetail
from backoffice.models.did_order import DidOrder
from backoffice.models.did_vendor import DidVendor
from backoffice.models.wallet_transaction import WalletTransaction
from backoffice.services import tfn_service
from backoffice.utils.exceptions import AccountBalanceNotFound
from tests.fakes import FakeResponse

NUMBERS = ["8885550100", "8885550101"]


def purchase(client, headers, vendor_id, **overrides):
    body = {"vendorId": vendor_id, "didQty": 2, "rate": 20, "accountId": 7, "dids": NUMBERS}
    body.update(overrides)
    return client.post("/api/v1/tfn/purchase", json=body, headers=headers)


def test_insufficient_balance_leaves_wallet_at_50(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 50)

    resp = purchase(client, auth_headers, commio_vendor.id, rate=100)

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "INSUFFICIENT_BALANCE"
    assert balance_of(7) == Decimal("50.00")
    assert WalletTransaction.query.count() == 0
    assert DidOrder.query.count() == 0
    assert commio_api.calls == []


def test_successful_purchase(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert sorted(n["did"] for n in data["numbers"]) == NUMBERS
    assert data["order"]["status"] == "completed"
    assert data["order"]["vendor_order_id"] == "9001"
    assert data["replayed"] is False

    assert balance_of(7) == Decimal("80.00")
    tx = WalletTransaction.query.one()
    assert tx.transaction_type == "debit"
    assert tx.amount == Decimal("20.00")
    assert tx.created_by == "usr-1"
    assert tx.reference_id == data["order"]["id"]

    details = DidDetail.query.all()
    assert len(details) == 2
    assert {d.price for d in details} == {Decimal("10.00")}
    assert all(d.account_id == "7" and d.sms for d in details)
    assert commio_api.paths("POST")[0].endswith("/account/14642/origination/order/create")


def test_numbers_are_picked_from_search_when_not_given(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)

    resp = purchase(client, auth_headers, commio_vendor.id, dids=None, didQty=3, rate=30, npa=888)

    assert resp.status_code == 200
    numbers = resp.get_json()["data"]["numbers"]
    assert len(numbers) == 3
    assert all(n["npanxx"] == "888555" for n in numbers)
    assert balance_of(7) == Decimal("70.00")


def test_dids_must_match_quantity(client, auth_headers, commio_api, commio_vendor, fund):
    fund(7, 100)

    resp = purchase(client, auth_headers, commio_vendor.id, didQty=3)

    assert resp.status_code == 403
    assert "dids" in resp.get_json()["errors"]
    assert WalletTransaction.query.count() == 0


def test_missing_fields(client, auth_headers, commio_api):
    resp = client.post("/api/v1/tfn/purchase", json={"didQty": 1.5}, headers=auth_headers)

    assert resp.status_code == 403
    errors = resp.get_json()["errors"]
    assert {"vendorId", "didQty", "rate", "accountId"} <= set(errors)


def test_unknown_vendor_id(client, auth_headers, commio_api, fund):
    fund(7, 100)

    resp = purchase(client, auth_headers, 999)

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "VENDOR_NOT_FOUND"


def test_unknown_account(client, auth_headers, commio_api, commio_vendor):
    resp = purchase(client, auth_headers, commio_vendor.id, accountId="ghost")

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "ACCOUNT_BALANCE_NOT_FOUND"
    assert DidOrder.query.count() == 0


def test_unsupported_vendor_is_not_charged(client, auth_headers, commio_api, db, fund, balance_of):
    vendor = DidVendor(vendor_name="Bandwidth", username="u", token="t", status="active")
    db.session.add(vendor)
    db.session.commit()
    fund(7, 100)

    resp = purchase(client, auth_headers, vendor.id)

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "UNSUPPORTED_VENDOR"
    assert balance_of(7) == Decimal("100.00")


def test_vendor_failure_after_debit_is_refunded(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.complete_response = FakeResponse(payload={"status": "failed", "type": "origination_order"})

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 502
    body = resp.get_json()
    assert body["code"] == "PURCHASE_FAILED_AFTER_DEBIT"
    assert body["errors"]["refunded"] is True

    assert balance_of(7) == Decimal("100.00")
    kinds = sorted(t.transaction_type for t in WalletTransaction.query.all())
    assert kinds == ["credit", "debit"]
    order = DidOrder.query.one()
    assert order.status == "refunded"
    assert order.vendor_order_id == "9001"
    assert order.refund_transaction_id is not None
    assert DidDetail.query.count() == 0


def test_vendor_decline_on_create_is_refunded(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.create_response = FakeResponse(status_code=400, payload={"message": "DID not available"})

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 502
    assert "DID not available" in resp.get_json()["errors"]["vendor_message"]
    assert balance_of(7) == Decimal("100.00")


def test_transient_timeout_is_retried_without_reordering(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.complete_timeouts = 2

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 200
    create_calls = [p for p in commio_api.paths("POST") if p.endswith("/order/create")]
    assert len(create_calls) == 1
    assert balance_of(7) == Decimal("80.00")


def test_vendor_unavailable_after_all_retries_is_refunded(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.complete_timeouts = 10

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 502
    assert resp.get_json()["errors"]["cause"] == "VENDOR_UNAVAILABLE"
    assert balance_of(7) == Decimal("100.00")


def test_replayed_request_id_is_not_charged_twice(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)

    first = purchase(client, auth_headers, commio_vendor.id, requestId="req-1")
    second = purchase(client, auth_headers, commio_vendor.id, requestId="req-1")

    assert first.status_code == second.status_code == 200
    assert second.get_json()["data"]["replayed"] is True
    assert second.get_json()["data"]["order"]["id"] == first.get_json()["data"]["order"]["id"]
    assert len(second.get_json()["data"]["numbers"]) == 2
    assert balance_of(7) == Decimal("80.00")
    assert WalletTransaction.query.count() == 1


def test_idempotency_key_header(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    headers = {**auth_headers, "Idempotency-Key": "hdr-1"}

    purchase(client, headers, commio_vendor.id)
    purchase(client, headers, commio_vendor.id)

    assert balance_of(7) == Decimal("80.00")
    assert DidOrder.query.one().request_id == "hdr-1"


def test_refunded_request_id_cannot_be_reused(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.complete_response = FakeResponse(payload={"status": "failed"})
    purchase(client, auth_headers, commio_vendor.id, requestId="req-2")

    resp = purchase(client, auth_headers, commio_vendor.id, requestId="req-2")

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "DUPLICATE_REQUEST"
    assert balance_of(7) == Decimal("100.00")


def test_duplicate_dids_are_rejected_before_any_charge(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)

    resp = purchase(client, auth_headers, commio_vendor.id, dids=["8885550100", "8885550100"])

    assert resp.status_code == 403
    assert "dids" in resp.get_json()["errors"]
    assert balance_of(7) == Decimal("100.00")
    assert commio_api.calls == []


def test_short_vendor_delivery_is_refunded(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 100)
    commio_api.complete_response = FakeResponse(payload={
        "status": "completed",
        "type": "origination_order",
        "tns": [{"did": "8885550100", "features": {}}],
    })

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 502
    errors = resp.get_json()["errors"]
    assert errors["refunded"] is True
    assert errors["cause"] == "VENDOR_DECLINED"
    assert balance_of(7) == Decimal("100.00")
    assert DidDetail.query.count() == 0
    order = DidOrder.query.one()
    assert order.status == "refunded"
    assert order.vendor_order_id == "9001"


def test_underfunded_search_purchase_makes_no_vendor_call(client, auth_headers, commio_api, commio_vendor, fund, balance_of):
    fund(7, 50)

    resp = purchase(client, auth_headers, commio_vendor.id, dids=None, didQty=1, rate=100)

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "INSUFFICIENT_BALANCE"
    assert commio_api.calls == []
    assert balance_of(7) == Decimal("50.00")


def test_underfunded_purchase_during_vendor_outage(client, auth_headers, monkeypatch, commio_vendor, fund):
    def unreachable(session, method, url, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(requests.Session, "request", unreachable)
    fund(7, 50)

    resp = purchase(client, auth_headers, commio_vendor.id, dids=None, didQty=1, rate=100)

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "INSUFFICIENT_BALANCE"


def test_failed_refund_leaves_order_failed(client, auth_headers, commio_api, commio_vendor, fund, balance_of, monkeypatch, caplog):
    def broken_credit(account_id, amount, metadata=None):
        raise AccountBalanceNotFound(account_id)

    monkeypatch.setattr(tfn_service, "credit_wallet", broken_credit)
    commio_api.complete_response = FakeResponse(payload={"status": "failed"})
    fund(7, 100)

    resp = purchase(client, auth_headers, commio_vendor.id)

    assert resp.status_code == 502
    body = resp.get_json()
    assert body["code"] == "PURCHASE_FAILED_AFTER_DEBIT"
    assert body["errors"]["refunded"] is False

    order = DidOrder.query.one()
    assert order.status == "failed"
    assert order.refund_transaction_id is None
    assert order.error
    assert balance_of(7) == Decimal("80.00")
    assert WalletTransaction.query.filter_by(transaction_type="credit").count() == 0
    assert any(r.levelname == "CRITICAL" and order.id in r.getMessage() for r in caplog.records)

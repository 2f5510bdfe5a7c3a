from decimal import Decimal

import pytest
import requests
from flask_jwt_extended import create_access_token

from backoffice.main import create_app
from backoffice.extensions import db as _db
from backoffice.models.account_balance import AccountBalance
from backoffice.models.did_rate_chart import DidRateChart
from backoffice.models.did_vendor import DidVendor
from tests.fakes import FakeCommioAPI


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    token = create_access_token(identity="usr-1")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def account_headers(app):
    def _account_headers(account_id):
        token = create_access_token(identity="usr-1", additional_claims={"account_id": account_id})
        return {"Authorization": f"Bearer {token}"}
    return _account_headers


@pytest.fixture
def commio_api(monkeypatch):
    api = FakeCommioAPI()
    monkeypatch.setattr(
        requests.Session, "request",
        lambda session, method, url, **kwargs: api.handle(method, url, **kwargs),
    )
    return api


@pytest.fixture
def commio_vendor(db):
    vendor = DidVendor(vendor_name="Commio", username="natty", token="s3cret", status="active")
    db.session.add(vendor)
    db.session.add(DidRateChart(vendor=vendor, rate_type="random", rate=Decimal("5.50")))
    db.session.commit()
    return vendor


@pytest.fixture
def fund(db):
    def _fund(account_id, amount):
        balance = AccountBalance(account_id=str(account_id), amount=Decimal(str(amount)))
        db.session.add(balance)
        db.session.commit()
        return balance
    return _fund


@pytest.fixture
def balance_of(db):
    def _balance_of(account_id):
        db.session.expire_all()
        return AccountBalance.query.filter_by(account_id=str(account_id)).one().amount
    return _balance_of

"""Commio integration against a stub HTTP session."""
import pytest
import requests

from backoffice.models.did_vendor import DidVendor
from backoffice.utils.exceptions import (
    UnsupportedVendor,
    VendorDeclined,
    VendorMisconfigured,
    VendorUnavailable,
)
from backoffice.vendors.base import VendorSettings, build_integration, get_integration_class
from backoffice.vendors.commio import CommioIntegration
from tests.fakes import FakeCommioAPI, FakeResponse

pytestmark = pytest.mark.usefixtures("app")


class StubSession:
    def __init__(self, api=None, exc=None, response=None):
        self.api = api or FakeCommioAPI()
        self.exc = exc
        self.response = response

    def request(self, method, url, **kwargs):
        if self.exc is not None:
            raise self.exc
        if self.response is not None:
            return self.response
        return self.api.handle(method, url, **kwargs)


SETTINGS = VendorSettings(
    http_timeout=5,
    commio_base_url="https://api.example.test",
    commio_account_id="14642",
    commio_route_id="16486",
)


def make(session, settings=SETTINGS):
    vendor = DidVendor(id=1, vendor_name="Commio", username="natty", token="s3cret", status="active")
    return build_integration(vendor, settings, session=session)


def test_registry_lookup_is_case_insensitive():
    assert get_integration_class("commio") is CommioIntegration
    with pytest.raises(UnsupportedVendor):
        get_integration_class("Telnyx")
    with pytest.raises(VendorMisconfigured):
        get_integration_class("")


def test_missing_token_is_misconfigured():
    vendor = DidVendor(vendor_name="Commio", username="natty", token="", status="active")
    with pytest.raises(VendorMisconfigured):
        build_integration(vendor, SETTINGS)


def test_search_sends_timeout_auth_and_query():
    session = StubSession()
    candidates = make(session).search("tollfree", 2, 888)

    assert [c["id"] for c in candidates] == ["8885550100", "8885550101"]
    call = session.api.calls[0]
    assert call["url"] == "https://api.example.test/inbound/get-numbers"
    assert call["timeout"] == 5
    assert call["auth"] == ("natty", "s3cret")
    assert call["params"]["contiguous"] == "false"


@pytest.mark.parametrize("exc", [
    requests.exceptions.Timeout("slow"),
    requests.exceptions.ConnectionError("refused"),
])
def test_network_failures_are_unavailable(exc):
    with pytest.raises(VendorUnavailable):
        make(StubSession(exc=exc)).search("tollfree", 1, 888)


def test_gateway_errors_are_unavailable():
    with pytest.raises(VendorUnavailable):
        make(StubSession(response=FakeResponse(status_code=503, text="busy"))).search("tollfree", 1, 888)


def test_client_errors_are_declines():
    response = FakeResponse(status_code=401, payload={"message": "bad credentials"})
    with pytest.raises(VendorDeclined) as exc:
        make(StubSession(response=response)).search("tollfree", 1, 888)
    assert "bad credentials" in exc.value.message


def test_non_json_body_is_a_decline():
    with pytest.raises(VendorDeclined):
        make(StubSession(response=FakeResponse(text="<html>"))).search("tollfree", 1, 888)


def test_purchase_creates_completes_and_routes():
    session = StubSession()
    result = make(session).purchase(["8885550100"], "req-1")

    assert result.vendor_order_id == "9001"
    assert [n["did"] for n in result.numbers] == ["8885550100"]
    assert session.api.paths() == [
        "/account/14642/origination/order/create",
        "/account/14642/origination/order/complete/9001",
        "/account/14642/origination/did/routing/",
    ]
    routing = session.api.calls[-1]["json"]["routing"]
    assert routing == [{"did": "8885550100", "route_id": 16486}]


def test_routing_failure_does_not_fail_purchase():
    session = StubSession()
    session.api.routing_response = FakeResponse(status_code=400, payload={"message": "bad route"})

    result = make(session).purchase(["8885550100"], "req-1")

    assert len(result.numbers) == 1


def test_purchase_without_account_id_is_misconfigured():
    settings = VendorSettings(commio_account_id=None)
    with pytest.raises(VendorMisconfigured):
        make(StubSession(), settings).purchase(["8885550100"], "req-1")


def test_retried_purchase_reuses_created_order():
    session = StubSession()
    session.api.complete_timeouts = 1
    integration = make(session)

    with pytest.raises(VendorUnavailable):
        integration.purchase(["8885550100"], "req-1")
    result = integration.purchase(["8885550100"], "req-1")

    creates = [p for p in session.api.paths() if p.endswith("/order/create")]
    assert len(creates) == 1
    assert result.vendor_order_id == "9001"


def test_disconnect_posts_numbers():
    session = StubSession()

    released = make(session).disconnect(["8885550100"])

    assert released == ["8885550100"]
    call = session.api.calls[0]
    assert call["url"] == "https://api.example.test/account/14642/origination/disconnect"
    assert call["json"] == {"dids": ["8885550100"]}


def test_disconnect_without_success_flag_is_a_decline():
    session = StubSession(response=FakeResponse(payload={"code": 403, "message": "Access denied."}))

    with pytest.raises(VendorDeclined) as exc:
        make(session).disconnect(["8885550100"])
    assert exc.value.message == "Access denied."

import logging
import time

import requests

from backoffice.utils.exceptions import VendorDeclined, VendorMisconfigured, VendorUnavailable, ServiceError
from backoffice.vendors.base import VendorIntegration, PurchaseResult, register_integration

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {502, 503, 504}


def _error_message(response):
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error") or str(payload)
    return str(payload)


@register_integration
class CommioIntegration(VendorIntegration):
    """Commio (thinQ) origination API."""

    name = "Commio"

    def __init__(self, vendor, settings, session=None):
        super().__init__(vendor, settings, session=session)
        # request_id -> vendor order id, so a retried purchase completes
        # the order it already created instead of opening another one
        self._created_orders = {}

    @property
    def account_id(self):
        if not self.settings.commio_account_id:
            raise VendorMisconfigured(self.vendor.vendor_name, "Commio account id is not configured")
        return self.settings.commio_account_id

    def _request(self, method, path, operation, **kwargs):
        url = f"{self.settings.commio_base_url.rstrip('/')}{path}"
        started = time.monotonic()
        status_code = None
        try:
            response = self.session.request(
                method,
                url,
                auth=(self.vendor.username, self.vendor.token),
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                timeout=self.settings.http_timeout,
                **kwargs,
            )
            status_code = response.status_code
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise VendorUnavailable(f"{operation} request timed out", {"url": url})
        except requests.exceptions.ConnectionError:
            raise VendorUnavailable(f"{operation} connection error", {"url": url})
        except requests.exceptions.HTTPError as e:
            message = _error_message(e.response)
            details = {"http_status": e.response.status_code}
            if e.response.status_code in TRANSIENT_STATUS_CODES:
                raise VendorUnavailable(f"{operation} request failed: {message}", details)
            raise VendorDeclined(f"{operation} request failed: {message}", details)
        except requests.exceptions.RequestException as e:
            raise VendorDeclined(f"Unexpected {operation} request error: {e}")
        finally:
            logger.info(
                "commio %s %s status=%s elapsed=%.3fs",
                operation, method, status_code, time.monotonic() - started,
            )

        try:
            return response.json()
        except ValueError:
            raise VendorDeclined(f"{operation} response was not JSON", {"raw_response": response.text[:200]})

    def search(self, search_type, quantity, npa):
        payload = self._request(
            "GET",
            "/inbound/get-numbers",
            "Commio Search",
            params={
                "searchType": search_type,
                "searchBy": "",
                "quantity": quantity,
                "contiguous": "false",
                "npa": npa,
                "related": "true",
            },
        )

        if not isinstance(payload, dict) or "dids" not in payload:
            raise VendorDeclined("Commio Search returned no number list", {"response": payload})

        return [
            {
                "id": row.get("id"),
                "carrierName": row.get("carrierName"),
                "didSummary": row.get("didSummary"),
                "npanxx": row.get("npanxx"),
                "ratecenter": row.get("ratecenter"),
                "thinqTier": row.get("thinqTier"),
                "tollfreePrefix": row.get("tollfreePrefix"),
                "match": row.get("match"),
            }
            for row in payload["dids"] or []
        ]

    def _create_order(self, numbers):
        tns = [
            {
                "caller_id": None,
                "account_location_id": None,
                "sms_routing_profile_id": None,
                "route_id": None,
                "features": {"cnam": False, "sms": False, "e911": False},
                "did": did,
            }
            for did in numbers
        ]
        payload = self._request(
            "POST",
            f"/account/{self.account_id}/origination/order/create",
            "Commio Order Create",
            json={"order": {"tns": tns, "blocks": []}},
        )
        payload = payload if isinstance(payload, dict) else {}
        if payload.get("status") != "created" or not payload.get("id"):
            raise VendorDeclined(payload.get("message") or "Commio order was not created", {"response": payload})
        return str(payload["id"])

    def _complete_order(self, order_id):
        payload = self._request(
            "POST",
            f"/account/{self.account_id}/origination/order/complete/{order_id}",
            "Commio Order Complete",
        )
        payload = payload if isinstance(payload, dict) else {}
        if payload.get("status") != "completed" or payload.get("type") != "origination_order":
            raise VendorDeclined(
                f"Order Created But Completion Failed. Order Id {order_id}",
                {"vendor_order_id": order_id, "response": payload},
            )
        return payload.get("tns") or []

    def configure_routing(self, numbers):
        route_id = self.settings.commio_route_id
        if not route_id or not numbers:
            return
        try:
            self._request(
                "PUT",
                f"/account/{self.account_id}/origination/did/routing/",
                "Commio Routing",
                json={"routing": [{"did": did, "route_id": int(route_id)} for did in numbers]},
            )
        except ServiceError as e:
            # numbers are already bought; routing can be fixed afterwards
            logger.warning("commio routing failed for %s: %s", numbers, e.message)

    def purchase(self, numbers, request_id):
        order_id = self._created_orders.get(request_id)
        if order_id is None:
            order_id = self._create_order(numbers)
            self._created_orders[request_id] = order_id

        tns = self._complete_order(order_id)
        acquired = [
            {
                "did": str(tn.get("did")),
                "cnam": bool((tn.get("features") or {}).get("cnam")),
                "sms": bool((tn.get("features") or {}).get("sms")),
                "e911": bool((tn.get("features") or {}).get("e911")),
            }
            for tn in tns
        ]
        self.configure_routing([n["did"] for n in acquired])
        return PurchaseResult(vendor_order_id=order_id, numbers=acquired)

    def disconnect(self, numbers):
        payload = self._request(
            "POST",
            f"/account/{self.account_id}/origination/disconnect",
            "Commio Disconnect",
            json={"dids": list(numbers)},
        )
        payload = payload if isinstance(payload, dict) else {}
        if payload.get("success") is not True:
            raise VendorDeclined(payload.get("message") or "Failed to disconnect DIDs.", {"response": payload})
        return list(numbers)

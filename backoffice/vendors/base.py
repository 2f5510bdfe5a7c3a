"""Pluggable DID vendor integrations.

Each supported vendor subclasses ``VendorIntegration`` and registers itself
under the ``vendor_name`` stored on ``DidVendor`` rows. Callers look the
integration up with ``build_integration`` and never branch on vendor names.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Type

import requests

from backoffice.utils.exceptions import UnsupportedVendor, VendorMisconfigured


@dataclass(frozen=True)
class VendorSettings:
    http_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.5
    commio_base_url: str = "https://api.thinq.com"
    commio_account_id: Optional[str] = None
    commio_route_id: Optional[str] = None

    @classmethod
    def from_config(cls, config) -> "VendorSettings":
        return cls(
            http_timeout=float(config.get("VENDOR_HTTP_TIMEOUT", 30)),
            max_retries=int(config.get("VENDOR_MAX_RETRIES", 3)),
            retry_backoff=float(config.get("VENDOR_RETRY_BACKOFF", 0.5)),
            commio_base_url=config.get("COMMIO_BASE_URL", "https://api.thinq.com"),
            commio_account_id=config.get("COMMIO_ACCOUNT_ID"),
            commio_route_id=config.get("COMMIO_ROUTE_ID"),
        )


@dataclass
class PurchaseResult:
    vendor_order_id: str
    # one dict per acquired number: did, cnam, sms, e911
    numbers: List[dict] = field(default_factory=list)


class VendorIntegration(ABC):
    name: str = ""

    def __init__(self, vendor, settings: VendorSettings, session: Optional[requests.Session] = None):
        self.vendor = vendor
        self.settings = settings
        self.session = session or requests.Session()

    @abstractmethod
    def search(self, search_type: str, quantity: int, npa: int) -> List[dict]:
        """Return candidate numbers available for purchase."""

    @abstractmethod
    def purchase(self, numbers: List[str], request_id: str) -> PurchaseResult:
        """Buy ``numbers``. Calls repeated with the same ``request_id`` must not buy twice."""

    @abstractmethod
    def disconnect(self, numbers: List[str]) -> List[str]:
        """Release ``numbers`` back to the vendor and return the released ones."""


_REGISTRY: Dict[str, Type[VendorIntegration]] = {}


def register_integration(cls):
    _REGISTRY[cls.name.strip().lower()] = cls
    return cls


def unregister_integration(name):
    _REGISTRY.pop(name.strip().lower(), None)


def get_integration_class(vendor_name) -> Type[VendorIntegration]:
    if not vendor_name:
        raise VendorMisconfigured(vendor_name, "DID Vendor is Not Selected")

    cls = _REGISTRY.get(vendor_name.strip().lower())
    if cls is None:
        raise UnsupportedVendor(vendor_name)
    return cls


def build_integration(vendor, settings: VendorSettings, session=None) -> VendorIntegration:
    cls = get_integration_class(vendor.vendor_name)
    if not vendor.has_credentials:
        raise VendorMisconfigured(vendor.vendor_name)
    return cls(vendor, settings, session=session)

class ServiceError(Exception):
    status = 400

    def __init__(self, code="SERVICE_ERROR", message="Service error", details=None, status=None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status is not None:
            self.status = status
        super().__init__(message)


class ValidationFailed(ServiceError):
    status = 403

    def __init__(self, message="validation error", details=None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFound(ServiceError):
    status = 404

    def __init__(self, message="Resource not found", code="NOT_FOUND", details=None):
        super().__init__(code, message, details)


class AccountBalanceNotFound(NotFound):
    def __init__(self, account_id):
        super().__init__("Account Balance Not Found", "ACCOUNT_BALANCE_NOT_FOUND", {"account_id": account_id})


class VendorNotFound(NotFound):
    def __init__(self, vendor_id):
        super().__init__("Vendor not found", "VENDOR_NOT_FOUND", {"vendor_id": vendor_id})


class NoActiveVendor(NotFound):
    def __init__(self):
        super().__init__("No Available Active Vendor", "NO_ACTIVE_VENDOR")


class InsufficientBalance(ServiceError):
    status = 403

    def __init__(self, account_id, balance, amount):
        super().__init__(
            "INSUFFICIENT_BALANCE",
            "Low Wallet Balance",
            {"account_id": account_id, "balance": str(balance), "amount": str(amount)},
        )


class UnsupportedVendor(ServiceError):
    status = 404

    def __init__(self, vendor_name):
        super().__init__(
            "UNSUPPORTED_VENDOR",
            "Active Vendor is not Properly Configured",
            {"vendor_name": vendor_name},
        )


class VendorMisconfigured(ServiceError):
    status = 403

    def __init__(self, vendor_name, message="API Credentials are not Properly Configured"):
        super().__init__("VENDOR_MISCONFIGURED", message, {"vendor_name": vendor_name})


class VendorDeclined(ServiceError):
    """The vendor answered, but refused or failed the request."""
    status = 502

    def __init__(self, message, details=None):
        super().__init__("VENDOR_DECLINED", message, details)


class VendorUnavailable(ServiceError):
    """Timeout or connection failure talking to the vendor. Safe to retry."""
    status = 503

    def __init__(self, message, details=None):
        super().__init__("VENDOR_UNAVAILABLE", message, details)


class PurchaseFailedAfterDebit(ServiceError):
    status = 502

    def __init__(self, order_id, cause, refunded=False):
        self.cause = cause
        self.refunded = refunded
        super().__init__(
            "PURCHASE_FAILED_AFTER_DEBIT",
            f"DID purchase failed after wallet debit. Order Id {order_id}",
            {
                "order_id": order_id,
                "refunded": refunded,
                "cause": getattr(cause, "code", type(cause).__name__),
                "vendor_message": getattr(cause, "message", str(cause)),
            },
        )


class DuplicateRequest(ServiceError):
    status = 409

    def __init__(self, request_id, order_status):
        super().__init__(
            "DUPLICATE_REQUEST",
            "A purchase with this request id is already in progress",
            {"request_id": request_id, "order_status": order_status},
        )


class Forbidden(ServiceError):
    status = 403

    def __init__(self, message="You don't have permission to perform this action.", details=None):
        super().__init__("FORBIDDEN", message, details)

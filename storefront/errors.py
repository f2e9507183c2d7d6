"""Storefront error taxonomy"""
from enum import Enum
from typing import Optional


class StorefrontError(Exception):
    """Base class for errors surfaced to the shopper"""
    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Checkout form failed field validation"""
    status_code = 422
    kind = "validation"

    def __init__(self, errors: dict[str, str], message: str = "Please fix the validation errors before submitting."):
        super().__init__(message)
        self.errors = errors


class EmptyCartError(StorefrontError):
    """Checkout attempted with nothing in the cart"""
    status_code = 400
    kind = "empty_cart"

    def __init__(self, message: str = "Your cart is empty. Please add items before checkout."):
        super().__init__(message)


class RemoteOrderKind(str, Enum):
    """Order backend failure categories"""
    INVALID_INPUT = "invalid_input"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    GENERIC = "generic"


class RemoteOrderError(StorefrontError):
    """Order creation failed at the backend or in transit"""
    status_code = 502
    kind = "remote_order"

    def __init__(self, message: str, kind: RemoteOrderKind = RemoteOrderKind.GENERIC,
                 http_status: Optional[int] = None):
        super().__init__(message)
        self.error_kind = kind
        self.http_status = http_status


class NotificationError(StorefrontError):
    """Confirmation mail could not be sent (never fatal)"""
    status_code = 502
    kind = "notification"


class RetrievalErrorKind(str, Enum):
    """Order lookup failure categories"""
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    SERVER_ERROR = "server_error"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"


RETRIEVAL_MESSAGES = {
    RetrievalErrorKind.NOT_FOUND: "Order not found",
    RetrievalErrorKind.INVALID_INPUT: "Invalid order ID",
    RetrievalErrorKind.SERVER_ERROR: "Server error. Please try again later.",
    RetrievalErrorKind.UNREACHABLE: "Cannot reach server. Please check your connection.",
    RetrievalErrorKind.UNKNOWN: "Failed to fetch order",
}

RETRIEVAL_STATUS_CODES = {
    RetrievalErrorKind.NOT_FOUND: 404,
    RetrievalErrorKind.INVALID_INPUT: 400,
    RetrievalErrorKind.SERVER_ERROR: 502,
    RetrievalErrorKind.UNREACHABLE: 503,
    RetrievalErrorKind.UNKNOWN: 502,
}


class RetrievalError(StorefrontError):
    """Order lookup failed"""
    kind = "retrieval"

    def __init__(self, kind: RetrievalErrorKind, message: Optional[str] = None):
        super().__init__(message or RETRIEVAL_MESSAGES[kind])
        self.error_kind = kind
        self.status_code = RETRIEVAL_STATUS_CODES[kind]


class AuthError(StorefrontError):
    """Phone login or OTP verification failed"""
    status_code = 401
    kind = "auth"


class PaymentError(StorefrontError):
    """Payment hand-off could not be completed"""
    status_code = 402
    kind = "payment"

"""
x402 BCH Client SDK
"""

from x402_bch.clients.interceptor import (
    RETRY_MARKER,
    PaymentInterceptor,
    PaymentRequirementsSelector,
    parse_payment_required,
)
from x402_bch.clients.x402_http_client import X402BchHttpClient, with_payment_interceptor

__all__ = [
    "RETRY_MARKER",
    "PaymentInterceptor",
    "PaymentRequirementsSelector",
    "X402BchHttpClient",
    "parse_payment_required",
    "with_payment_interceptor",
]

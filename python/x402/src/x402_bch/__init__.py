"""
x402-bch - x402 payment client for Bitcoin Cash

Pays HTTP 402 challenges with BCH utxo payments.
"""

__version__ = "0.1.0"

from x402_bch.clients import PaymentInterceptor, X402BchHttpClient, with_payment_interceptor
from x402_bch.config import BchServerConfig, NetworkConfig
from x402_bch.exceptions import (
    ConfigurationError,
    FundingError,
    InsufficientBalance,
    InsufficientFunds,
    MalformedRequestConfig,
    NoMatchingRequirement,
    NoRequirementsOffered,
    PaymentError,
    SignatureCreationError,
    SignatureError,
    UnsupportedNetworkError,
    UtxoRetrievalError,
    ValidationError,
    X402Error,
)
from x402_bch.mechanisms.utxo import UtxoCache, create_payment_header, send_payment
from x402_bch.networks import is_supported_network, select_payment_requirements
from x402_bch.signers.client import BchClientSigner, ClientSigner, create_bch_signer, create_signer
from x402_bch.types import (
    Authorization,
    PaymentPayloadV1,
    PaymentPayloadV2,
    PaymentRequired,
    PaymentRequirements,
)

__all__ = [
    "__version__",
    # Client
    "PaymentInterceptor",
    "X402BchHttpClient",
    "with_payment_interceptor",
    # Config
    "BchServerConfig",
    "NetworkConfig",
    # Signers
    "ClientSigner",
    "BchClientSigner",
    "create_signer",
    "create_bch_signer",
    # Mechanism
    "UtxoCache",
    "create_payment_header",
    "send_payment",
    "is_supported_network",
    "select_payment_requirements",
    # Types
    "Authorization",
    "PaymentPayloadV1",
    "PaymentPayloadV2",
    "PaymentRequired",
    "PaymentRequirements",
    # Exceptions
    "X402Error",
    "SignatureError",
    "SignatureCreationError",
    "ValidationError",
    "ConfigurationError",
    "UnsupportedNetworkError",
    "PaymentError",
    "MalformedRequestConfig",
    "NoRequirementsOffered",
    "NoMatchingRequirement",
    "FundingError",
    "InsufficientBalance",
    "InsufficientFunds",
    "UtxoRetrievalError",
]

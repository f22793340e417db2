"""
BCH utxo payment mechanism
"""

from x402_bch.mechanisms.utxo.cache import UtxoCache, UtxoState
from x402_bch.mechanisms.utxo.funding import (
    DelegatedFundingStrategy,
    FundingResult,
    FundingStrategy,
    ManualFundingStrategy,
    create_funding_strategy,
    send_payment,
)
from x402_bch.mechanisms.utxo.header import (
    build_authorization,
    build_payment_payload,
    create_payment_header,
    serialize_payment_payload,
)

__all__ = [
    "UtxoCache",
    "UtxoState",
    "FundingResult",
    "FundingStrategy",
    "DelegatedFundingStrategy",
    "ManualFundingStrategy",
    "create_funding_strategy",
    "send_payment",
    "build_authorization",
    "build_payment_payload",
    "create_payment_header",
    "serialize_payment_payload",
]

"""
Utility modules
"""

from x402_bch.utils.bch_wallet import (
    BchRestApi,
    BchWallet,
    Receiver,
    Utxo,
    WalletClient,
    estimate_tx_fee,
    get_byte_count,
)
from x402_bch.utils.retry_queue import RetryQueue

__all__ = [
    "BchRestApi",
    "BchWallet",
    "Receiver",
    "Utxo",
    "WalletClient",
    "estimate_tx_fee",
    "get_byte_count",
    "RetryQueue",
]

"""
Client Signers
"""

from x402_bch.signers.client.base import ClientSigner
from x402_bch.signers.client.bch_signer import BchClientSigner, create_bch_signer, create_signer

__all__ = ["ClientSigner", "BchClientSigner", "create_signer", "create_bch_signer"]

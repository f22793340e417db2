"""
Signers
"""

from x402_bch.signers.client import BchClientSigner, ClientSigner, create_signer

__all__ = ["ClientSigner", "BchClientSigner", "create_signer"]

"""
BchClientSigner - Bitcoin Cash client signer implementation
"""

import base64
import logging
from typing import Optional

from x402_bch.exceptions import SignatureCreationError
from x402_bch.signers.client.base import ClientSigner

logger = logging.getLogger(__name__)

MESSAGE_MAGIC = b"\x18Bitcoin Signed Message:\n"


def message_digest(message: str) -> bytes:
    """Double SHA-256 of the prefixed message, as signed by BCH wallets"""
    from bitcash.crypto import double_sha256
    from bitcash.utils import int_to_varint

    data = message.encode("utf-8")
    return double_sha256(MESSAGE_MAGIC + int_to_varint(len(data)) + data)


class BchClientSigner(ClientSigner):
    """BCH client signer implementation using bitcash keys"""

    def __init__(self, private_key_wif: str, payment_amount_sats: Optional[int] = None) -> None:
        from bitcash import PrivateKey

        self._wif = private_key_wif
        self._key = PrivateKey(private_key_wif)
        self._address = self._key.address
        self._payment_amount_sats = payment_amount_sats
        logger.info(
            f"BchClientSigner initialized: address={self._address}, "
            f"payment_amount_sats={payment_amount_sats}"
        )

    @classmethod
    def from_wif(
        cls, private_key_wif: str, payment_amount_sats: Optional[int] = None
    ) -> "BchClientSigner":
        """Create signer from a WIF private key.

        Args:
            private_key_wif: Private key in Wallet Import Format
            payment_amount_sats: Default amount to fund per payment

        Returns:
            BchClientSigner instance
        """
        return cls(private_key_wif, payment_amount_sats)

    def get_address(self) -> str:
        return self._address

    @property
    def address(self) -> str:
        return self._address

    @property
    def wif(self) -> str:
        return self._wif

    @property
    def payment_amount_sats(self) -> Optional[int]:
        return self._payment_amount_sats

    async def sign_message(self, message: str) -> str:
        """Sign a message with the Bitcoin signed-message scheme.

        Returns the base64 65-byte compact recoverable signature.
        """
        try:
            from coincurve import PrivateKey as CurvePrivateKey

            digest = message_digest(message)
            recoverable = CurvePrivateKey(self._key.to_bytes()).sign_recoverable(
                digest, hasher=None
            )
            header = 27 + recoverable[64] + (4 if self._key.is_compressed() else 0)
            return base64.b64encode(bytes([header]) + recoverable[:64]).decode("ascii")
        except Exception as e:
            raise SignatureCreationError(f"Failed to sign message: {e}") from e


def create_signer(
    private_key_wif: str, payment_amount_sats: Optional[int] = None
) -> BchClientSigner:
    """Create a BCH signer from a WIF private key"""
    return BchClientSigner.from_wif(private_key_wif, payment_amount_sats)


create_bch_signer = create_signer

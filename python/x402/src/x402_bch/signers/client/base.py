"""
Client signer base interface
"""

from abc import ABC, abstractmethod
from typing import Optional


class ClientSigner(ABC):
    """
    Abstract base class for client signers.

    Bundles the key material a payment needs: the derived address, the WIF
    handed to wallet clients, the default amount to fund and message signing.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Get the signer's cash address"""
        pass

    @property
    @abstractmethod
    def wif(self) -> str:
        """Private key in Wallet Import Format"""
        pass

    @property
    @abstractmethod
    def payment_amount_sats(self) -> Optional[int]:
        """Default amount to fund per payment, in satoshis"""
        pass

    @abstractmethod
    async def sign_message(self, message: str) -> str:
        """
        Sign a text message.

        Args:
            message: Message text

        Returns:
            Base64 compact signature
        """
        pass

"""
Funding strategies for the BCH utxo scheme.

A funding produces a spendable reference (txid, vout, sats sent) that the
payment header points the server at. Two strategies exist:

- DelegatedFundingStrategy: the wallet selects coins and builds the
  transaction; its send is wrapped in a bounded RetryQueue.
- ManualFundingStrategy: first-fit UTXO selection with explicit fee and
  change arithmetic, signed and broadcast here.
"""

import functools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from x402_bch.config import BchServerConfig, NetworkConfig
from x402_bch.exceptions import InsufficientBalance, InsufficientFunds, UtxoRetrievalError
from x402_bch.networks import resolve_amount, to_sats
from x402_bch.signers.client.base import ClientSigner
from x402_bch.types import PaymentRequirements
from x402_bch.utils.bch_wallet import (
    BchWallet,
    Receiver,
    WalletClient,
    estimate_tx_fee,
    get_byte_count,
)
from x402_bch.utils.retry_queue import RetryQueue

logger = logging.getLogger(__name__)

INSUFFICIENT_BALANCE_MARKER = "Insufficient balance"

# The payment output is always built first
PAYMENT_VOUT = 0

WalletFactory = Callable[[str, BchServerConfig], WalletClient]


@dataclass(frozen=True)
class FundingResult:
    """Outcome of a funding: where the payment output lives and how much it holds"""

    txid: str
    vout: int
    sats_sent: int


def default_wallet_factory(wif: str, config: BchServerConfig) -> WalletClient:
    return BchWallet(
        wif,
        interface=config.api_type,
        rest_url=config.bch_server_url,
        bearer_token=config.bearer_token,
    )


def amount_to_send(signer: ClientSigner, requirements: PaymentRequirements) -> int:
    """Signer's default amount if set, otherwise the amount owed"""
    if signer.payment_amount_sats:
        return to_sats(signer.payment_amount_sats)
    return to_sats(resolve_amount(requirements))


async def send_with_retry(wallet: WalletClient, receivers: list[Receiver]) -> Optional[str]:
    """Wallet send for the retry queue.

    Returns None when the wallet reports an insufficient balance so the
    queue stops retrying; any other error is re-raised for the queue to retry.
    """
    try:
        return await wallet.send(receivers)
    except Exception as e:
        if INSUFFICIENT_BALANCE_MARKER in str(e):
            logger.warning(f"Wallet send refused: {e}")
            return None
        raise


class FundingStrategy(ABC):
    """Creates a new funded output for a payment"""

    def __init__(
        self,
        server_config: Optional[BchServerConfig] = None,
        wallet_factory: Optional[WalletFactory] = None,
    ) -> None:
        self._config = server_config or BchServerConfig()
        self._wallet_factory = wallet_factory or default_wallet_factory

    @property
    def server_config(self) -> BchServerConfig:
        return self._config

    @abstractmethod
    async def fund(self, signer: ClientSigner, requirements: PaymentRequirements) -> FundingResult:
        """
        Fund a payment for the given requirements.

        Args:
            signer: Payer's signer
            requirements: Selected payment requirements

        Returns:
            FundingResult for the new output
        """
        pass


class DelegatedFundingStrategy(FundingStrategy):
    """Funding through the wallet's own send, retried with backoff"""

    def __init__(
        self,
        server_config: Optional[BchServerConfig] = None,
        wallet_factory: Optional[WalletFactory] = None,
        retry_queue_factory: Callable[[], RetryQueue] = RetryQueue,
    ) -> None:
        super().__init__(server_config, wallet_factory)
        self._retry_queue_factory = retry_queue_factory

    async def fund(self, signer: ClientSigner, requirements: PaymentRequirements) -> FundingResult:
        amount = amount_to_send(signer, requirements)
        logger.info(f"Funding {amount} sats to {requirements.pay_to} via wallet send")

        wallet = self._wallet_factory(signer.wif, self._config)
        await wallet.initialize()

        retry_queue = self._retry_queue_factory()
        receivers = [Receiver(address=requirements.pay_to, amount_sat=amount)]
        txid = await retry_queue.add_to_queue(
            functools.partial(send_with_retry, wallet), receivers
        )
        if txid is None:
            logger.error("Wallet has insufficient balance for payment")
            raise InsufficientBalance()

        logger.info(f"Payment funded: txid={txid}")
        return FundingResult(txid=txid, vout=PAYMENT_VOUT, sats_sent=amount)


class ManualFundingStrategy(FundingStrategy):
    """Funding from a single first-fit UTXO with explicit fee and change"""

    def __init__(
        self,
        server_config: Optional[BchServerConfig] = None,
        wallet_factory: Optional[WalletFactory] = None,
        byte_counter: Callable[[int, int], int] = get_byte_count,
        fee_multiplier: float = NetworkConfig.FEE_MULTIPLIER,
    ) -> None:
        super().__init__(server_config, wallet_factory)
        self._byte_counter = byte_counter
        self._fee_multiplier = fee_multiplier

    async def fund(self, signer: ClientSigner, requirements: PaymentRequirements) -> FundingResult:
        amount = amount_to_send(signer, requirements)
        wallet = self._wallet_factory(signer.wif, self._config)
        address = wallet.address

        try:
            utxos = await wallet.get_utxos()
        except Exception as e:
            logger.error(f"Failed to fetch UTXOs for {address}: {e}")
            raise UtxoRetrievalError(str(e)) from e

        candidates = [u for u in utxos if u.value >= amount]
        if not candidates:
            logger.error(f"No UTXO of at least {amount} sats among {len(utxos)}")
            raise InsufficientFunds()
        utxo = candidates[0]

        fee = estimate_tx_fee(self._byte_counter(1, 2), self._fee_multiplier)
        remainder = utxo.value - amount - fee
        logger.debug(
            f"Selected UTXO {utxo.tx_hash}:{utxo.tx_pos} value={utxo.value}, "
            f"amount={amount}, fee={fee}, remainder={remainder}"
        )
        if remainder < 0:
            raise InsufficientFunds()

        outputs = [(requirements.pay_to, amount)]
        if remainder > 0:
            outputs.append((address, remainder))

        tx_hex = await wallet.build_transaction(utxo, outputs)
        txid = await wallet.broadcast(tx_hex)

        logger.info(f"Payment funded: txid={txid}, outputs={len(outputs)}")
        return FundingResult(txid=txid, vout=PAYMENT_VOUT, sats_sent=amount)


def create_funding_strategy(
    server_config: Optional[BchServerConfig] = None,
    wallet_factory: Optional[WalletFactory] = None,
) -> FundingStrategy:
    """Pick the funding strategy named by the config"""
    config = server_config or BchServerConfig()
    if config.resolve_funding_mode() == "manual":
        return ManualFundingStrategy(config, wallet_factory)
    return DelegatedFundingStrategy(config, wallet_factory)


async def send_payment(
    signer: ClientSigner,
    requirements: PaymentRequirements,
    server_config: Optional[BchServerConfig] = None,
) -> FundingResult:
    """Fund a payment with the strategy selected by *server_config*"""
    return await create_funding_strategy(server_config).fund(signer, requirements)

"""
BCH wallet and REST provider adapters.

BchRestApi talks to a bch-api compatible REST provider (UTXO lookup and raw
transaction broadcast). BchWallet binds a WIF key to that provider and
exposes both a coin-selecting ``send`` and the raw build/broadcast
primitives used for manual funding.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from x402_bch.config import NetworkConfig
from x402_bch.exceptions import ConfigurationError, InsufficientBalance

logger = logging.getLogger(__name__)

# P2PKH sizes in bytes
P2PKH_INPUT_SIZE = 148
P2PKH_OUTPUT_SIZE = 34
TX_OVERHEAD_SIZE = 10

# Fee rate used for wallet-side coin selection (sat/byte)
DEFAULT_FEE_RATE = 1


@dataclass(frozen=True)
class Receiver:
    """One payment output"""

    address: str
    amount_sat: int


@dataclass(frozen=True)
class Utxo:
    """Unspent output as reported by the provider"""

    tx_hash: str
    tx_pos: int
    value: int
    height: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Utxo":
        return cls(
            tx_hash=data["tx_hash"],
            tx_pos=int(data["tx_pos"]),
            value=int(data["value"]),
            height=int(data.get("height") or 0),
        )


def get_byte_count(n_inputs: int, n_outputs: int) -> int:
    """Size estimate of a P2PKH transaction"""
    return n_inputs * P2PKH_INPUT_SIZE + n_outputs * P2PKH_OUTPUT_SIZE + TX_OVERHEAD_SIZE


def estimate_tx_fee(byte_count: int, multiplier: float = NetworkConfig.FEE_MULTIPLIER) -> int:
    """Fee in satoshis for *byte_count* bytes, padded by *multiplier*"""
    return math.ceil(byte_count * multiplier)


class BchRestApi:
    """Minimal bch-api REST client"""

    def __init__(
        self,
        rest_url: str = NetworkConfig.DEFAULT_SERVER_URL,
        bearer_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._rest_url = rest_url if rest_url.endswith("/") else rest_url + "/"
        self._bearer_token = bearer_token
        self._timeout = timeout
        self._transport = transport

    @property
    def rest_url(self) -> str:
        return self._rest_url

    def _client(self) -> httpx.AsyncClient:
        headers = {}
        if self._bearer_token:
            headers["Authorization"] = f"Bearer {self._bearer_token}"
        return httpx.AsyncClient(
            base_url=self._rest_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def get_utxos(self, address: str) -> list[Utxo]:
        """Fetch unspent outputs for *address*"""
        async with self._client() as client:
            response = await client.get(f"electrumx/utxos/{address}")
            response.raise_for_status()
            body = response.json()

        if not body.get("success", True):
            raise RuntimeError(body.get("error") or "UTXO lookup failed")
        utxos = [Utxo.from_api(u) for u in body.get("utxos", [])]
        logger.debug(f"Fetched {len(utxos)} UTXOs for {address}")
        return utxos

    async def broadcast(self, tx_hex: str) -> str:
        """Broadcast a raw transaction and return its txid"""
        async with self._client() as client:
            response = await client.post(
                "rawtransactions/sendRawTransaction", json={"hexes": [tx_hex]}
            )
            response.raise_for_status()
            body = response.json()

        txid = body[0] if isinstance(body, list) else body
        logger.info(f"Broadcast transaction: txid={txid}")
        return txid


class WalletClient(Protocol):
    """Wallet operations the funding engine depends on"""

    @property
    def address(self) -> str: ...

    async def initialize(self) -> None: ...

    async def send(self, receivers: list[Receiver]) -> str: ...

    async def get_utxos(self) -> list[Utxo]: ...

    async def build_transaction(self, utxo: Utxo, outputs: list[tuple[str, int]]) -> str: ...

    async def broadcast(self, tx_hex: str) -> str: ...


class BchWallet:
    """Single-key BCH wallet backed by bitcash and a REST provider"""

    def __init__(
        self,
        wif: str,
        interface: str = NetworkConfig.DEFAULT_API_TYPE,
        rest_url: str = NetworkConfig.DEFAULT_SERVER_URL,
        bearer_token: Optional[str] = None,
        api: Optional[BchRestApi] = None,
    ) -> None:
        if interface != NetworkConfig.DEFAULT_API_TYPE:
            raise ConfigurationError(
                f"Unsupported wallet interface: {interface!r} (only 'rest-api' is available)"
            )

        from bitcash import PrivateKey

        self._key = PrivateKey(wif)
        self._interface = interface
        self._api = api or BchRestApi(rest_url, bearer_token)
        self._utxos: list[Utxo] = []
        self._initialized = False

    @property
    def address(self) -> str:
        return self._key.address

    @property
    def interface(self) -> str:
        return self._interface

    @property
    def balance(self) -> int:
        return sum(u.value for u in self._utxos)

    async def initialize(self) -> None:
        """Load the wallet's UTXO set"""
        self._utxos = await self._api.get_utxos(self.address)
        self._initialized = True
        logger.info(
            f"Wallet initialized: address={self.address}, utxos={len(self._utxos)}, "
            f"balance={self.balance}"
        )

    async def get_utxos(self) -> list[Utxo]:
        return await self._api.get_utxos(self.address)

    def _to_unspent(self, utxo: Utxo) -> Any:
        from bitcash.network.meta import Unspent

        return Unspent(utxo.value, 0, self._key.scriptcode.hex(), utxo.tx_hash, utxo.tx_pos)

    async def send(self, receivers: list[Receiver]) -> str:
        """Pay *receivers* from the loaded UTXO set, change back to this wallet"""
        from bitcash.exceptions import InsufficientFunds as BitcashInsufficientFunds

        if not self._initialized:
            await self.initialize()

        if not self._utxos:
            raise InsufficientBalance(f"Insufficient balance: no UTXOs for {self.address}")

        outputs = [(r.address, int(r.amount_sat), "satoshi") for r in receivers]
        unspents = [self._to_unspent(u) for u in self._utxos]
        try:
            tx_hex = await asyncio.to_thread(
                self._key.create_transaction,
                outputs,
                fee=DEFAULT_FEE_RATE,
                unspents=unspents,
            )
        except BitcashInsufficientFunds as e:
            raise InsufficientBalance(f"Insufficient balance: {e}")

        txid = await self._api.broadcast(tx_hex)
        # Spent inputs are gone; reload before the next send
        self._initialized = False
        return txid

    async def build_transaction(self, utxo: Utxo, outputs: list[tuple[str, int]]) -> str:
        """Sign a one-input P2PKH transaction spending *utxo* (SIGHASH_ALL | FORKID).

        Outputs are written in the given order with no leftover output added;
        the difference between input and outputs is the fee.
        """
        from bitcash.cashtoken import prepare_output
        from bitcash.transaction import create_p2pkh_transaction

        prepared = [
            prepare_output((address, int(amount), "satoshi")) for address, amount in outputs
        ]
        return await asyncio.to_thread(
            create_p2pkh_transaction, self._key, [self._to_unspent(utxo)], prepared
        )

    async def broadcast(self, tx_hex: str) -> str:
        return await self._api.broadcast(tx_hex)

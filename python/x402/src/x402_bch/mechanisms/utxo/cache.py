"""
UTXO reuse across sequential 402 challenges.

One funded output can pay several challenges while its leftover value
covers the amount owed. UtxoCache tracks that leftover for a session.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from x402_bch.mechanisms.utxo.funding import FundingResult
from x402_bch.networks import to_sats

logger = logging.getLogger(__name__)


@dataclass
class UtxoState:
    """Last funded output and the value still unclaimed on it"""

    txid: Optional[str] = None
    vout: Optional[int] = None
    sats_left: int = 0


class UtxoCache:
    """
    Caller-owned record of the last funding outcome.

    settle_or_reuse holds a lock across check, fund and update, so
    concurrent challenges sharing a cache are resolved one at a time.
    """

    def __init__(self) -> None:
        self._state = UtxoState()
        self._lock = asyncio.Lock()

    @property
    def txid(self) -> Optional[str]:
        return self._state.txid

    @property
    def vout(self) -> Optional[int]:
        return self._state.vout

    @property
    def sats_left(self) -> int:
        return self._state.sats_left

    def snapshot(self) -> UtxoState:
        return UtxoState(self._state.txid, self._state.vout, self._state.sats_left)

    def reset(self) -> None:
        """Forget any cached output"""
        self._state = UtxoState()

    def set(self, txid: Optional[str], vout: Optional[int], sats_left: int) -> None:
        self._state = UtxoState(txid, vout, sats_left)

    def can_cover(self, owed: int) -> bool:
        return self._state.txid is not None and self._state.sats_left >= owed

    async def settle_or_reuse(
        self,
        owed: Any,
        fund: Callable[[], Awaitable[FundingResult]],
    ) -> tuple[str, int]:
        """
        Reserve *owed* satoshis on the cached output, funding a new one if needed.

        Args:
            owed: Amount owed (int or numeric string)
            fund: Coroutine function producing a fresh FundingResult

        Returns:
            (txid, vout) to reference in the payment header
        """
        owed_sats = to_sats(owed)
        async with self._lock:
            if not self.can_cover(owed_sats):
                logger.info(
                    f"Cached UTXO cannot cover {owed_sats} sats "
                    f"(sats_left={self._state.sats_left}), funding new payment"
                )
                result = await fund()
                self._state = UtxoState(
                    txid=result.txid,
                    vout=result.vout,
                    sats_left=result.sats_sent - owed_sats,
                )
            else:
                logger.info(f"Reusing cached UTXO {self._state.txid}:{self._state.vout}")
                self._state.sats_left -= owed_sats

            logger.debug(f"UTXO cache after settlement: {self._state}")
            return self._state.txid, self._state.vout

"""
Network classification and requirement selection across x402 generations
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from x402_bch.config import NetworkConfig
from x402_bch.exceptions import NoMatchingRequirement, ValidationError
from x402_bch.types import Amount, PaymentRequirements

logger = logging.getLogger(__name__)


def is_supported_network(network: Optional[str]) -> bool:
    """Return True if *network* names Bitcoin Cash in either wire generation.

    Accepts the generation-1 literal, the CAIP-2 mainnet identifier, and any
    other identifier in the bip122 namespace.
    """
    if not network:
        return False
    if network in (NetworkConfig.BCH_LEGACY, NetworkConfig.BCH_MAINNET):
        return True
    # NOTE: family match, any bip122 chain passes
    return network.startswith(NetworkConfig.BIP122_PREFIX)


def select_payment_requirements(
    accepts: Optional[Iterable[PaymentRequirements]] = None,
) -> PaymentRequirements:
    """
    Select the first BCH utxo requirement, in server order.

    Args:
        accepts: Requirements offered by the server (None is treated as empty)

    Returns:
        First requirement on a supported network with the utxo scheme

    Raises:
        NoMatchingRequirement: No requirement qualifies
    """
    candidates = [
        req
        for req in (accepts or [])
        if is_supported_network(req.network) and req.scheme == NetworkConfig.SCHEME_UTXO
    ]
    logger.debug(f"BCH utxo candidates: {len(candidates)}")

    if not candidates:
        raise NoMatchingRequirement()

    selected = candidates[0]
    logger.info(
        "Selected payment requirement: network=%s, scheme=%s, amount=%s",
        selected.network,
        selected.scheme,
        resolve_amount(selected),
    )
    return selected


def resolve_amount(requirement: PaymentRequirements) -> Optional[Amount]:
    """Amount owed: `amount` first, then the generation-1 `minAmountRequired`.

    The value is returned as the server sent it (number or numeric string).
    """
    if requirement.amount is not None:
        return requirement.amount
    return requirement.min_amount_required


def to_sats(value: Any) -> int:
    """Coerce an amount to integer satoshis without float rounding"""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid satoshi amount: {value!r}")
    try:
        dec = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Invalid satoshi amount: {value!r}")
    if not dec.is_finite() or dec != dec.to_integral_value():
        raise ValidationError(f"Satoshi amount must be a whole number: {value!r}")
    return int(dec)


def resolve_x402_version(version: Optional[int]) -> int:
    """Negotiated protocol version, defaulting to generation 2"""
    return version if version else NetworkConfig.DEFAULT_X402_VERSION

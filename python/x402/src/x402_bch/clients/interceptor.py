"""
PaymentInterceptor - answers a 402 challenge and replays the request once
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
import pydantic

from x402_bch.config import BchServerConfig, NetworkConfig
from x402_bch.encoding import decode_payment_payload
from x402_bch.exceptions import MalformedRequestConfig, NoRequirementsOffered, ValidationError
from x402_bch.mechanisms.utxo.cache import UtxoCache
from x402_bch.mechanisms.utxo.funding import FundingStrategy, create_funding_strategy
from x402_bch.mechanisms.utxo.header import create_payment_header
from x402_bch.networks import resolve_amount, resolve_x402_version, select_payment_requirements
from x402_bch.signers.client.base import ClientSigner
from x402_bch.types import PaymentRequired, PaymentRequirements

logger = logging.getLogger(__name__)

# Request extension flag set on the paid replay
RETRY_MARKER = "x402_bch_is_402_retry"

PaymentRequirementsSelector = Callable[[list[PaymentRequirements]], PaymentRequirements]
Replay = Callable[[httpx.Request], Awaitable[httpx.Response]]


def _response_of(error: BaseException) -> Any:
    return getattr(error, "response", None)


def _request_of(error: BaseException) -> Any:
    try:
        return error.request  # type: ignore[attr-defined]
    except (AttributeError, RuntimeError):
        # httpx raises RuntimeError when an error has no request attached
        return None


def _to_payment_required(data: dict[str, Any], source: str) -> PaymentRequired:
    accepts = data.get("accepts")
    if accepts is not None and not isinstance(accepts, list):
        logger.warning(f"PaymentRequired {source} has non-list accepts: {type(accepts).__name__}")
        raise NoRequirementsOffered()
    try:
        return PaymentRequired(**data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid PaymentRequired in 402 {source}: {e}") from e


def parse_payment_required(response: httpx.Response) -> PaymentRequired:
    """
    Parse the challenge from a 402 response.

    The base64 PAYMENT-REQUIRED header wins; when it is absent or cannot be
    decoded the JSON body is used. An unreadable body parses as an empty
    challenge.

    Raises:
        NoRequirementsOffered: `accepts` is present but not a list
        ValidationError: The challenge does not match the PaymentRequired shape
    """
    header_value = response.headers.get(NetworkConfig.PAYMENT_REQUIRED_HEADER)
    if header_value:
        logger.debug(f"Found {NetworkConfig.PAYMENT_REQUIRED_HEADER} header, attempting to decode")
        try:
            data = decode_payment_payload(header_value)
        except ValueError as e:
            logger.warning(f"Failed to decode PaymentRequired from header: {e}")
        else:
            logger.info("Parsed PaymentRequired from header")
            return _to_payment_required(data, "header")

    try:
        body = response.json()
    except ValueError:
        logger.warning("402 response body is not JSON")
        body = {}
    if not isinstance(body, dict):
        body = {}
    logger.debug(f"Parsing PaymentRequired from body keys: {list(body.keys())}")
    return _to_payment_required(body, "body")


class PaymentInterceptor:
    """
    Error-path handler that pays for a 402 and replays the request once.

    A request replayed by the interceptor carries RETRY_MARKER in its
    extensions; a 402 on such a request is re-raised, never paid again.
    """

    def __init__(
        self,
        signer: ClientSigner,
        replay: Replay,
        selector: Optional[PaymentRequirementsSelector] = None,
        server_config: Optional[BchServerConfig] = None,
        utxo_cache: Optional[UtxoCache] = None,
        funding_strategy: Optional[FundingStrategy] = None,
    ) -> None:
        """
        Initialize interceptor.

        Args:
            signer: Payer's signer
            replay: Sends the paid request (usually the client's own send)
            selector: Custom payment requirements selector (optional)
            server_config: BCH REST provider settings (optional)
            utxo_cache: Cache shared across requests of this session (optional)
            funding_strategy: Overrides the strategy chosen from server_config
        """
        self._signer = signer
        self._replay = replay
        self._selector = selector or select_payment_requirements
        self._utxo_cache = utxo_cache if utxo_cache is not None else UtxoCache()
        self._funding = funding_strategy or create_funding_strategy(server_config)

    @property
    def utxo_cache(self) -> UtxoCache:
        return self._utxo_cache

    @property
    def funding_strategy(self) -> FundingStrategy:
        return self._funding

    async def handle_error(self, error: BaseException) -> httpx.Response:
        """
        Handle an error raised for a request.

        Returns:
            Response of the paid replay

        Raises:
            The original error when it is not a 402 or the request was already replayed;
            MalformedRequestConfig, NoRequirementsOffered, ValidationError,
            NoMatchingRequirement or a funding error when the payment cannot be made
        """
        response = _response_of(error)
        if response is None or response.status_code != 402:
            raise error

        request = _request_of(error)
        if request is None or getattr(request, "headers", None) is None:
            raise MalformedRequestConfig()

        if request.extensions.get(RETRY_MARKER):
            logger.warning(f"Paid request to {request.url} was refused again with 402")
            raise error

        logger.info(f"Received 402 Payment Required for {request.url}, processing payment...")
        try:
            paid_request = await self._prepare_paid_request(request, response)
        except Exception as e:
            logger.error(f"Failed to create payment: {e}", exc_info=True)
            raise

        logger.info("Retrying request with payment")
        return await self._replay(paid_request)

    async def _prepare_paid_request(
        self, request: httpx.Request, response: httpx.Response
    ) -> httpx.Request:
        payment_required = parse_payment_required(response)
        accepts = payment_required.accepts
        if not accepts:
            raise NoRequirementsOffered()
        logger.info(f"Parsed PaymentRequired with {len(accepts)} payment options")

        requirements = self._selector(accepts)
        owed = resolve_amount(requirements)

        txid, vout = await self._utxo_cache.settle_or_reuse(
            owed, functools.partial(self._funding.fund, self._signer, requirements)
        )

        x402_version = resolve_x402_version(payment_required.x402_version)
        payment_header = await create_payment_header(
            self._signer,
            requirements,
            x402_version,
            txid,
            vout,
            payment_required.resource,
            payment_required.extensions,
        )

        headers = httpx.Headers(request.headers)
        headers[NetworkConfig.payment_header_name(x402_version)] = payment_header
        headers[NetworkConfig.EXPOSE_HEADERS_HEADER] = NetworkConfig.payment_response_header_name(
            x402_version
        )

        content = await request.aread()
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=content,
            extensions={**request.extensions, RETRY_MARKER: True},
        )

"""
X402BchHttpClient - HTTP client adapter with automatic 402 payment handling
"""

import logging
from typing import Any, Optional, Union

import httpx

from x402_bch.clients.interceptor import PaymentInterceptor, PaymentRequirementsSelector
from x402_bch.config import BchServerConfig
from x402_bch.mechanisms.utxo.cache import UtxoCache
from x402_bch.mechanisms.utxo.funding import FundingStrategy
from x402_bch.signers.client.base import ClientSigner

logger = logging.getLogger(__name__)

ServerConfigLike = Union[BchServerConfig, dict[str, Any]]


def _to_server_config(config: Optional[ServerConfigLike]) -> Optional[BchServerConfig]:
    if config is None or isinstance(config, BchServerConfig):
        return config
    return BchServerConfig(**config)


class X402BchHttpClient:
    """
    HTTP client adapter with automatic 402 payment handling.

    Wraps httpx.AsyncClient; a 402 response is paid in BCH and the request
    is replayed once with the payment header. Other responses are returned
    as they are.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        signer: ClientSigner,
        selector: Optional[PaymentRequirementsSelector] = None,
        server_config: Optional[ServerConfigLike] = None,
        utxo_cache: Optional[UtxoCache] = None,
        funding_strategy: Optional[FundingStrategy] = None,
    ) -> None:
        """
        Initialize HTTP client adapter.

        Args:
            http_client: httpx.AsyncClient instance
            signer: BCH client signer
            selector: Custom payment requirements selector (optional)
            server_config: BchServerConfig or dict with apiType/bchServerURL (optional)
            utxo_cache: Cache to share between clients of one session (optional)
            funding_strategy: Overrides the strategy chosen from server_config
        """
        self._http_client = http_client
        self._interceptor = PaymentInterceptor(
            signer,
            replay=self.send,
            selector=selector,
            server_config=_to_server_config(server_config),
            utxo_cache=utxo_cache,
            funding_strategy=funding_strategy,
        )

    @property
    def interceptor(self) -> PaymentInterceptor:
        return self._interceptor

    @property
    def utxo_cache(self) -> UtxoCache:
        return self._interceptor.utxo_cache

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request, paying for it if the server answers 402"""
        logger.info(f"Making {request.method} request to {request.url}")
        response = await self._http_client.send(request)
        logger.info(f"Received response: status={response.status_code}")

        if response.status_code != 402:
            return response

        error = httpx.HTTPStatusError(
            f"Payment required for {request.url}", request=request, response=response
        )
        return await self._interceptor.handle_error(error)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Make HTTP request with automatic 402 payment handling.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional httpx request parameters

        Returns:
            httpx.Response
        """
        request = self._http_client.build_request(method, url, **kwargs)
        return await self.send(request)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET request with payment handling"""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """POST request with payment handling"""
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """PUT request with payment handling"""
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """DELETE request with payment handling"""
        return await self.request("DELETE", url, **kwargs)


def with_payment_interceptor(
    http_client: httpx.AsyncClient,
    signer: ClientSigner,
    selector_or_config: Union[PaymentRequirementsSelector, ServerConfigLike, None] = None,
    maybe_config: Optional[ServerConfigLike] = None,
) -> X402BchHttpClient:
    """
    Attach BCH payment handling to an httpx client.

    The third argument is either a requirements selector (then the server
    config may follow as the fourth) or the server config itself.
    """
    selector: Optional[PaymentRequirementsSelector] = None
    server_config: Optional[ServerConfigLike] = None

    if callable(selector_or_config):
        selector = selector_or_config
        server_config = maybe_config
    elif selector_or_config is not None:
        server_config = selector_or_config

    return X402BchHttpClient(
        http_client, signer, selector=selector, server_config=server_config
    )

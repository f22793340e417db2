"""
X402 BCH Network Configuration
Centralized configuration for network identifiers and BCH server settings
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

FundingMode = Literal["delegated", "manual"]


class NetworkConfig:
    """Network identifiers, scheme and header names for BCH payments"""

    # Generation-1 short network name
    BCH_LEGACY = "bch"
    # CAIP-2 identifier (bip122 namespace + genesis hash prefix)
    BCH_MAINNET = "bip122:000000000000000000651ef99cb9fcbe"
    BIP122_PREFIX = "bip122:"

    SCHEME_UTXO = "utxo"

    DEFAULT_X402_VERSION = 2

    # REST provider
    DEFAULT_API_TYPE = "rest-api"
    DEFAULT_SERVER_URL = "https://api.fullstack.cash/v5/"
    FULLSTACK_HOST = "bch.fullstack.cash"

    # Transaction fee heuristic
    FEE_MULTIPLIER = 1.2

    # Headers by protocol generation
    PAYMENT_REQUIRED_HEADER = "payment-required"
    PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
    PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"
    X_PAYMENT_HEADER = "X-PAYMENT"
    X_PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"
    EXPOSE_HEADERS_HEADER = "Access-Control-Expose-Headers"

    @classmethod
    def payment_header_name(cls, x402_version: int) -> str:
        """Request header carrying the signed payment for a protocol version"""
        return cls.X_PAYMENT_HEADER if x402_version == 1 else cls.PAYMENT_SIGNATURE_HEADER

    @classmethod
    def payment_response_header_name(cls, x402_version: int) -> str:
        """Response header the server settles into for a protocol version"""
        return (
            cls.X_PAYMENT_RESPONSE_HEADER if x402_version == 1 else cls.PAYMENT_RESPONSE_HEADER
        )

    @classmethod
    def default_network(cls, x402_version: int) -> str:
        """Network literal used when a requirement omits it"""
        return cls.BCH_LEGACY if x402_version == 1 else cls.BCH_MAINNET


class BchServerConfig(BaseModel):
    """BCH REST provider settings used by the funding engine"""

    api_type: str = Field(NetworkConfig.DEFAULT_API_TYPE, alias="apiType")
    bch_server_url: str = Field(NetworkConfig.DEFAULT_SERVER_URL, alias="bchServerURL")
    bearer_token: Optional[str] = Field(None, alias="bearerToken")
    funding_mode: Optional[FundingMode] = Field(None, alias="fundingMode")

    class Config:
        populate_by_name = True

    @classmethod
    def from_env(cls) -> "BchServerConfig":
        """Build config from BCH_* environment variables.

        Reads BCH_API_TYPE, BCH_SERVER_URL, BCH_BEARER_TOKEN and BCH_FUNDING_MODE.
        Unset variables fall back to the defaults.
        """
        values = {
            "api_type": os.getenv("BCH_API_TYPE"),
            "bch_server_url": os.getenv("BCH_SERVER_URL"),
            "bearer_token": os.getenv("BCH_BEARER_TOKEN"),
            "funding_mode": os.getenv("BCH_FUNDING_MODE"),
        }
        return cls(**{k: v for k, v in values.items() if v})

    def resolve_funding_mode(self) -> FundingMode:
        """Explicit funding_mode wins; otherwise a fullstack.cash URL selects manual mode"""
        if self.funding_mode is not None:
            return self.funding_mode
        if NetworkConfig.FULLSTACK_HOST in (self.bch_server_url or ""):
            return "manual"
        return "delegated"

"""
Pytest configuration and shared fixtures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from x402_bch.types import PaymentRequirements

BCH_MAINNET = "bip122:000000000000000000651ef99cb9fcbe"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_signer():
    """Signer stub with a fixed address and signature"""
    signer = MagicMock()
    signer.get_address.return_value = "bitcoincash:qptest"
    signer.wif = "test-wif"
    signer.payment_amount_sats = 2000
    signer.sign_message = AsyncMock(return_value="mock-signature")
    return signer


@pytest.fixture
def v2_requirements_data():
    return {
        "network": BCH_MAINNET,
        "scheme": "utxo",
        "payTo": "bitcoincash:qprecv",
        "amount": "1500",
        "asset": "0x0000000000000000000000000000000000000001",
        "maxTimeoutSeconds": 60,
        "extra": {},
    }


@pytest.fixture
def v2_requirements(v2_requirements_data):
    return PaymentRequirements(**v2_requirements_data)


@pytest.fixture
def v1_requirements():
    return PaymentRequirements(
        network="bch",
        scheme="utxo",
        payTo="bitcoincash:qprecv",
        minAmountRequired=1500,
    )


@pytest.fixture
def resource():
    return {
        "url": "http://localhost:4021/weather",
        "description": "Access to weather data",
        "mimeType": "application/json",
    }

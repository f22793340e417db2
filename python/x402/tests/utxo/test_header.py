"""
Tests for utxo payment header construction
"""

import json

import pytest

from x402_bch.mechanisms.utxo.header import (
    accepted_to_dict,
    build_payment_payload,
    create_payment_header,
    serialize_payment_payload,
)
from x402_bch.types import PaymentPayloadV1, PaymentPayloadV2, PaymentRequirements

BCH_MAINNET = "bip122:000000000000000000651ef99cb9fcbe"


@pytest.mark.anyio
async def test_v2_header_shape(mock_signer, v2_requirements, resource):
    """Generation 2 echoes the selected requirement and the resource"""
    header = await create_payment_header(
        mock_signer, v2_requirements, 2, txid="B", vout=0, resource=resource, extensions={}
    )
    data = json.loads(header)

    assert data["x402Version"] == 2
    assert data["resource"] == resource
    assert data["extensions"] == {}
    assert data["accepted"] == {
        "scheme": "utxo",
        "network": BCH_MAINNET,
        "amount": "1500",
        "asset": "0x0000000000000000000000000000000000000001",
        "payTo": "bitcoincash:qprecv",
        "maxTimeoutSeconds": 60,
        "extra": {},
    }
    assert data["payload"] == {
        "signature": "mock-signature",
        "authorization": {
            "from": "bitcoincash:qptest",
            "to": "bitcoincash:qprecv",
            "value": "1500",
            "txid": "B",
            "vout": 0,
            "amount": 2000,
        },
    }


@pytest.mark.anyio
async def test_v2_header_omits_missing_resource_and_extensions(mock_signer, v2_requirements):
    """Absent resource and extensions are left out of the header"""
    header = await create_payment_header(mock_signer, v2_requirements, 2, txid="B", vout=0)
    data = json.loads(header)
    assert "resource" not in data
    assert "extensions" not in data


@pytest.mark.anyio
async def test_v1_header_shape(mock_signer, v1_requirements):
    """Generation 1 carries scheme and network, with the legacy amount as value"""
    header = await create_payment_header(mock_signer, v1_requirements, 1, txid="A", vout=1)
    data = json.loads(header)

    assert data == {
        "x402Version": 1,
        "scheme": "utxo",
        "network": "bch",
        "payload": {
            "signature": "mock-signature",
            "authorization": {
                "from": "bitcoincash:qptest",
                "to": "bitcoincash:qprecv",
                "value": 1500,
                "txid": "A",
                "vout": 1,
                "amount": 2000,
            },
        },
    }


@pytest.mark.anyio
async def test_signed_message_is_compact_authorization(mock_signer, v2_requirements):
    """The signer receives the authorization as compact JSON"""
    await create_payment_header(mock_signer, v2_requirements, 2, txid="B", vout=0)
    mock_signer.sign_message.assert_awaited_once_with(
        '{"from":"bitcoincash:qptest","to":"bitcoincash:qprecv","value":"1500",'
        '"txid":"B","vout":0,"amount":2000}'
    )


@pytest.mark.anyio
async def test_amount_omitted_without_signer_default(mock_signer, v2_requirements):
    """No default amount on the signer means no amount in the authorization"""
    mock_signer.payment_amount_sats = None
    payload = await build_payment_payload(mock_signer, v2_requirements, 2, txid="B", vout=0)
    data = json.loads(serialize_payment_payload(payload))
    assert "amount" not in data["payload"]["authorization"]


@pytest.mark.anyio
async def test_payload_type_follows_version(mock_signer, v2_requirements):
    v1 = await build_payment_payload(mock_signer, v2_requirements, 1, txid="B", vout=0)
    v2 = await build_payment_payload(mock_signer, v2_requirements, 2, txid="B", vout=0)
    assert isinstance(v1, PaymentPayloadV1)
    assert isinstance(v2, PaymentPayloadV2)


def test_accepted_defaults_and_fallback_amount():
    """Missing scheme and network default; amount falls back to minAmountRequired"""
    requirements = PaymentRequirements(payTo="bitcoincash:qprecv", minAmountRequired=700)
    assert accepted_to_dict(requirements) == {
        "scheme": "utxo",
        "network": BCH_MAINNET,
        "amount": 700,
        "payTo": "bitcoincash:qprecv",
    }

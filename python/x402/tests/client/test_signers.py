import base64

import pytest

bitcash = pytest.importorskip("bitcash")
coincurve = pytest.importorskip("coincurve")

from x402_bch.signers.client import BchClientSigner, create_bch_signer, create_signer  # noqa: E402
from x402_bch.signers.client.bch_signer import message_digest  # noqa: E402


@pytest.fixture
def wif():
    return bitcash.PrivateKey().to_wif()


def test_signer_from_wif(wif):
    """Address and WIF come from the key"""
    signer = BchClientSigner.from_wif(wif, payment_amount_sats=2000)
    assert signer.get_address() == bitcash.PrivateKey(wif).address
    assert signer.get_address().startswith("bitcoincash:")
    assert signer.wif == wif
    assert signer.payment_amount_sats == 2000


def test_create_signer_alias(wif):
    assert create_bch_signer is create_signer
    assert create_signer(wif).payment_amount_sats is None


def test_message_digest_depends_on_message():
    assert message_digest("a") != message_digest("b")
    assert len(message_digest("")) == 32


@pytest.mark.anyio
async def test_signature_recovers_signer_key(wif):
    """Compact signature recovers to the signer's public key"""
    signer = BchClientSigner(wif)
    message = '{"from":"a","to":"b","value":"1500","txid":"B","vout":0}'

    signature = base64.b64decode(await signer.sign_message(message))

    assert len(signature) == 65
    header = signature[0]
    assert 31 <= header <= 34
    recoverable = signature[1:] + bytes([header - 27 - 4])
    public_key = coincurve.PublicKey.from_signature_and_message(
        recoverable, message_digest(message), hasher=None
    )
    assert public_key.format(compressed=True) == bitcash.PrivateKey(wif).public_key


@pytest.mark.anyio
async def test_signature_is_deterministic(wif):
    signer = BchClientSigner(wif)
    assert await signer.sign_message("hello") == await signer.sign_message("hello")


def test_invalid_wif():
    with pytest.raises(Exception):
        BchClientSigner("not-a-wif")


def test_message_digest_matches_signed_message_format():
    import hashlib

    data = b"\x18Bitcoin Signed Message:\n" + bytes([5]) + b"hello"
    expected = hashlib.sha256(hashlib.sha256(data).digest()).digest()
    assert message_digest("hello") == expected


@pytest.mark.anyio
async def test_signing_failure_keeps_cause(wif):
    from unittest.mock import MagicMock

    from x402_bch.exceptions import SignatureCreationError

    signer = BchClientSigner(wif)
    signer._key = MagicMock()
    signer._key.to_bytes.side_effect = RuntimeError("key unavailable")

    with pytest.raises(SignatureCreationError) as exc_info:
        await signer.sign_message("hello")
    assert isinstance(exc_info.value.__cause__, RuntimeError)

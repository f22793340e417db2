"""
Tests for the BCH REST provider adapter and wallet helpers
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from x402_bch.exceptions import InsufficientBalance
from x402_bch.utils.bch_wallet import (
    BchRestApi,
    Receiver,
    Utxo,
    estimate_tx_fee,
    get_byte_count,
)


def test_byte_count():
    assert get_byte_count(1, 2) == 226
    assert get_byte_count(2, 1) == 340


def test_fee_rounds_up():
    assert estimate_tx_fee(226) == 272
    assert estimate_tx_fee(250) == 300
    assert estimate_tx_fee(100, multiplier=1.0) == 100


def test_utxo_from_api():
    utxo = Utxo.from_api({"tx_hash": "abc", "tx_pos": "1", "value": 5000, "height": None})
    assert utxo == Utxo(tx_hash="abc", tx_pos=1, value=5000, height=0)


@pytest.mark.anyio
async def test_get_utxos():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={
                "success": True,
                "utxos": [{"tx_hash": "aa", "tx_pos": 0, "value": 1000, "height": 800000}],
            },
        )

    api = BchRestApi("https://api.example.com/v5", "secret", transport=httpx.MockTransport(handler))
    utxos = await api.get_utxos("qptest")

    assert utxos == [Utxo("aa", 0, 1000, 800000)]
    assert seen["url"] == "https://api.example.com/v5/electrumx/utxos/qptest"
    assert seen["auth"] == "Bearer secret"


@pytest.mark.anyio
async def test_get_utxos_provider_error():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error": "address invalid"})

    api = BchRestApi(transport=httpx.MockTransport(handler))
    with pytest.raises(RuntimeError, match="address invalid"):
        await api.get_utxos("qptest")


@pytest.mark.anyio
async def test_get_utxos_http_error():
    api = BchRestApi(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    with pytest.raises(httpx.HTTPStatusError):
        await api.get_utxos("qptest")


@pytest.mark.anyio
async def test_broadcast():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=["txid-1"])

    api = BchRestApi(transport=httpx.MockTransport(handler))
    assert await api.broadcast("deadbeef") == "txid-1"
    assert seen["path"] == "/v5/rawtransactions/sendRawTransaction"
    assert seen["body"] == {"hexes": ["deadbeef"]}
    assert seen["auth"] is None


@pytest.mark.anyio
async def test_wallet_send_without_utxos():
    """An empty wallet reports an insufficient balance before building"""
    bitcash = pytest.importorskip("bitcash")
    from x402_bch.utils.bch_wallet import BchWallet

    api = MagicMock()
    api.get_utxos = AsyncMock(return_value=[])
    api.broadcast = AsyncMock()
    key = bitcash.PrivateKey()
    wallet = BchWallet(key.to_wif(), api=api)

    with pytest.raises(InsufficientBalance, match="Insufficient balance"):
        await wallet.send([Receiver(address=key.address, amount_sat=1000)])
    api.get_utxos.assert_awaited_once_with(key.address)
    api.broadcast.assert_not_awaited()


def _decode_outputs(tx_hex):
    """(spent outpoints, [(amount, locking script)]) of a raw transaction"""
    from io import BytesIO

    from bitcash.utils import varint_to_int

    stream = BytesIO(bytes.fromhex(tx_hex))
    stream.read(4)
    outpoints = []
    for _ in range(varint_to_int(stream)):
        txid = stream.read(32)[::-1].hex()
        vout = int.from_bytes(stream.read(4), "little")
        outpoints.append((txid, vout))
        stream.read(varint_to_int(stream))
        stream.read(4)
    outputs = []
    for _ in range(varint_to_int(stream)):
        amount = int.from_bytes(stream.read(8), "little")
        outputs.append((amount, stream.read(varint_to_int(stream))))
    return outpoints, outputs


@pytest.fixture
def bitcash_keys():
    bitcash = pytest.importorskip("bitcash")
    return bitcash.PrivateKey(), bitcash.PrivateKey()


def _script(address):
    from bitcash.cashaddress import Address

    return Address.from_string(address).scriptcode


class TestBuildTransaction:
    @pytest.mark.anyio
    async def test_payment_and_change(self, bitcash_keys):
        from x402_bch.utils.bch_wallet import BchWallet

        payer, payee = bitcash_keys
        wallet = BchWallet(payer.to_wif(), api=MagicMock())
        utxo = Utxo("ab" * 32, 1, 5000)

        tx_hex = await wallet.build_transaction(
            utxo, [(payee.address, 2000), (payer.address, 2728)]
        )

        outpoints, outputs = _decode_outputs(tx_hex)
        assert outpoints == [("ab" * 32, 1)]
        assert outputs == [(2000, _script(payee.address)), (2728, _script(payer.address))]

    @pytest.mark.anyio
    async def test_payment_only(self, bitcash_keys):
        from x402_bch.utils.bch_wallet import BchWallet

        payer, payee = bitcash_keys
        wallet = BchWallet(payer.to_wif(), api=MagicMock())

        tx_hex = await wallet.build_transaction(Utxo("cd" * 32, 0, 2272), [(payee.address, 2000)])

        _, outputs = _decode_outputs(tx_hex)
        assert outputs == [(2000, _script(payee.address))]

    @pytest.mark.anyio
    async def test_manual_funding_broadcasts_built_transaction(self, bitcash_keys, v2_requirements):
        """Manual funding with a real wallet pays payTo first and returns change"""
        from x402_bch.mechanisms.utxo.funding import ManualFundingStrategy
        from x402_bch.utils.bch_wallet import BchWallet

        payer, payee = bitcash_keys
        api = MagicMock()
        api.get_utxos = AsyncMock(return_value=[Utxo("ef" * 32, 0, 5000)])
        api.broadcast = AsyncMock(return_value="txid-manual")
        signer = MagicMock()
        signer.wif = payer.to_wif()
        signer.payment_amount_sats = 2000
        requirements = v2_requirements.model_copy(update={"pay_to": payee.address})
        strategy = ManualFundingStrategy(wallet_factory=lambda wif, config: BchWallet(wif, api=api))

        result = await strategy.fund(signer, requirements)

        assert result.txid == "txid-manual"
        assert result.vout == 0
        _, outputs = _decode_outputs(api.broadcast.await_args.args[0])
        assert outputs == [(2000, _script(payee.address)), (2728, _script(payer.address))]


def test_wallet_rejects_unknown_interface():
    from x402_bch.exceptions import ConfigurationError
    from x402_bch.utils.bch_wallet import BchWallet

    with pytest.raises(ConfigurationError, match="Unsupported wallet interface"):
        BchWallet("unused-wif", interface="consumer-api")

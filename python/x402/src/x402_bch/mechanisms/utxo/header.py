"""
Payment header construction for the BCH utxo scheme.

Builds the signed authorization and serializes it into the generation-1
(X-PAYMENT) or generation-2 (PAYMENT-SIGNATURE) payload shape.
"""

import logging
from typing import Any, Optional

from x402_bch.config import NetworkConfig
from x402_bch.encoding import to_compact_json
from x402_bch.networks import resolve_amount
from x402_bch.signers.client.base import ClientSigner
from x402_bch.types import (
    Authorization,
    PaymentPayload,
    PaymentPayloadData,
    PaymentPayloadV1,
    PaymentPayloadV2,
    PaymentRequirements,
)

logger = logging.getLogger(__name__)


def build_authorization(
    signer: ClientSigner,
    requirements: PaymentRequirements,
    txid: Optional[str],
    vout: Optional[int],
) -> Authorization:
    """Authorization for one payment; `amount` is the signer's funded total, not the amount owed"""
    return Authorization(
        **{
            "from": signer.get_address(),
            "to": requirements.pay_to,
            "value": resolve_amount(requirements),
            "txid": txid,
            "vout": vout,
            "amount": signer.payment_amount_sats,
        }
    )


def authorization_to_dict(authorization: Authorization) -> dict[str, Any]:
    data = authorization.model_dump(by_alias=True)
    if data["amount"] is None:
        del data["amount"]
    return data


def accepted_to_dict(requirements: PaymentRequirements) -> dict[str, Any]:
    """Echo of the selected requirement for the generation-2 `accepted` field"""
    accepted = {
        "scheme": requirements.scheme or NetworkConfig.SCHEME_UTXO,
        "network": requirements.network or NetworkConfig.BCH_MAINNET,
        "amount": resolve_amount(requirements),
        "asset": requirements.asset,
        "payTo": requirements.pay_to,
        "maxTimeoutSeconds": requirements.max_timeout_seconds,
        "extra": requirements.extra,
    }
    return {k: v for k, v in accepted.items() if v is not None}


async def build_payment_payload(
    signer: ClientSigner,
    requirements: PaymentRequirements,
    x402_version: int,
    txid: Optional[str] = None,
    vout: Optional[int] = None,
    resource: Optional[dict[str, Any]] = None,
    extensions: Optional[dict[str, Any]] = None,
) -> PaymentPayload:
    """
    Sign an authorization and wrap it in the payload shape for *x402_version*.

    Args:
        signer: BCH client signer
        requirements: Selected payment requirements
        x402_version: 1 for the X-PAYMENT shape, anything else for generation 2
        txid: Funded transaction id
        vout: Funded output index
        resource: Resource description echoed in generation 2
        extensions: Extensions echoed in generation 2

    Returns:
        PaymentPayloadV1 or PaymentPayloadV2
    """
    authorization = build_authorization(signer, requirements, txid, vout)
    message = to_compact_json(authorization_to_dict(authorization))
    logger.debug(f"Signing authorization message: {message}")
    signature = await signer.sign_message(message)

    data = PaymentPayloadData(signature=signature, authorization=authorization)

    if x402_version == 1:
        return PaymentPayloadV1(
            x402Version=1,
            scheme=requirements.scheme or NetworkConfig.SCHEME_UTXO,
            network=requirements.network or NetworkConfig.BCH_LEGACY,
            payload=data,
        )

    return PaymentPayloadV2(
        x402Version=x402_version,
        resource=resource,
        accepted=accepted_to_dict(requirements),
        payload=data,
        extensions=extensions,
    )


def payment_payload_to_dict(payload: PaymentPayload) -> dict[str, Any]:
    body = {
        "signature": payload.payload.signature,
        "authorization": authorization_to_dict(payload.payload.authorization),
    }
    if isinstance(payload, PaymentPayloadV1):
        return {
            "x402Version": payload.x402_version,
            "scheme": payload.scheme,
            "network": payload.network,
            "payload": body,
        }
    if isinstance(payload, PaymentPayloadV2):
        data: dict[str, Any] = {"x402Version": payload.x402_version}
        if payload.resource is not None:
            data["resource"] = payload.resource
        data["accepted"] = payload.accepted
        data["payload"] = body
        if payload.extensions is not None:
            data["extensions"] = payload.extensions
        return data
    raise TypeError(f"Unknown payment payload type: {type(payload).__name__}")


def serialize_payment_payload(payload: PaymentPayload) -> str:
    """Serialize a payload to the JSON string sent as the payment header"""
    return to_compact_json(payment_payload_to_dict(payload))


async def create_payment_header(
    signer: ClientSigner,
    requirements: PaymentRequirements,
    x402_version: int = 1,
    txid: Optional[str] = None,
    vout: Optional[int] = None,
    resource: Optional[dict[str, Any]] = None,
    extensions: Optional[dict[str, Any]] = None,
) -> str:
    """Build and serialize the payment header value"""
    payload = await build_payment_payload(
        signer, requirements, x402_version, txid, vout, resource, extensions
    )
    logger.info(
        "Payment header created: x402Version=%s, txid=%s, vout=%s", x402_version, txid, vout
    )
    return serialize_payment_payload(payload)

"""
Encoding utilities for x402 BCH protocol
"""

import base64
import json
from typing import Any, TypeVar

T = TypeVar("T")


def encode_base64(data: str | bytes) -> str:
    """Encode data to base64"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("utf-8")


def decode_base64(data: str) -> str:
    """Decode base64 to string"""
    return base64.b64decode(data).decode("utf-8")


def to_compact_json(data: Any) -> str:
    """Serialize without whitespace, preserving key insertion order.

    Matches JavaScript's JSON.stringify output so signed messages hash the
    same on both ends.
    """
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def encode_payment_payload(payload: Any) -> str:
    """Encode payment payload to base64 for HTTP header"""
    if hasattr(payload, "model_dump"):
        json_str = to_compact_json(payload.model_dump(by_alias=True))
    else:
        json_str = to_compact_json(payload)
    return encode_base64(json_str)


def decode_payment_payload(encoded: str, model_class: type[T] | None = None) -> T | dict[str, Any]:
    """Decode payment payload from base64 HTTP header"""
    json_str = decode_base64(encoded)
    data = json.loads(json_str)
    if not isinstance(data, dict):
        raise ValueError("Decoded payment payload is not a JSON object")
    if model_class is not None:
        return model_class(**data)
    return data

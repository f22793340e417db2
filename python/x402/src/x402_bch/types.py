"""
Type definitions for x402 BCH protocol
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

# Amounts arrive as JSON numbers (generation 1) or numeric strings (generation 2)
Amount = Union[int, str]


class PaymentRequirements(BaseModel):
    """Payment requirements from server"""

    scheme: Optional[str] = None
    network: Optional[str] = None
    pay_to: Optional[str] = Field(None, alias="payTo")
    amount: Optional[Amount] = None
    min_amount_required: Optional[Amount] = Field(None, alias="minAmountRequired")
    asset: Optional[str] = None
    max_timeout_seconds: Optional[int] = Field(None, alias="maxTimeoutSeconds")
    extra: Optional[dict[str, Any]] = None
    # Generation-1 descriptive fields
    resource: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")

    class Config:
        populate_by_name = True
        frozen = True
        extra = "allow"


class PaymentRequired(BaseModel):
    """Payment required response (402)"""

    x402_version: Optional[int] = Field(None, alias="x402Version")
    error: Optional[str] = None
    resource: Optional[dict[str, Any]] = None
    accepts: Optional[list[PaymentRequirements]] = None
    extensions: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True


class Authorization(BaseModel):
    """Signed statement binding a funded UTXO to a payee"""

    from_address: str = Field(alias="from")
    to: Optional[str] = None
    value: Optional[Amount] = None
    txid: Optional[str] = None
    vout: Optional[int] = None
    amount: Optional[int] = None

    class Config:
        populate_by_name = True


class PaymentPayloadData(BaseModel):
    """Payment payload data"""

    signature: str
    authorization: Authorization


class PaymentPayloadV1(BaseModel):
    """Generation-1 X-PAYMENT payload"""

    x402_version: Literal[1] = Field(1, alias="x402Version")
    scheme: str
    network: str
    payload: PaymentPayloadData

    class Config:
        populate_by_name = True


class PaymentPayloadV2(BaseModel):
    """Generation-2 PAYMENT-SIGNATURE payload"""

    x402_version: int = Field(alias="x402Version")
    resource: Optional[dict[str, Any]] = None
    accepted: dict[str, Any]
    payload: PaymentPayloadData
    extensions: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True


PaymentPayload = Union[PaymentPayloadV1, PaymentPayloadV2]

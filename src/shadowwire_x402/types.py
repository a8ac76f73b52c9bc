"""
Type definitions for the x402 protocol with the ShadowWire scheme
"""

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from shadowwire_x402.config import X402Config

TransferMode = Literal["internal", "external"]


class PaymentRequirements(BaseModel):
    """One payment offer a server will accept"""

    scheme: str
    network: str
    amount: str
    asset: str
    pay_to: str = Field(alias="payTo")
    resource: str
    description: Optional[str] = None
    max_timeout_seconds: Optional[int] = Field(None, alias="maxTimeoutSeconds")
    extra: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True

    @field_validator("scheme", "network")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty identifier")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> str:
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not (v.isascii() and v.isdigit()) or int(v) <= 0:
            raise ValueError(f"Invalid payment amount: {v!r} is not a positive integer string")
        return v


class ResourceInfo(BaseModel):
    """Resource information"""

    url: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")

    class Config:
        populate_by_name = True


class PaymentRequired(BaseModel):
    """Payment required response (402 challenge document)"""

    x402_version: int = Field(X402Config.X402_VERSION, alias="x402Version")
    accepts: list[PaymentRequirements]
    error: Optional[str] = None
    facilitator: Optional[str] = None
    resource: Optional[ResourceInfo] = None
    verify_error: Optional[str] = Field(None, alias="verifyError")
    settle_error: Optional[str] = Field(None, alias="settleError")

    class Config:
        populate_by_name = True


class PaymentProofPayload(BaseModel):
    """Evidence of a completed transfer"""

    signature: str
    amount_hidden: bool = Field(False, alias="amountHidden")
    resource: Optional[str] = None
    pay_to: Optional[str] = Field(None, alias="payTo")
    sender: Optional[str] = None

    class Config:
        populate_by_name = True


class PaymentProof(BaseModel):
    """Payment proof carried in the X-Payment header"""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: PaymentProofPayload

    class Config:
        populate_by_name = True


class VerifyResponse(BaseModel):
    """Verification response from facilitator"""

    valid: bool = Field(False, validation_alias=AliasChoices("valid", "isValid"))
    payer: Optional[str] = None
    signature: Optional[str] = None
    amount_hidden: bool = Field(False, validation_alias=AliasChoices("amountHidden", "amount_hidden"))
    amount: Optional[Decimal] = None
    resource: Optional[str] = None
    error: Optional[str] = Field(None, validation_alias=AliasChoices("error", "invalidReason"))

    class Config:
        populate_by_name = True


class SettleResponse(BaseModel):
    """Settlement response from facilitator"""

    success: bool = False
    tx_hash: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("txHash", "transaction"),
        serialization_alias="txHash",
    )
    amount: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    net: Optional[Decimal] = None
    network: Optional[str] = None
    error: Optional[str] = None

    class Config:
        populate_by_name = True


class TransferRequest(BaseModel):
    """Arguments for the transfer backend; amount is in token units"""

    sender: str
    recipient: str
    amount: Decimal
    asset: str
    mode: TransferMode = "external"


class TransferResult(BaseModel):
    """Outcome of a transfer executed by the backend"""

    success: bool
    tx_signature: Optional[str] = None
    amount_sent: Optional[Decimal] = None
    amount_hidden: bool = False
    proof_pda: Optional[str] = None
    # Opaque range proof; passed through, never inspected
    range_proof: Optional[bytes] = None


class FeeEstimate(BaseModel):
    """Relayer fee estimate for a transfer"""

    fee: Decimal
    fee_percentage: Decimal
    net_amount: Decimal


class PaymentResult(BaseModel):
    """Result of paying a single requirement"""

    success: bool
    transfer: Optional[TransferResult] = None
    payment_header: Optional[str] = Field(None, alias="paymentHeader")
    error: Optional[str] = None

    class Config:
        populate_by_name = True


class PaymentMetadata(BaseModel):
    """Payment details attached to a successful paid request"""

    transfer: TransferResult
    requirement: PaymentRequirements
    settlement: Optional[SettleResponse] = None


class RequestResult(BaseModel):
    """Result of X402HttpClient.request"""

    success: bool
    data: Any = None
    payment: Optional[PaymentMetadata] = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class PaymentInfo(BaseModel):
    """Payment metadata the paywall attaches to an authorized request"""

    scheme: str
    network: str
    resource: str
    signature: str
    amount_hidden: bool = Field(False, alias="amountHidden")
    payer: Optional[str] = None
    sender: Optional[str] = None
    tx_hash: Optional[str] = Field(None, alias="txHash")
    amount: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    net: Optional[Decimal] = None

    class Config:
        populate_by_name = True


class DiscoveryResource(BaseModel):
    """One paid endpoint listed in the discovery document"""

    path: str
    method: str = "GET"
    price: float
    asset: str = X402Config.DEFAULT_ASSET
    description: Optional[str] = None
    schemes: list[str] = Field(default_factory=lambda: list(X402Config.SUPPORTED_SCHEMES))

"""
shadowwire-x402 - HTTP 402 payments over ShadowWire private transfers

Supports the paying client, the paywall server and the facilitator client.
"""

__version__ = "0.1.0"

from shadowwire_x402.config import X402Config
from shadowwire_x402.types import (
    PaymentRequirements,
    PaymentRequired,
    PaymentProof,
    PaymentProofPayload,
    VerifyResponse,
    SettleResponse,
    TransferRequest,
    TransferResult,
    FeeEstimate,
    PaymentResult,
    RequestResult,
    PaymentInfo,
)
from shadowwire_x402.exceptions import (
    X402Error,
    ValidationError,
    InvalidAmountError,
    PaymentHeaderTooLargeError,
    ConfigurationError,
    UnsupportedSchemeError,
    UnknownAssetError,
    TransportError,
    RequestTimeoutError,
    NetworkError,
    FacilitatorError,
    FacilitatorTimeoutError,
    TransferError,
)
from shadowwire_x402.encoding import (
    decode_payment_proof,
    encode_payment_proof,
    is_payment_required,
    parse_payment_required,
    payment_header_too_large,
)
from shadowwire_x402.tokens import TokenInfo, TokenRegistry, TokenUnitConverter
from shadowwire_x402.facilitator import FacilitatorClient, settle_payment, verify_payment
from shadowwire_x402.clients import X402Client, X402HttpClient
from shadowwire_x402.server import (
    PaywallConfig,
    PaywallRequest,
    PaywallResponse,
    X402Server,
    create_discovery_document,
)

__all__ = [
    "__version__",
    "X402Config",
    # Types
    "PaymentRequirements",
    "PaymentRequired",
    "PaymentProof",
    "PaymentProofPayload",
    "VerifyResponse",
    "SettleResponse",
    "TransferRequest",
    "TransferResult",
    "FeeEstimate",
    "PaymentResult",
    "RequestResult",
    "PaymentInfo",
    # Exceptions
    "X402Error",
    "ValidationError",
    "InvalidAmountError",
    "PaymentHeaderTooLargeError",
    "ConfigurationError",
    "UnsupportedSchemeError",
    "UnknownAssetError",
    "TransportError",
    "RequestTimeoutError",
    "NetworkError",
    "FacilitatorError",
    "FacilitatorTimeoutError",
    "TransferError",
    # Encoding
    "encode_payment_proof",
    "decode_payment_proof",
    "parse_payment_required",
    "is_payment_required",
    "payment_header_too_large",
    # Tokens
    "TokenInfo",
    "TokenRegistry",
    "TokenUnitConverter",
    # Facilitator
    "FacilitatorClient",
    "verify_payment",
    "settle_payment",
    # Client
    "X402Client",
    "X402HttpClient",
    # Server
    "X402Server",
    "PaywallConfig",
    "PaywallRequest",
    "PaywallResponse",
    "create_discovery_document",
]

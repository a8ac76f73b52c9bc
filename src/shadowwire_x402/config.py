"""
x402 protocol configuration
Centralized constants for the ShadowWire payment scheme
"""


class X402Config:
    """Protocol, header and timeout settings shared by client and server"""

    # Protocol
    X402_VERSION = 2
    SCHEME_SHADOWWIRE = "shadowwire"
    SOLANA_MAINNET = "solana:mainnet"

    SUPPORTED_SCHEMES: tuple[str, ...] = (SCHEME_SHADOWWIRE,)
    SUPPORTED_NETWORKS: tuple[str, ...] = (SOLANA_MAINNET,)

    # HTTP headers
    PAYMENT_HEADER = "X-Payment"
    PAYMENT_RESPONSE_HEADER = "X-Payment-Response"
    PAYMENT_SCHEMES_HEADER = "X-Payment-Schemes"
    AUTHENTICATE_HEADER = "WWW-Authenticate"
    AUTHENTICATE_CHALLENGE = "X402"
    API_KEY_HEADER = "X-API-Key"

    PAYMENT_REQUIRED_STATUS = 402

    # Largest accepted X-Payment header value, in bytes
    MAX_PAYMENT_HEADER_BYTES = 16_384

    # Timeouts (seconds)
    DEFAULT_REQUEST_TIMEOUT = 15.0
    DEFAULT_FACILITATOR_TIMEOUT = 15.0
    DEFAULT_TRANSFER_TIMEOUT = 15.0

    # Retry policy for the paid re-request
    DEFAULT_MAX_RETRIES = 1
    DEFAULT_BACKOFF_BASE = 0.1
    MAX_BACKOFF_TOTAL = 1.0

    # Offers
    DEFAULT_ASSET = "USDC"
    DEFAULT_MAX_TIMEOUT_SECONDS = 60
    DEFAULT_MIME_TYPE = "application/json"
    TRANSFER_TYPES: tuple[str, ...] = ("internal", "external")

    DEFAULT_FACILITATOR_URL = "https://x402.kamiyo.ai"

    @classmethod
    def is_supported_scheme(cls, scheme: str | None) -> bool:
        """Exact match against the schemes this implementation can pay or verify"""
        return scheme in cls.SUPPORTED_SCHEMES

"""
x402 custom exception hierarchy
"""


class X402Error(Exception):
    """x402 base exception"""

    pass


class ValidationError(X402Error):
    """Validation-related error"""

    pass


class InvalidAmountError(ValidationError):
    """Payment amount is not a positive integer"""

    def __init__(self, message: str = "Invalid payment amount"):
        super().__init__(message)


class PaymentHeaderTooLargeError(ValidationError):
    """Payment header exceeds the size limit"""

    def __init__(self, size: int | None = None):
        self.size = size
        if size is not None:
            super().__init__(f"Payment header exceeds size limit ({size} bytes)")
        else:
            super().__init__("Payment header exceeds size limit")


class ConfigurationError(X402Error):
    """Configuration-related error"""

    pass


class UnsupportedSchemeError(ConfigurationError):
    """Payment scheme not supported by this implementation"""

    def __init__(self, scheme: str | None):
        self.scheme = scheme
        super().__init__(f"Unsupported x402 payment scheme: {scheme}")


class UnknownAssetError(ConfigurationError):
    """Asset is not known to the unit converter"""

    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(f"Unknown asset: {asset}")


class TransportError(X402Error):
    """Outbound call failed before a usable response arrived"""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """Outbound call exceeded its timeout"""

    def __init__(self, operation: str, timeout: float):
        self.timeout = timeout
        super().__init__(operation, f"Request timed out after {timeout:g}s ({operation})")


class NetworkError(TransportError):
    """Connection-level failure"""

    def __init__(self, operation: str, reason: str):
        super().__init__(operation, f"Network error during {operation}: {reason}")


class FacilitatorError(X402Error):
    """Facilitator request failed"""

    def __init__(self, message: str = "Facilitator request failed"):
        super().__init__(message)


class FacilitatorTimeoutError(FacilitatorError):
    """Facilitator did not answer in time"""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Facilitator {operation} request timed out after {timeout:g}s")


class TransferError(X402Error):
    """Transfer execution failed"""

    def __init__(self, message: str = "Transfer execution failed"):
        super().__init__(message)

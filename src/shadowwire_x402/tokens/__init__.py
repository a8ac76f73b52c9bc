"""
Token registry and unit conversion
"""

from shadowwire_x402.tokens.registry import (
    NATIVE_MINT,
    TokenInfo,
    TokenRegistry,
    TokenUnitConverter,
)

__all__ = ["NATIVE_MINT", "TokenInfo", "TokenRegistry", "TokenUnitConverter"]

"""
FastAPI middleware for x402 payment handling
"""

from shadowwire_x402.fastapi.middleware import X402Middleware, x402_protected

__all__ = ["X402Middleware", "x402_protected"]

"""
x402 clients
"""

from shadowwire_x402.clients.x402_client import TransferBackend, UnitConverter, X402Client
from shadowwire_x402.clients.x402_http_client import X402HttpClient

__all__ = ["X402Client", "X402HttpClient", "TransferBackend", "UnitConverter"]

"""
x402 paywall gate
"""

from shadowwire_x402.server.discovery import DISCOVERY_PATH, create_discovery_document
from shadowwire_x402.server.x402_server import (
    CONTEXT_KEY,
    PaywallConfig,
    PaywallDecision,
    PaywallRequest,
    PaywallResponse,
    X402Server,
    rejection_headers,
)

__all__ = [
    "X402Server",
    "PaywallConfig",
    "PaywallRequest",
    "PaywallResponse",
    "PaywallDecision",
    "CONTEXT_KEY",
    "rejection_headers",
    "create_discovery_document",
    "DISCOVERY_PATH",
]

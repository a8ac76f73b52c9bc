"""
Static .well-known/x402 discovery document
"""

from collections.abc import Iterable
from typing import Any

from shadowwire_x402.config import X402Config
from shadowwire_x402.types import DiscoveryResource

DISCOVERY_VERSION = "2.0"
DISCOVERY_PATH = "/.well-known/x402"


def create_discovery_document(
    name: str,
    pay_to: str,
    resources: Iterable[DiscoveryResource | dict[str, Any]],
    description: str | None = None,
    facilitator_url: str | None = None,
) -> dict[str, Any]:
    """
    Build the discovery document served at /.well-known/x402.

    Args:
        name: Service name
        pay_to: Merchant wallet
        resources: Paid endpoints (DiscoveryResource or equivalent dicts)
        description: Optional service description
        facilitator_url: Optional facilitator URL

    Returns:
        JSON-serializable document
    """
    entries = [
        r if isinstance(r, DiscoveryResource) else DiscoveryResource.model_validate(r)
        for r in resources
    ]
    return {
        "version": DISCOVERY_VERSION,
        "name": name,
        "description": description,
        "payTo": pay_to,
        "schemes": list(X402Config.SUPPORTED_SCHEMES),
        "networks": list(X402Config.SUPPORTED_NETWORKS),
        "facilitator": facilitator_url,
        "resources": [entry.model_dump(mode="json") for entry in entries],
        "capabilities": {
            "privatePayments": True,
            "amountHiding": True,
            "bulletproofs": True,
        },
    }

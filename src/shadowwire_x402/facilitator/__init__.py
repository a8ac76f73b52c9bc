"""
Facilitator client
"""

from shadowwire_x402.facilitator.facilitator_client import (
    FacilitatorClient,
    settle_payment,
    verify_payment,
)

__all__ = ["FacilitatorClient", "verify_payment", "settle_payment"]

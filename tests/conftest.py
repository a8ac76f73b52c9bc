"""
Pytest configuration and shared fixtures
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from shadowwire_x402.tokens import TokenUnitConverter
from shadowwire_x402.types import FeeEstimate, PaymentRequirements, TransferResult


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def converter():
    return TokenUnitConverter()


@pytest.fixture
def usdc_requirement():
    """0.01 USDC offer for /api/premium"""
    return PaymentRequirements(
        scheme="shadowwire",
        network="solana:mainnet",
        amount="10000",
        asset="USDC",
        payTo="merchant",
        resource="/api/premium",
        maxTimeoutSeconds=60,
    )


@pytest.fixture
def transfer_backend():
    """Transfer backend whose transfers succeed with signature sig123"""
    backend = MagicMock()
    backend.transfer = AsyncMock(
        return_value=TransferResult(
            success=True,
            tx_signature="sig123",
            amount_sent=Decimal("0.01"),
            amount_hidden=True,
            proof_pda="pda1",
        )
    )
    backend.get_balance = AsyncMock(return_value={"available": 5})
    backend.estimate_fee = MagicMock(
        return_value=FeeEstimate(
            fee=Decimal("0.0001"),
            fee_percentage=Decimal("1"),
            net_amount=Decimal("0.0099"),
        )
    )
    return backend

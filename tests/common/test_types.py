from decimal import Decimal

import pytest
from pydantic import ValidationError

from shadowwire_x402.types import (
    PaymentRequired,
    PaymentRequirements,
    SettleResponse,
    VerifyResponse,
)


def _offer(**overrides):
    data = {
        "scheme": "shadowwire",
        "network": "solana:mainnet",
        "amount": "10000",
        "asset": "USDC",
        "payTo": "merchant",
        "resource": "/api/premium",
    }
    data.update(overrides)
    return data


def test_payment_requirements_aliases():
    """Wire aliases and python names both populate the model"""
    by_alias = PaymentRequirements.model_validate(_offer(maxTimeoutSeconds=60))
    by_name = PaymentRequirements(
        scheme="shadowwire",
        network="solana:mainnet",
        amount="10000",
        asset="USDC",
        pay_to="merchant",
        resource="/api/premium",
        max_timeout_seconds=60,
    )
    assert by_alias == by_name
    dumped = by_alias.model_dump(by_alias=True, exclude_none=True)
    assert dumped["payTo"] == "merchant"
    assert dumped["maxTimeoutSeconds"] == 60
    assert "description" not in dumped


def test_payment_requirements_integer_amount_coerced():
    assert PaymentRequirements.model_validate(_offer(amount=10000)).amount == "10000"


@pytest.mark.parametrize("amount", ["0", "-5", "1.5", "abc", "", True, None])
def test_payment_requirements_rejects_bad_amount(amount):
    with pytest.raises(ValidationError, match="Invalid payment amount"):
        PaymentRequirements.model_validate(_offer(amount=amount))


@pytest.mark.parametrize("field", ["scheme", "network"])
def test_payment_requirements_rejects_empty_identifier(field):
    with pytest.raises(ValidationError):
        PaymentRequirements.model_validate(_offer(**{field: "  "}))


def test_payment_required_defaults_to_current_version():
    doc = PaymentRequired.model_validate({"accepts": [_offer()]})
    assert doc.x402_version == 2
    assert doc.accepts[0].pay_to == "merchant"


def test_verify_response_accepts_facilitator_field_names():
    """isValid / invalidReason are read as valid / error"""
    result = VerifyResponse.model_validate(
        {"isValid": False, "invalidReason": "Invalid signature", "payer": "sender"}
    )
    assert result.valid is False
    assert result.error == "Invalid signature"
    assert result.payer == "sender"


def test_settle_response_reads_transaction_and_writes_tx_hash():
    result = SettleResponse.model_validate({"success": True, "transaction": "tx456", "fee": "0.01"})
    assert result.tx_hash == "tx456"
    assert result.fee == Decimal("0.01")
    assert result.model_dump(by_alias=True, exclude_none=True)["txHash"] == "tx456"

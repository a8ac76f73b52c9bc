import asyncio
from decimal import Decimal

import pytest

from shadowwire_x402.clients import X402Client
from shadowwire_x402.encoding import decode_payment_proof
from shadowwire_x402.types import TransferResult


@pytest.fixture
def client(transfer_backend, converter):
    return X402Client(transfer_backend, "sender", converter)


def test_client_requires_converter(transfer_backend):
    with pytest.raises(ValueError):
        X402Client(transfer_backend, "sender", None)


def test_select_payment_requirements_exact_scheme(client, usdc_requirement):
    other = usdc_requirement.model_copy(update={"scheme": "shadow"})
    assert client.select_payment_requirements([other, usdc_requirement]) is usdc_requirement
    assert client.select_payment_requirements([other]) is None
    assert client.select_payment_requirements([]) is None


@pytest.mark.anyio
async def test_pay_success(client, transfer_backend, usdc_requirement):
    """Transfer is made in token units and the proof binds resource and payee"""
    result = await client.pay(usdc_requirement)

    assert result.success
    assert result.transfer.tx_signature == "sig123"

    request = transfer_backend.transfer.await_args.args[0]
    assert request.amount == Decimal("0.01")
    assert request.recipient == "merchant"
    assert request.sender == "sender"
    assert request.mode == "external"

    proof = decode_payment_proof(result.payment_header)
    assert proof.scheme == "shadowwire"
    assert proof.network == "solana:mainnet"
    assert proof.payload.signature == "sig123"
    assert proof.payload.amount_hidden is True
    assert proof.payload.resource == "/api/premium"
    assert proof.payload.pay_to == "merchant"
    assert proof.payload.sender == "sender"


@pytest.mark.anyio
async def test_pay_accepts_mapping(client, usdc_requirement):
    result = await client.pay(usdc_requirement.model_dump(by_alias=True))
    assert result.success


@pytest.mark.anyio
async def test_pay_rejects_unsupported_scheme_before_amount(client, transfer_backend):
    result = await client.pay({"scheme": "lightning", "amount": "not a number"})
    assert not result.success
    assert "Unsupported x402 payment scheme: lightning" in result.error
    transfer_backend.transfer.assert_not_awaited()


@pytest.mark.anyio
async def test_pay_rejects_invalid_amount(client, transfer_backend, usdc_requirement):
    offer = usdc_requirement.model_dump(by_alias=True)
    offer["amount"] = "0"
    result = await client.pay(offer)
    assert not result.success
    assert "Invalid payment amount" in result.error
    transfer_backend.transfer.assert_not_awaited()


@pytest.mark.anyio
async def test_pay_rejects_unknown_asset(client, transfer_backend, usdc_requirement):
    offer = usdc_requirement.model_copy(update={"asset": "DOGE"})
    result = await client.pay(offer)
    assert not result.success
    assert "Unknown asset: DOGE" in result.error
    transfer_backend.transfer.assert_not_awaited()


@pytest.mark.anyio
async def test_pay_rejects_self_payment(client, transfer_backend, usdc_requirement):
    result = await client.pay(usdc_requirement.model_copy(update={"pay_to": "sender"}))
    assert not result.success
    transfer_backend.transfer.assert_not_awaited()


@pytest.mark.anyio
async def test_pay_reports_failed_transfer(client, transfer_backend, usdc_requirement):
    transfer_backend.transfer.return_value = TransferResult(success=False)
    result = await client.pay(usdc_requirement)
    assert not result.success
    assert "transfer failed" in result.error
    assert result.payment_header is None


@pytest.mark.anyio
async def test_pay_catches_transfer_exceptions(client, transfer_backend, usdc_requirement):
    transfer_backend.transfer.side_effect = RuntimeError("rpc down")
    result = await client.pay(usdc_requirement)
    assert not result.success
    assert "rpc down" in result.error


@pytest.mark.anyio
async def test_pay_times_out_slow_transfer(transfer_backend, converter, usdc_requirement):
    async def slow_transfer(request):
        await asyncio.sleep(5)

    transfer_backend.transfer.side_effect = slow_transfer
    client = X402Client(transfer_backend, "sender", converter, transfer_timeout=0.05)
    result = await client.pay(usdc_requirement)
    assert not result.success
    assert "timed out" in result.error


@pytest.mark.anyio
async def test_pay_internal_transfer_mode(transfer_backend, converter, usdc_requirement):
    client = X402Client(transfer_backend, "sender", converter, transfer_mode="internal")
    await client.pay(usdc_requirement)
    assert transfer_backend.transfer.await_args.args[0].mode == "internal"


@pytest.mark.anyio
async def test_get_balance_uses_default_asset(client, transfer_backend):
    assert await client.get_balance() == {"available": 5}
    transfer_backend.get_balance.assert_awaited_once_with("sender", "USDC")
    await client.get_balance("SOL")
    transfer_backend.get_balance.assert_awaited_with("sender", "SOL")


@pytest.mark.anyio
async def test_estimate_fee(client, transfer_backend):
    estimate = await client.estimate_fee("0.01")
    assert estimate.fee_percentage == Decimal("1")
    transfer_backend.estimate_fee.assert_called_once_with(Decimal("0.01"), "USDC")

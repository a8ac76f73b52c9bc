import base64
import json
from decimal import Decimal

from shadowwire_x402.encoding import (
    decode_payment_proof,
    decode_payment_response,
    encode_base64,
    encode_payment_proof,
    encode_payment_response,
    is_payment_required,
    parse_payment_required,
    payment_header_too_large,
)
from shadowwire_x402.types import (
    PaymentProof,
    PaymentProofPayload,
    SettleResponse,
)


def _proof() -> PaymentProof:
    return PaymentProof(
        x402_version=2,
        scheme="shadowwire",
        network="solana:mainnet",
        payload=PaymentProofPayload(
            signature="sig123",
            amount_hidden=True,
            resource="/api/premium",
            pay_to="merchant",
            sender="sender",
        ),
    )


def _encode_raw(data) -> str:
    return encode_base64(json.dumps(data))


def _challenge(**overrides):
    body = {
        "x402Version": 2,
        "accepts": [
            {
                "scheme": "shadowwire",
                "network": "solana:mainnet",
                "amount": "10000",
                "asset": "USDC",
                "payTo": "merchant",
                "resource": "/api/premium",
            }
        ],
    }
    body.update(overrides)
    return body


def test_payment_proof_round_trip():
    proof = _proof()
    assert decode_payment_proof(encode_payment_proof(proof)) == proof


def test_payment_proof_encoding_is_canonical():
    """Sorted keys, compact separators, None fields omitted"""
    proof = _proof()
    proof.payload.sender = None
    decoded = base64.b64decode(encode_payment_proof(proof)).decode()
    assert decoded.startswith('{"network":"solana:mainnet","payload":{"amountHidden":true')
    assert "sender" not in decoded
    assert " " not in decoded


def test_decode_rejects_non_base64():
    assert decode_payment_proof("not base64 at all!!!") is None


def test_decode_rejects_non_json():
    assert decode_payment_proof(encode_base64("not json {")) is None


def test_decode_rejects_non_object():
    assert decode_payment_proof(_encode_raw(["shadowwire"])) is None


def test_decode_rejects_missing_fields():
    assert decode_payment_proof(_encode_raw({"x402Version": 2, "scheme": "shadowwire"})) is None
    assert (
        decode_payment_proof(
            _encode_raw({"x402Version": 2, "network": "solana:mainnet", "payload": {"signature": "s"}})
        )
        is None
    )


def test_decode_rejects_wrong_version():
    data = _proof().model_dump(by_alias=True)
    data["x402Version"] = 1
    assert decode_payment_proof(_encode_raw(data)) is None


def test_decode_rejects_oversized_header():
    header = "A" * 20_000
    assert payment_header_too_large(header)
    assert decode_payment_proof(header) is None


def test_header_size_limit_boundary():
    assert not payment_header_too_large("A" * 16_384)
    assert payment_header_too_large("A" * 16_385)


def test_parse_payment_required_valid():
    doc = parse_payment_required(_challenge())
    assert doc is not None
    assert doc.accepts[0].scheme == "shadowwire"


def test_parse_payment_required_missing_version_is_current():
    body = _challenge()
    del body["x402Version"]
    assert parse_payment_required(body) is not None


def test_parse_payment_required_rejects_foreign_version():
    assert parse_payment_required(_challenge(x402Version=1)) is None


def test_parse_payment_required_rejects_bad_shape():
    assert parse_payment_required(None) is None
    assert parse_payment_required("402") is None
    assert parse_payment_required({}) is None
    assert parse_payment_required({"accepts": "shadowwire"}) is None


def test_parse_payment_required_drops_invalid_offers():
    body = _challenge()
    body["accepts"].insert(0, {"scheme": "other"})
    body["accepts"].append({**body["accepts"][-1], "amount": "0"})
    doc = parse_payment_required(body)
    assert doc is not None
    assert len(doc.accepts) == 1
    assert doc.accepts[0].amount == "10000"


def test_parse_payment_required_empty_offers_is_not_none():
    doc = parse_payment_required({"x402Version": 2, "accepts": []})
    assert doc is not None
    assert doc.accepts == []


def test_is_payment_required():
    assert is_payment_required(402, _challenge())
    assert not is_payment_required(200, _challenge())
    assert not is_payment_required(402, {})


def test_payment_response_round_trip():
    settlement = SettleResponse(success=True, tx_hash="tx123", fee=Decimal("0.0001"))
    decoded = decode_payment_response(encode_payment_response(settlement))
    assert decoded == settlement


def test_decode_payment_response_fails_closed():
    assert decode_payment_response("%%%") is None
    assert decode_payment_response(encode_base64("[1, 2]")) is None


def test_decode_rejects_deeply_nested_json():
    """Nesting deep enough to exhaust the parser's recursion fails closed"""
    header = encode_base64("[" * 5000 + "]" * 5000)
    assert not payment_header_too_large(header)
    assert decode_payment_proof(header) is None
    assert decode_payment_response(header) is None

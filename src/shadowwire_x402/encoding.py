"""
Encoding utilities for x402 protocol headers and challenge documents
"""

import base64
import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from shadowwire_x402.config import X402Config
from shadowwire_x402.types import (
    PaymentProof,
    PaymentRequired,
    PaymentRequirements,
    SettleResponse,
)

logger = logging.getLogger(__name__)


def encode_base64(data: str | bytes) -> str:
    """Encode data to base64"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("ascii")


def decode_base64(data: str, strict: bool = True) -> str:
    """Decode base64 to string.

    With ``strict`` set, characters outside the base64 alphabet raise instead
    of being silently discarded.
    """
    return base64.b64decode(data, validate=strict).decode("utf-8")


def _canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def payment_header_size(header: str) -> int:
    """Size of a header value in bytes as sent on the wire"""
    return len(header.encode("utf-8"))


def payment_header_too_large(header: str) -> bool:
    """True when the header exceeds X402Config.MAX_PAYMENT_HEADER_BYTES"""
    return payment_header_size(header) > X402Config.MAX_PAYMENT_HEADER_BYTES


def encode_payment_proof(proof: PaymentProof) -> str:
    """Encode a payment proof as base64 of canonical JSON for the X-Payment header"""
    return encode_base64(_canonical_json(proof.model_dump(by_alias=True, exclude_none=True)))


def decode_payment_proof(header: str) -> PaymentProof | None:
    """
    Decode an X-Payment header value.

    Returns None for any header that is oversized, not base64, not a JSON
    object, of a foreign protocol version, or missing ``scheme`` or
    ``payload.signature``. Never raises.
    """
    # Size is checked before any decoding work
    if payment_header_too_large(header):
        logger.debug(f"Payment header rejected: {payment_header_size(header)} bytes")
        return None

    try:
        data = json.loads(decode_base64(header))
    except (ValueError, RecursionError) as e:
        logger.debug(f"Payment header is not base64 JSON: {e!r}")
        return None

    if not isinstance(data, dict):
        return None
    if data.get("x402Version") != X402Config.X402_VERSION:
        logger.debug(f"Payment header has foreign x402Version: {data.get('x402Version')!r}")
        return None

    payload = data.get("payload")
    if not data.get("scheme") or not isinstance(payload, dict) or not payload.get("signature"):
        return None

    try:
        return PaymentProof.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Payment header failed validation: {e}")
        return None


def _has_challenge_shape(body: Any) -> bool:
    return isinstance(body, Mapping) and isinstance(body.get("accepts"), list)


def parse_payment_required(body: Any) -> PaymentRequired | None:
    """
    Parse a decoded 402 body into a PaymentRequired document.

    Two steps: a structural check (a mapping with a list under ``accepts``),
    then a semantic check (protocol version, per-offer field rules). Offers that
    break those rules are dropped; a document whose offer list
    ends up empty is still returned so callers can tell it apart from a body
    that is not a challenge at all (None).
    """
    if not _has_challenge_shape(body):
        return None

    version = body.get("x402Version", X402Config.X402_VERSION)
    if version != X402Config.X402_VERSION:
        logger.debug(f"Challenge has foreign x402Version: {version!r}")
        return None

    accepts: list[PaymentRequirements] = []
    for index, offer in enumerate(body["accepts"]):
        try:
            accepts.append(PaymentRequirements.model_validate(offer))
        except ValidationError as e:
            logger.debug(f"Dropping invalid offer #{index}: {e}")

    fields = {key: value for key, value in body.items() if key != "accepts"}
    try:
        return PaymentRequired.model_validate({**fields, "accepts": accepts})
    except ValidationError as e:
        logger.debug(f"Challenge document failed validation: {e}")
        return None


def is_payment_required(status: int, body: Any) -> bool:
    """True iff the status is 402 and the body parses as a challenge"""
    return status == X402Config.PAYMENT_REQUIRED_STATUS and parse_payment_required(body) is not None


def encode_payment_response(settlement: SettleResponse) -> str:
    """Encode a settlement for the X-Payment-Response header"""
    return encode_base64(
        _canonical_json(settlement.model_dump(mode="json", by_alias=True, exclude_none=True))
    )


def decode_payment_response(header: str) -> SettleResponse | None:
    """Decode an X-Payment-Response header; None when it cannot be read"""
    if payment_header_too_large(header):
        return None
    try:
        return SettleResponse.model_validate_json(decode_base64(header))
    except (ValueError, RecursionError, ValidationError):
        return None

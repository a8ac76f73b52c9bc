from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from shadowwire_x402.encoding import decode_payment_response, encode_payment_proof
from shadowwire_x402.fastapi import X402Middleware, x402_protected
from shadowwire_x402.server import PaywallConfig, X402Server
from shadowwire_x402.tokens import TokenUnitConverter
from shadowwire_x402.types import (
    PaymentProof,
    PaymentProofPayload,
    SettleResponse,
    VerifyResponse,
)


def _header(resource="/premium") -> str:
    return encode_payment_proof(
        PaymentProof(
            x402_version=2,
            scheme="shadowwire",
            network="solana:mainnet",
            payload=PaymentProofPayload(signature="sig123", resource=resource, sender="sender"),
        )
    )


@pytest.fixture
def facilitator():
    mock = MagicMock()
    mock.verify = AsyncMock(return_value=VerifyResponse(valid=True, payer="sender"))
    mock.settle = AsyncMock(return_value=SettleResponse(success=True, tx_hash="tx123"))
    return mock


@pytest.fixture
def app(facilitator):
    server = X402Server(
        PaywallConfig(pay_to="merchant_wallet", amount=Decimal("0.01")),
        TokenUnitConverter(),
        facilitator=facilitator,
    )
    middleware = X402Middleware(server)
    app = FastAPI()

    @app.get("/premium")
    @middleware.protect()
    async def premium(request: Request):
        return {"premium": True, "payer": request.state.x402.payer}

    @app.get("/report")
    @x402_protected(server)
    async def report(request: Request):
        return {"tx": request.state.x402.tx_hash}

    @app.get("/free")
    async def free():
        return {"free": True}

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_unpaid_request_gets_challenge(client, facilitator):
    response = client.get("/premium")

    assert response.status_code == 402
    body = response.json()
    assert body["accepts"][0]["scheme"] == "shadowwire"
    assert body["accepts"][0]["resource"] == "/premium"
    assert response.headers["WWW-Authenticate"] == "X402"
    assert response.headers["X-Payment-Schemes"] == "shadowwire"
    assert response.headers["Cache-Control"] == "no-store"
    facilitator.verify.assert_not_awaited()


def test_paid_request_reaches_endpoint(client):
    response = client.get("/premium", headers={"X-Payment": _header()})

    assert response.status_code == 200
    assert response.json() == {"premium": True, "payer": "sender"}
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["Vary"] == "X-Payment"
    settlement = decode_payment_response(response.headers["X-Payment-Response"])
    assert settlement.tx_hash == "tx123"


def test_convenience_decorator(client):
    response = client.get("/report", headers={"X-Payment": _header(resource="/report")})
    assert response.status_code == 200
    assert response.json() == {"tx": "tx123"}


def test_proof_for_other_route_is_rejected(client, facilitator):
    response = client.get("/report", headers={"X-Payment": _header(resource="/premium")})

    assert response.status_code == 402
    assert "resource mismatch" in response.json()["verifyError"]
    facilitator.verify.assert_not_awaited()


def test_oversized_header_is_400(client):
    response = client.get("/premium", headers={"X-Payment": "A" * 20_000})
    assert response.status_code == 400
    assert "exceeds size limit" in response.json()["error"]


def test_unprotected_route(client):
    response = client.get("/free")
    assert response.status_code == 200
    assert "X-Payment-Response" not in response.headers

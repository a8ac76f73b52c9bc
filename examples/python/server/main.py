import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from shadowwire_x402.config import X402Config
from shadowwire_x402.fastapi import x402_protected
from shadowwire_x402.logging_config import setup_logging
from shadowwire_x402.server import (
    DISCOVERY_PATH,
    PaywallConfig,
    X402Server,
    create_discovery_document,
)
from shadowwire_x402.tokens import TokenUnitConverter
from shadowwire_x402.types import PaymentInfo

load_dotenv(Path(__file__).parent.parent.parent.parent / ".env")

setup_logging(logging.DEBUG)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)

logger = logging.getLogger(__name__)

MERCHANT_WALLET = os.getenv("MERCHANT_WALLET", "")
FACILITATOR_URL = os.getenv("FACILITATOR_URL", X402Config.DEFAULT_FACILITATOR_URL)
FACILITATOR_API_KEY = os.getenv("FACILITATOR_API_KEY") or None
SERVER_HOST = "0.0.0.0"
SERVER_PORT = 8000

PRICE = "0.01"
ASSET = "USDC"

if not MERCHANT_WALLET:
    print("\nError: MERCHANT_WALLET not set in .env file\n")
    raise SystemExit(1)


def record_payment(payment: PaymentInfo) -> None:
    logger.info(f"Paid: {payment.resource} by {payment.payer} (tx {payment.tx_hash})")


server = X402Server(
    PaywallConfig(
        pay_to=MERCHANT_WALLET,
        amount=PRICE,
        asset=ASSET,
        facilitator_url=FACILITATOR_URL,
        api_key=FACILITATOR_API_KEY,
        description="Premium market data",
        on_payment=record_payment,
    ),
    TokenUnitConverter(),
)

app = FastAPI(title="ShadowWire x402 Server", description="Protected resource server")

print("Server Configuration:")
print(f"  Network: {X402Config.SOLANA_MAINNET}")
print(f"  Pay To: {MERCHANT_WALLET}")
print(f"  Price: {PRICE} {ASSET}")
print(f"  Facilitator URL: {FACILITATOR_URL}")


@app.get("/")
async def root():
    """Service info"""
    return {
        "service": "ShadowWire x402 Protected Resource Server",
        "status": "running",
        "pay_to": MERCHANT_WALLET,
        "facilitator": FACILITATOR_URL,
    }


@app.get(DISCOVERY_PATH)
async def discovery():
    return create_discovery_document(
        "ShadowWire x402 demo",
        MERCHANT_WALLET,
        [
            {
                "path": "/api/premium",
                "method": "GET",
                "price": float(PRICE),
                "asset": ASSET,
                "description": "Premium market data",
            }
        ],
        description="Private pay-per-request API",
        facilitator_url=FACILITATOR_URL,
    )


@app.get("/api/premium")
@x402_protected(server)
async def premium(request: Request):
    payment: PaymentInfo = request.state.x402
    return {
        "premium": True,
        "payer": payment.payer,
        "tx": payment.tx_hash,
    }


if __name__ == "__main__":
    import uvicorn

    print("\n" + "=" * 80)
    print("Starting ShadowWire x402 Protected Resource Server")
    print("=" * 80)
    print(f"Host: {SERVER_HOST}")
    print(f"Port: {SERVER_PORT}")
    print("Endpoints:")
    print(f"  /api/premium       - Payment required ({PRICE} {ASSET})")
    print(f"  {DISCOVERY_PATH}   - Discovery document")
    print("=" * 80 + "\n")

    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT, log_level="info", access_log=True)

import asyncio
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv

from shadowwire_x402.clients import X402Client, X402HttpClient
from shadowwire_x402.logging_config import setup_logging
from shadowwire_x402.tokens import TokenRegistry, TokenUnitConverter
from shadowwire_x402.types import FeeEstimate, TransferRequest, TransferResult

load_dotenv(Path(__file__).parent.parent.parent.parent / ".env")

setup_logging(logging.DEBUG)

SENDER_WALLET = os.getenv("SENDER_WALLET", "")
RESOURCE_URL = os.getenv("RESOURCE_URL", "http://localhost:8000/api/premium")
# Relayer that holds the sender's pool authorization and executes transfers
TRANSFER_API_URL = os.getenv("TRANSFER_API_URL", "https://shadow.radr.fun/shadowpay/api")
TRANSFER_API_KEY = os.getenv("TRANSFER_API_KEY", "")

RELAYER_FEE = Decimal("0.01")

if not SENDER_WALLET:
    print("\nError: SENDER_WALLET not set in .env file\n")
    raise SystemExit(1)


class RelayerTransferBackend:
    """Transfer backend that delegates to a ShadowWire relayer over HTTP"""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, api_key: str = "") -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {"X-API-Key": api_key} if api_key else {}

    async def transfer(self, request: TransferRequest) -> TransferResult:
        token = TokenRegistry.resolve(request.asset)
        response = await self._http.post(
            f"{self._base_url}/zk/{request.mode}-transfer",
            json={
                "sender_wallet": request.sender,
                "recipient": request.recipient,
                "amount": str(request.amount),
                "token": token.symbol,
            },
            headers=self._headers,
        )
        response.raise_for_status()
        return TransferResult.model_validate(response.json())

    async def get_balance(self, account: str, asset: str) -> Any:
        token = TokenRegistry.resolve(asset)
        params = {} if token.symbol == "SOL" else {"token_mint": token.mint}
        response = await self._http.get(
            f"{self._base_url}/pool/balance/{account}", params=params, headers=self._headers
        )
        response.raise_for_status()
        return response.json()

    def estimate_fee(self, amount: Decimal, asset: str) -> FeeEstimate:
        fee = amount * RELAYER_FEE
        return FeeEstimate(fee=fee, fee_percentage=RELAYER_FEE * 100, net_amount=amount - fee)


async def main():
    print("Initializing x402 client...")
    print(f"  Sender: {SENDER_WALLET}")
    print(f"  Resource: {RESOURCE_URL}")

    async with httpx.AsyncClient(timeout=60.0) as http_client:
        backend = RelayerTransferBackend(http_client, TRANSFER_API_URL, TRANSFER_API_KEY)
        x402_client = X402Client(backend, SENDER_WALLET, TokenUnitConverter())

        fee = await x402_client.estimate_fee("0.01")
        print(f"  Relayer fee on 0.01 USDC: {fee.fee} ({fee.fee_percentage}%)")

        client = X402HttpClient(x402_client, http_client=http_client)
        print(f"\nRequesting: {RESOURCE_URL}")
        result = await client.get(RESOURCE_URL)

        if not result.success:
            print(f"\nError: {result.error} (status={result.status_code})")
            return

        print("\nSuccess!")
        print(f"Status: {result.status_code}")
        print(f"Response: {result.data}")
        if result.payment:
            print("\nPayment:")
            print(f"  Signature: {result.payment.transfer.tx_signature}")
            print(f"  Amount hidden: {result.payment.transfer.amount_hidden}")
            settlement = result.payment.settlement
            if settlement:
                print(f"  Settlement tx: {settlement.tx_hash}")
                print(f"  Fee: {settlement.fee}  Net: {settlement.net}")


if __name__ == "__main__":
    asyncio.run(main())

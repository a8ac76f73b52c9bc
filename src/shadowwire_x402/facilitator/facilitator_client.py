"""
FacilitatorClient - Client for communicating with the x402 facilitator service
"""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from shadowwire_x402.config import X402Config
from shadowwire_x402.encoding import payment_header_size, payment_header_too_large
from shadowwire_x402.exceptions import (
    FacilitatorError,
    FacilitatorTimeoutError,
    PaymentHeaderTooLargeError,
)
from shadowwire_x402.types import PaymentRequirements, SettleResponse, VerifyResponse

logger = logging.getLogger(__name__)


class FacilitatorClient:
    """
    Client for communicating with the facilitator service.

    Handles verify and settle. Both fail closed: transport failures, timeouts,
    non-2xx answers and unreadable bodies come back as an invalid
    VerifyResponse / unsuccessful SettleResponse carrying the reason, never as
    an exception.
    """

    def __init__(
        self,
        base_url: str = X402Config.DEFAULT_FACILITATOR_URL,
        api_key: str | None = None,
        timeout: float = X402Config.DEFAULT_FACILITATOR_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize facilitator client.

        Args:
            base_url: Facilitator service base URL
            api_key: Optional API key, sent as X-API-Key
            timeout: Per-call timeout in seconds
            http_client: Injected httpx.AsyncClient; not closed by close()
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"Content-Type": "application/json"}
        if api_key:
            self._headers[X402Config.API_KEY_HEADER] = api_key
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "FacilitatorClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _post(self, operation: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST to {base_url}/{operation} and return the decoded JSON object.

        Raises:
            FacilitatorTimeoutError: No answer within the timeout
            FacilitatorError: Connection failure, non-2xx status or unreadable body
        """
        client = await self._get_client()
        url = f"{self._base_url}/{operation}"
        logger.debug(f"POST {url}")

        try:
            response = await asyncio.wait_for(
                client.post(url, json=body, headers=self._headers, timeout=self._timeout),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise FacilitatorTimeoutError(operation, self._timeout)
        except httpx.HTTPError as e:
            raise FacilitatorError(f"Facilitator error: {e}")

        if not response.is_success:
            raise FacilitatorError(
                f"Facilitator returned {response.status_code}: {_remote_error(response)}"
            )

        try:
            data = response.json()
        except ValueError:
            raise FacilitatorError(f"Facilitator {operation} response is not JSON")
        if not isinstance(data, dict):
            raise FacilitatorError(f"Facilitator {operation} response is not an object")
        return data

    async def verify(self, payment_header: str, requirements: PaymentRequirements) -> VerifyResponse:
        """
        Verify a payment proof against the offer it claims to satisfy.

        Args:
            payment_header: Raw X-Payment header value
            requirements: The offer the proof must satisfy

        Returns:
            VerifyResponse (valid=False with error on any failure)
        """
        if payment_header_too_large(payment_header):
            error = PaymentHeaderTooLargeError(payment_header_size(payment_header))
            return VerifyResponse(valid=False, error=str(error))

        body = {
            "x402Version": X402Config.X402_VERSION,
            "paymentHeader": payment_header,
            "resource": requirements.resource,
            "maxAmount": requirements.amount,
        }
        try:
            data = await self._post("verify", body)
            result = VerifyResponse.model_validate(data)
        except FacilitatorError as e:
            logger.warning(f"Verification failed: {e}")
            return VerifyResponse(valid=False, error=str(e))
        except ValidationError as e:
            logger.warning(f"Unreadable verify response: {e}")
            return VerifyResponse(valid=False, error="Facilitator verify response is invalid")

        logger.info(f"Verify result: valid={result.valid}, payer={result.payer}")
        return result

    async def settle(self, payment_header: str, requirements: PaymentRequirements) -> SettleResponse:
        """
        Settle a verified payment.

        Args:
            payment_header: Raw X-Payment header value
            requirements: The offer being paid

        Returns:
            SettleResponse (success=False with error on any failure)
        """
        if payment_header_too_large(payment_header):
            error = PaymentHeaderTooLargeError(payment_header_size(payment_header))
            return SettleResponse(success=False, error=str(error))

        body = {
            "x402Version": X402Config.X402_VERSION,
            "paymentHeader": payment_header,
            "merchantWallet": requirements.pay_to,
            "amount": requirements.amount,
            "asset": requirements.asset,
        }
        try:
            data = await self._post("settle", body)
            result = SettleResponse.model_validate(data)
        except FacilitatorError as e:
            logger.warning(f"Settlement failed: {e}")
            return SettleResponse(success=False, error=str(e))
        except ValidationError as e:
            logger.warning(f"Unreadable settle response: {e}")
            return SettleResponse(success=False, error="Facilitator settle response is invalid")

        logger.info(f"Settle result: success={result.success}, tx={result.tx_hash}")
        return result


def _remote_error(response: httpx.Response) -> str:
    """The facilitator's own error text, verbatim when it sent one"""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        for key in ("error", "invalidReason", "message"):
            if isinstance(data.get(key), str):
                return data[key]
    return response.text or response.reason_phrase


async def verify_payment(
    payment_header: str,
    requirements: PaymentRequirements,
    facilitator_url: str,
    api_key: str | None = None,
) -> VerifyResponse:
    """Verify a payment with a one-shot FacilitatorClient"""
    async with FacilitatorClient(facilitator_url, api_key=api_key) as client:
        return await client.verify(payment_header, requirements)


async def settle_payment(
    payment_header: str,
    requirements: PaymentRequirements,
    facilitator_url: str,
    api_key: str | None = None,
) -> SettleResponse:
    """Settle a payment with a one-shot FacilitatorClient"""
    async with FacilitatorClient(facilitator_url, api_key=api_key) as client:
        return await client.settle(payment_header, requirements)

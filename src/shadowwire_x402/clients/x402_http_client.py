"""
X402HttpClient - HTTP client adapter with automatic 402 payment handling
"""

import asyncio
import logging
from typing import Any

import httpx

from shadowwire_x402.clients.x402_client import X402Client
from shadowwire_x402.config import X402Config
from shadowwire_x402.encoding import decode_payment_response, parse_payment_required
from shadowwire_x402.exceptions import NetworkError, RequestTimeoutError, TransportError
from shadowwire_x402.types import (
    PaymentMetadata,
    PaymentRequirements,
    PaymentResult,
    RequestResult,
    SettleResponse,
)

logger = logging.getLogger(__name__)


class X402HttpClient:
    """
    HTTP client adapter with automatic 402 payment handling.

    Wraps httpx.AsyncClient: a 402 answer is parsed, paid through the
    X402Client and the request is repeated with the X-Payment header.
    Results are returned as RequestResult values; request() never raises.
    """

    def __init__(
        self,
        x402_client: X402Client,
        http_client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | None = None,
        max_retries: int = X402Config.DEFAULT_MAX_RETRIES,
        timeout: float = X402Config.DEFAULT_REQUEST_TIMEOUT,
        backoff_base: float = X402Config.DEFAULT_BACKOFF_BASE,
    ) -> None:
        """
        Initialize HTTP client adapter.

        Args:
            x402_client: X402Client that performs payments
            http_client: httpx.AsyncClient instance (created and owned when omitted)
            headers: Default headers sent with every request
            max_retries: Extra attempts for the paid request that did not succeed
            timeout: Per-call timeout in seconds
            backoff_base: First backoff delay in seconds; doubles per attempt
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._x402_client = x402_client
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._headers = dict(headers or {})
        self._max_retries = max_retries
        self._timeout = timeout
        self._backoff_base = backoff_base

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it"""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "X402HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(self, method: str, url: str, **kwargs: Any) -> RequestResult:
        """
        Make HTTP request with automatic 402 payment handling.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional httpx request parameters (headers, json, params, ...)

        Flow:
            1. Send original request
            2. If 402, parse the challenge and select the supported offer
            3. Pay it through the X402Client
            4. Retry with X-Payment header, backing off on 5xx / transport errors
        """
        headers = {**self._headers, **dict(kwargs.pop("headers", None) or {})}

        logger.info(f"Making {method} request to {url}")
        try:
            response = await self._send(method, url, headers, kwargs)
        except TransportError as e:
            logger.warning(str(e))
            return RequestResult(success=False, error=str(e))
        logger.info(f"Received response: status={response.status_code}")

        if response.status_code != X402Config.PAYMENT_REQUIRED_STATUS:
            if response.is_success:
                return RequestResult(
                    success=True, data=_parse_body(response), status_code=response.status_code
                )
            return RequestResult(
                success=False,
                error=f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.info("Received 402 Payment Required, processing payment...")
        payment_required = parse_payment_required(_parse_body(response))
        if payment_required is None:
            logger.error("Failed to parse PaymentRequired from 402 response")
            return RequestResult(
                success=False,
                error="Invalid 402 response: no payment challenge",
                status_code=response.status_code,
            )
        if not payment_required.accepts:
            return RequestResult(
                success=False,
                error="No accepted payment methods in 402 response",
                status_code=response.status_code,
            )

        requirement = self._x402_client.select_payment_requirements(payment_required.accepts)
        if requirement is None:
            return RequestResult(
                success=False,
                error=f"No compatible payment option (need {self._x402_client.scheme})",
                status_code=response.status_code,
            )

        payment = await self._x402_client.pay(requirement)
        if not payment.success or payment.transfer is None or not payment.payment_header:
            return RequestResult(
                success=False,
                error=payment.error or "Payment failed",
                status_code=response.status_code,
            )
        logger.info("Payment created, retrying request with payment")

        headers[X402Config.PAYMENT_HEADER] = payment.payment_header
        return await self._retry_with_payment(method, url, headers, kwargs, requirement, payment)

    async def get(self, url: str, **kwargs: Any) -> RequestResult:
        """GET request with payment handling"""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> RequestResult:
        """POST request with payment handling"""
        return await self.request("POST", url, **kwargs)

    async def pay(self, requirement: PaymentRequirements | dict[str, Any]) -> PaymentResult:
        """Pay one offer without issuing a request, for manual flows"""
        return await self._x402_client.pay(requirement)

    async def _send(
        self, method: str, url: str, headers: dict[str, str], kwargs: dict[str, Any]
    ) -> httpx.Response:
        """One outbound call under the request timeout

        Raises:
            RequestTimeoutError: No response within the timeout
            NetworkError: Connection-level failure
        """
        operation = f"{method} {url}"
        try:
            return await asyncio.wait_for(
                self._http_client.request(
                    method, url, headers=headers, timeout=self._timeout, **kwargs
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise RequestTimeoutError(operation, self._timeout)
        except httpx.HTTPError as e:
            raise NetworkError(operation, str(e) or type(e).__name__)

    async def _retry_with_payment(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        kwargs: dict[str, Any],
        requirement: PaymentRequirements,
        payment: PaymentResult,
    ) -> RequestResult:
        """Send the paid request until it succeeds or attempts run out

        A 402 is terminal. Other 4xx answers retry immediately; 5xx and
        transport failures back off first.
        """
        error = "Request failed after payment"
        status_code: int | None = None
        total_delay = 0.0

        for attempt in range(self._max_retries + 1):
            try:
                response = await self._send(method, url, headers, kwargs)
            except TransportError as e:
                logger.warning(f"Paid request attempt {attempt + 1} failed: {e}")
                error, status_code = str(e), None
            else:
                logger.info(f"Payment retry response: status={response.status_code}")
                if response.is_success:
                    return RequestResult(
                        success=True,
                        data=_parse_body(response),
                        payment=PaymentMetadata(
                            transfer=payment.transfer,
                            requirement=requirement,
                            settlement=_settlement(response),
                        ),
                        status_code=response.status_code,
                    )
                if response.status_code == X402Config.PAYMENT_REQUIRED_STATUS:
                    return RequestResult(
                        success=False,
                        error="Payment not accepted by server",
                        status_code=response.status_code,
                    )
                error = f"HTTP {response.status_code} after payment"
                status_code = response.status_code

            if attempt < self._max_retries and (status_code is None or status_code >= 500):
                delay = min(
                    self._backoff_base * (2**attempt), X402Config.MAX_BACKOFF_TOTAL - total_delay
                )
                if delay > 0:
                    logger.debug(f"Backing off {delay:.2f}s before retry")
                    await asyncio.sleep(delay)
                    total_delay += delay

        return RequestResult(success=False, error=error, status_code=status_code)


def _parse_body(response: httpx.Response) -> Any:
    """JSON body when it parses, otherwise the text"""
    try:
        return response.json()
    except ValueError:
        return response.text


def _settlement(response: httpx.Response) -> SettleResponse | None:
    header = response.headers.get(X402Config.PAYMENT_RESPONSE_HEADER)
    if not header:
        return None
    return decode_payment_response(header)

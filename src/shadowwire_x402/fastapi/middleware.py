"""
FastAPI middleware for x402 payment processing
"""

import logging
from functools import wraps
from typing import Any, Callable

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shadowwire_x402.config import X402Config
from shadowwire_x402.encoding import encode_payment_response
from shadowwire_x402.server import CONTEXT_KEY, PaywallRequest, PaywallResponse, X402Server

logger = logging.getLogger(__name__)


class X402Middleware:
    """
    FastAPI middleware for automatic 402 payment handling.

    Usage:
        app = FastAPI()
        server = X402Server(PaywallConfig(pay_to="...", amount="0.01"), TokenUnitConverter())
        middleware = X402Middleware(server)

        @app.get("/protected")
        @middleware.protect()
        async def protected_endpoint(request: Request):
            return {"data": "secret", "payer": request.state.x402.payer}
    """

    def __init__(self, server: X402Server) -> None:
        self._server = server

    @property
    def server(self) -> X402Server:
        return self._server

    def protect(self) -> Callable:
        """
        Decorator to protect an endpoint with the server's paywall.

        The endpoint must accept ``request: Request`` as its first argument.
        On success the PaymentInfo is available as ``request.state.x402`` and
        the response carries X-Payment-Response.
        """

        def decorator(func: Callable) -> Callable:
            @wraps(func)
            async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
                paywall_request = PaywallRequest(
                    path=request.url.path,
                    headers=dict(request.headers),
                    method=request.method,
                )
                decision = await self._server.authorize(paywall_request)
                if not decision.authorized:
                    return _render(decision.response)

                setattr(request.state, CONTEXT_KEY, decision.payment)
                await self._server.notify_payment(decision.payment)

                response = await func(request, *args, **kwargs)
                if not isinstance(response, Response):
                    response = JSONResponse(content=jsonable_encoder(response))

                if decision.settlement is not None:
                    response.headers[X402Config.PAYMENT_RESPONSE_HEADER] = (
                        encode_payment_response(decision.settlement)
                    )
                response.headers["Cache-Control"] = "no-store"
                response.headers["Vary"] = X402Config.PAYMENT_HEADER
                return response

            return wrapper

        return decorator


def _render(rejection: PaywallResponse) -> JSONResponse:
    return JSONResponse(
        content=rejection.body,
        status_code=rejection.status_code,
        headers=rejection.headers,
    )


def x402_protected(server: X402Server) -> Callable:
    """
    Convenience decorator to protect endpoints.

        @app.get("/premium")
        @x402_protected(server)
        async def premium(request: Request):
            ...
    """
    return X402Middleware(server).protect()

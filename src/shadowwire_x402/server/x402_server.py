"""
X402Server - Paywall gate for the ShadowWire x402 scheme
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from shadowwire_x402.clients.x402_client import UnitConverter
from shadowwire_x402.config import X402Config
from shadowwire_x402.encoding import (
    decode_payment_proof,
    payment_header_size,
    payment_header_too_large,
)
from shadowwire_x402.exceptions import (
    ConfigurationError,
    PaymentHeaderTooLargeError,
    UnknownAssetError,
    UnsupportedSchemeError,
)
from shadowwire_x402.facilitator import FacilitatorClient
from shadowwire_x402.types import (
    PaymentInfo,
    PaymentRequired,
    PaymentRequirements,
    ResourceInfo,
    SettleResponse,
)

logger = logging.getLogger(__name__)

CONTEXT_KEY = "x402"

PaymentCallback = Callable[[PaymentInfo], Any]


@dataclass
class PaywallConfig:
    """Paywall configuration for one protected resource (or a group sharing a price)"""

    pay_to: str
    # Price in token units, e.g. 0.01 USDC
    amount: Decimal | float | str
    facilitator_url: str = X402Config.DEFAULT_FACILITATOR_URL
    asset: str = X402Config.DEFAULT_ASSET
    description: str | None = None
    max_timeout_seconds: int = X402Config.DEFAULT_MAX_TIMEOUT_SECONDS
    api_key: str | None = None
    mime_type: str = X402Config.DEFAULT_MIME_TYPE
    additional_schemes: list[PaymentRequirements | dict[str, Any]] = field(default_factory=list)
    on_payment: PaymentCallback | None = None
    facilitator_timeout: float = X402Config.DEFAULT_FACILITATOR_TIMEOUT


@dataclass
class PaywallRequest:
    """Framework-neutral view of an incoming request"""

    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "GET"
    context: dict[str, Any] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup"""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class PaywallResponse:
    """Framework-neutral response produced by a rejection"""

    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class PaywallDecision:
    """Outcome of X402Server.authorize"""

    authorized: bool
    payment: PaymentInfo | None = None
    settlement: SettleResponse | None = None
    response: PaywallResponse | None = None


class X402Server:
    """
    Paywall gate.

    Challenges requests without payment, rejects malformed or mismatched
    proofs locally, then verifies and settles through the facilitator:

        no header       -> 402 challenge
        oversized       -> 400
        undecodable     -> 402 + verifyError
        resource bound  -> 402 + verifyError (no facilitator call)
        verify failed   -> 402 + verifyError
        settle failed   -> 402 + settleError
        otherwise       -> authorized, PaymentInfo attached
    """

    def __init__(
        self,
        config: PaywallConfig,
        converter: UnitConverter,
        facilitator: FacilitatorClient | None = None,
    ) -> None:
        """
        Initialize X402Server.

        Args:
            config: Paywall configuration
            converter: Unit converter used to price offers in atomic units
            facilitator: Facilitator client (created from config when omitted)

        Raises:
            ConfigurationError: Missing pay_to, unknown asset, non-positive price
                or an invalid additional offer
        """
        if converter is None:
            raise ConfigurationError("converter is required")
        if not config.pay_to:
            raise ConfigurationError("pay_to is required")
        if not converter.is_known_asset(config.asset):
            raise UnknownAssetError(config.asset)

        atomic = converter.from_native_units(config.amount, config.asset)
        if atomic <= 0:
            raise ConfigurationError(f"Price must be positive: {config.amount} {config.asset}")

        self._config = config
        self._converter = converter
        self._atomic_amount = str(atomic)
        self._additional = [self._load_offer(offer) for offer in config.additional_schemes]
        self._facilitator = facilitator or FacilitatorClient(
            config.facilitator_url,
            api_key=config.api_key,
            timeout=config.facilitator_timeout,
        )

    @staticmethod
    def _load_offer(offer: PaymentRequirements | dict[str, Any]) -> PaymentRequirements:
        if isinstance(offer, PaymentRequirements):
            return offer
        try:
            return PaymentRequirements.model_validate(offer)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid additional payment offer: {e}") from e

    @property
    def config(self) -> PaywallConfig:
        return self._config

    @property
    def facilitator(self) -> FacilitatorClient:
        return self._facilitator

    async def close(self) -> None:
        await self._facilitator.close()

    def build_payment_requirements(self, resource: str) -> PaymentRequirements:
        """The shadowwire offer for a resource"""
        return PaymentRequirements(
            scheme=X402Config.SCHEME_SHADOWWIRE,
            network=X402Config.SOLANA_MAINNET,
            amount=self._atomic_amount,
            asset=self._config.asset,
            pay_to=self._config.pay_to,
            resource=resource,
            description=self._config.description,
            max_timeout_seconds=self._config.max_timeout_seconds,
            extra={
                "transferTypes": list(X402Config.TRANSFER_TYPES),
                "amountHidden": True,
            },
        )

    def create_payment_required(
        self,
        resource: str,
        error: str = "Payment Required",
        verify_error: str | None = None,
        settle_error: str | None = None,
    ) -> PaymentRequired:
        """Challenge document for a resource; identical inputs give identical output"""
        return PaymentRequired(
            x402_version=X402Config.X402_VERSION,
            accepts=[self.build_payment_requirements(resource), *self._additional],
            error=error,
            facilitator=self._config.facilitator_url,
            resource=ResourceInfo(
                url=resource,
                description=self._config.description,
                mime_type=self._config.mime_type,
            ),
            verify_error=verify_error,
            settle_error=settle_error,
        )

    def _reject(
        self,
        resource: str,
        verify_error: str | None = None,
        settle_error: str | None = None,
    ) -> PaywallDecision:
        body = self.create_payment_required(
            resource, verify_error=verify_error, settle_error=settle_error
        )
        return PaywallDecision(
            authorized=False,
            response=PaywallResponse(
                status_code=X402Config.PAYMENT_REQUIRED_STATUS,
                body=body.model_dump(mode="json", by_alias=True, exclude_none=True),
                headers=rejection_headers(),
            ),
        )

    async def authorize(self, request: PaywallRequest) -> PaywallDecision:
        """
        Decide whether a request has paid for its resource.

        Never raises for a rejection; every rejection is a PaywallDecision
        carrying the response to send.
        """
        resource = request.path or "/"
        header = request.header(X402Config.PAYMENT_HEADER)

        if not header:
            logger.info(f"No payment header for {resource}, sending challenge")
            return self._reject(resource)

        if payment_header_too_large(header):
            error = PaymentHeaderTooLargeError(payment_header_size(header))
            logger.warning(f"Rejecting {resource}: {error}")
            return PaywallDecision(
                authorized=False,
                response=PaywallResponse(
                    status_code=400,
                    body={"error": str(error)},
                    headers=rejection_headers(),
                ),
            )

        proof = decode_payment_proof(header)
        if proof is None:
            logger.warning(f"Rejecting {resource}: undecodable payment header")
            return self._reject(resource, verify_error="Invalid payment header")
        if not X402Config.is_supported_scheme(proof.scheme):
            error = UnsupportedSchemeError(proof.scheme)
            logger.warning(f"Rejecting {resource}: {error}")
            return self._reject(resource, verify_error=str(error))

        if proof.payload.resource is not None and proof.payload.resource != resource:
            logger.warning(
                f"Rejecting {resource}: proof is bound to {proof.payload.resource}"
            )
            return self._reject(
                resource,
                verify_error=(
                    f"Payment proof resource mismatch: expected {resource}, "
                    f"got {proof.payload.resource}"
                ),
            )

        requirement = self.build_payment_requirements(resource)

        verification = await self._facilitator.verify(header, requirement)
        if not verification.valid:
            return self._reject(
                resource, verify_error=verification.error or "Payment verification failed"
            )
        if verification.resource is not None and verification.resource != resource:
            return self._reject(
                resource,
                verify_error=(
                    f"Facilitator resource mismatch: expected {resource}, "
                    f"got {verification.resource}"
                ),
            )
        if verification.amount is not None and verification.amount < int(self._atomic_amount):
            return self._reject(
                resource,
                verify_error=(
                    f"Paid amount {verification.amount} is below the price {self._atomic_amount}"
                ),
            )

        settlement = await self._facilitator.settle(header, requirement)
        if not settlement.success:
            return self._reject(
                resource, settle_error=settlement.error or "Payment settlement failed"
            )

        payment = PaymentInfo(
            scheme=proof.scheme,
            network=proof.network,
            resource=resource,
            signature=verification.signature or proof.payload.signature,
            amount_hidden=verification.amount_hidden or proof.payload.amount_hidden,
            payer=verification.payer or proof.payload.sender,
            sender=proof.payload.sender,
            tx_hash=settlement.tx_hash,
            amount=settlement.amount,
            fee=settlement.fee,
            net=settlement.net,
        )
        logger.info(f"Authorized {resource}: payer={payment.payer}, tx={payment.tx_hash}")
        return PaywallDecision(authorized=True, payment=payment, settlement=settlement)

    async def notify_payment(self, payment: PaymentInfo) -> None:
        """Run the on_payment callback; its failures are logged and discarded"""
        callback = self._config.on_payment
        if callback is None:
            return
        try:
            result = callback(payment)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"on_payment callback failed: {e}", exc_info=True)

    async def __call__(
        self,
        request: PaywallRequest,
        call_next: Callable[[PaywallRequest], Awaitable[Any]],
    ) -> Any:
        """Middleware entry point: the handler's result, or the rejection response"""
        decision = await self.authorize(request)
        if not decision.authorized:
            return decision.response

        request.context[CONTEXT_KEY] = decision.payment
        await self.notify_payment(decision.payment)
        return await call_next(request)


def rejection_headers() -> dict[str, str]:
    """Headers carried by every paywall rejection"""
    return {
        X402Config.AUTHENTICATE_HEADER: X402Config.AUTHENTICATE_CHALLENGE,
        X402Config.PAYMENT_SCHEMES_HEADER: ",".join(X402Config.SUPPORTED_SCHEMES),
        "Cache-Control": "no-store",
        "Vary": X402Config.PAYMENT_HEADER,
    }

"""
X402Client - Pays x402 offers with ShadowWire private transfers
"""

import asyncio
import inspect
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol

from pydantic import ValidationError

from shadowwire_x402.config import X402Config
from shadowwire_x402.encoding import encode_payment_proof
from shadowwire_x402.exceptions import (
    InvalidAmountError,
    TransferError,
    UnknownAssetError,
    UnsupportedSchemeError,
    X402Error,
)
from shadowwire_x402.types import (
    FeeEstimate,
    PaymentProof,
    PaymentProofPayload,
    PaymentRequirements,
    PaymentResult,
    TransferMode,
    TransferRequest,
    TransferResult,
)

logger = logging.getLogger(__name__)


class TransferBackend(Protocol):
    """Transfer capability: moves value from the sender to a recipient"""

    async def transfer(self, request: TransferRequest) -> TransferResult:
        """Execute a transfer; may raise"""
        ...

    async def get_balance(self, account: str, asset: str) -> Any:
        """Shielded pool balance of an account"""
        ...

    def estimate_fee(self, amount: Decimal, asset: str) -> FeeEstimate:
        """Relayer fee for a transfer of ``amount`` token units"""
        ...


class UnitConverter(Protocol):
    """Converts between atomic units and the token units a backend accepts"""

    def to_native_units(self, amount: int | str, asset: str) -> Decimal: ...

    def from_native_units(self, amount: Decimal | str | int | float, asset: str) -> int: ...

    def is_known_asset(self, asset: str) -> bool: ...


class X402Client:
    """
    Core payment client for the ShadowWire x402 scheme.

    Owns the transfer capability: turns one offer into a completed transfer
    and an encoded X-Payment proof.
    """

    def __init__(
        self,
        backend: TransferBackend,
        sender: str,
        converter: UnitConverter,
        transfer_mode: TransferMode = "external",
        default_asset: str = X402Config.DEFAULT_ASSET,
        scheme: str = X402Config.SCHEME_SHADOWWIRE,
        network: str = X402Config.SOLANA_MAINNET,
        transfer_timeout: float = X402Config.DEFAULT_TRANSFER_TIMEOUT,
    ) -> None:
        """
        Initialize X402Client.

        Args:
            backend: Transfer backend
            sender: Sender account (the payer's wallet)
            converter: Unit converter; required, there is no fallback unit
            transfer_mode: "internal" (pool to pool) or "external"
            default_asset: Asset used by get_balance / estimate_fee
            scheme: Scheme this client pays
            network: Network stamped into proofs
            transfer_timeout: Seconds allowed for one transfer
        """
        if converter is None:
            raise ValueError("converter is required")
        self._backend = backend
        self._sender = sender
        self._converter = converter
        self._transfer_mode = transfer_mode
        self._default_asset = default_asset
        self._scheme = scheme
        self._network = network
        self._transfer_timeout = transfer_timeout

    @property
    def sender(self) -> str:
        return self._sender

    @property
    def scheme(self) -> str:
        return self._scheme

    def select_payment_requirements(
        self, accepts: list[PaymentRequirements]
    ) -> PaymentRequirements | None:
        """First offer whose scheme matches exactly, or None"""
        logger.info(f"Selecting payment requirements from {len(accepts)} options")
        for requirement in accepts:
            if requirement.scheme == self._scheme:
                logger.info(
                    f"Selected payment requirement: network={requirement.network}, "
                    f"scheme={requirement.scheme}, amount={requirement.amount}"
                )
                return requirement
        logger.warning(f"No offer matches scheme {self._scheme}")
        return None

    async def pay(self, requirement: PaymentRequirements | Mapping[str, Any]) -> PaymentResult:
        """
        Pay one offer.

        Never raises: unsupported schemes, invalid offers, unknown assets,
        transfer failures and timeouts all come back as
        ``PaymentResult(success=False, error=...)``.
        """
        scheme = requirement.get("scheme") if isinstance(requirement, Mapping) else requirement.scheme
        if scheme != self._scheme or not X402Config.is_supported_scheme(scheme):
            error = UnsupportedSchemeError(scheme)
            logger.warning(str(error))
            return PaymentResult(success=False, error=str(error))

        if isinstance(requirement, Mapping):
            try:
                requirement = PaymentRequirements.model_validate(requirement)
            except ValidationError as e:
                reason = "; ".join(err["msg"] for err in e.errors())
                return PaymentResult(success=False, error=f"Invalid payment requirement: {reason}")

        if requirement.pay_to == self._sender:
            return PaymentResult(success=False, error="Refusing to pay the sender's own account")

        try:
            amount = self._native_amount(requirement)
        except X402Error as e:
            logger.warning(f"Cannot pay offer: {e}")
            return PaymentResult(success=False, error=str(e))

        transfer_request = TransferRequest(
            sender=self._sender,
            recipient=requirement.pay_to,
            amount=amount,
            asset=requirement.asset,
            mode=self._transfer_mode,
        )
        logger.info(
            f"Transferring {amount} {requirement.asset} to {requirement.pay_to} "
            f"({self._transfer_mode})"
        )

        try:
            transfer = await self._transfer(transfer_request)
        except X402Error as e:
            logger.error(str(e))
            return PaymentResult(success=False, error=str(e))

        proof = PaymentProof(
            x402_version=X402Config.X402_VERSION,
            scheme=self._scheme,
            network=self._network,
            payload=PaymentProofPayload(
                signature=transfer.tx_signature,
                amount_hidden=transfer.amount_hidden,
                resource=requirement.resource,
                pay_to=requirement.pay_to,
                sender=self._sender,
            ),
        )
        logger.info(f"Payment created: signature={transfer.tx_signature}")
        return PaymentResult(
            success=True,
            transfer=transfer,
            payment_header=encode_payment_proof(proof),
        )

    def _native_amount(self, requirement: PaymentRequirements) -> Decimal:
        """Offer amount in token units

        Raises:
            InvalidAmountError: Amount is not a positive integer
            UnknownAssetError: Converter does not know the asset
        """
        amount = requirement.amount
        if not (amount.isascii() and amount.isdigit()) or int(amount) <= 0:
            raise InvalidAmountError()
        if not self._converter.is_known_asset(requirement.asset):
            raise UnknownAssetError(requirement.asset)
        native = self._converter.to_native_units(int(amount), requirement.asset)
        if native <= 0:
            raise InvalidAmountError()
        return native

    async def _transfer(self, request: TransferRequest) -> TransferResult:
        """Run the backend transfer under the transfer timeout

        Raises:
            TransferError: Backend raised, timed out or reported failure
        """
        try:
            transfer = await asyncio.wait_for(
                self._backend.transfer(request), timeout=self._transfer_timeout
            )
        except asyncio.TimeoutError:
            raise TransferError(f"Transfer timed out after {self._transfer_timeout:g}s")
        except Exception as e:
            raise TransferError(f"Transfer failed: {e}") from e

        if not transfer.success or not transfer.tx_signature:
            raise TransferError("ShadowWire transfer failed")
        return transfer

    async def get_balance(self, asset: str | None = None) -> Any:
        """Sender's shielded balance for an asset (default asset when omitted)"""
        return await self._backend.get_balance(self._sender, asset or self._default_asset)

    async def estimate_fee(self, amount: Decimal | str | int, asset: str | None = None) -> FeeEstimate:
        """Relayer fee for paying ``amount`` token units"""
        result = self._backend.estimate_fee(Decimal(str(amount)), asset or self._default_asset)
        if inspect.isawaitable(result):
            result = await result
        return result

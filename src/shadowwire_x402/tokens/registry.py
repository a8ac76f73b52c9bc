"""
Token registry - ShadowWire token mints and unit conversion
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from shadowwire_x402.exceptions import InvalidAmountError, UnknownAssetError

NATIVE_MINT = "Native"


@dataclass
class TokenInfo:
    """Token information"""

    symbol: str
    mint: str
    decimals: int


class TokenRegistry:
    """Registry of tokens transferable through ShadowWire pools"""

    _tokens: dict[str, TokenInfo] = {
        info.symbol: info
        for info in (
            TokenInfo("SOL", NATIVE_MINT, 9),
            TokenInfo("RADR", "CzFvsLdUazabdiu9TYXujj4EY495fG7VgJJ3vQs6bonk", 9),
            TokenInfo("USDC", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6),
            TokenInfo("ORE", "oreoU2P8bN6jkk3jbaiVxYnG1dCXcYxwhwyK9jSybcp", 11),
            TokenInfo("BONK", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", 5),
            TokenInfo("JIM", "H9muD33usLGYv1tHvxCVpFwwVSn27x67tBQYH1ANbonk", 9),
            TokenInfo("GODL", "GodL6KZ9uuUoQwELggtVzQkKmU1LfqmDokPibPeDKkhF", 11),
            TokenInfo("HUSTLE", "HUSTLFV3U5Km8u66rMQExh4nLy7unfKHedEXVK1WgSAG", 9),
            TokenInfo("ZEC", "A7bdiYdS5GjqGFtxf17ppRHtDKPkkRqbKtR27dxvQXaS", 8),
            TokenInfo("CRT", "CRTx1JouZhzSU6XytsE42UQraoGqiHgxabocVfARTy2s", 9),
            TokenInfo("BLACKCOIN", "J3rYdme789g1zAysfbH9oP4zjagvfVM2PX7KJgFDpump", 6),
            TokenInfo("GIL", "CyUgNnKPQLqFcheyGV8wmypnJqojA7NzsdJjTS4nUT2j", 6),
            TokenInfo("ANON", "D25bi7oHQjqkVrzbfuM6k2gzVNHTSpBLhtakDCzCCDUB", 9),
            TokenInfo("WLFI", "WLFinEv6ypjkczcS83FZqFpgFZYwQXutRbxGe7oC16g", 6),
            TokenInfo("USD1", "USD1ttGY1N17NEEHLmELoaybftRBUSErhqYiQzvEmuB", 6),
            TokenInfo("AOL", "2oQNkePakuPbHzrVVkQ875WHeewLHCd2cAwfwiLQbonk", 6),
            TokenInfo("IQLABS", "3uXACfojUrya7VH51jVC1DCHq3uzK4A7g469Q954LABS", 9),
        )
    }

    @classmethod
    def register_token(cls, token: TokenInfo) -> None:
        """Register a custom token

        Args:
            token: TokenInfo to register
        """
        token.symbol = token.symbol.upper()
        cls._tokens[token.symbol] = token

    @classmethod
    def get_token(cls, symbol: str) -> TokenInfo:
        """Get token information by symbol

        Raises:
            UnknownAssetError: If token does not exist
        """
        token = cls._tokens.get(symbol.upper())
        if token is None:
            raise UnknownAssetError(symbol)
        return token

    @classmethod
    def find_by_mint(cls, mint: str) -> TokenInfo | None:
        """Find token information by mint address"""
        for info in cls._tokens.values():
            if info.mint == mint:
                return info
        return None

    @classmethod
    def resolve(cls, asset: str) -> TokenInfo:
        """Resolve an offer's asset, given either as a symbol or as a mint address

        Raises:
            UnknownAssetError: If neither lookup matches
        """
        info = cls._tokens.get(asset.upper()) or cls.find_by_mint(asset)
        if info is None:
            raise UnknownAssetError(asset)
        return info

    @classmethod
    def all_symbols(cls) -> set[str]:
        """Return all known token symbols."""
        return set(cls._tokens)

    @classmethod
    def parse_price(cls, price: str) -> dict[str, Any]:
        """Parse price string into asset amount

        Args:
            price: Price string (e.g. "0.01 USDC")

        Returns:
            Dictionary containing amount (atomic units), asset, decimals and mint
        """
        parts = price.strip().split()
        if len(parts) != 2:
            raise ValueError(f"Invalid price format: {price}")

        amount_str, symbol = parts
        token = cls.get_token(symbol)
        amount = TokenUnitConverter().from_native_units(amount_str, token.symbol)

        return {
            "amount": amount,
            "asset": token.symbol,
            "decimals": token.decimals,
            "mint": token.mint,
        }


class TokenUnitConverter:
    """
    Converts between atomic units (what offers carry in ``amount``) and token
    units (what the transfer backend accepts), backed by TokenRegistry.
    """

    def is_known_asset(self, asset: str) -> bool:
        try:
            TokenRegistry.resolve(asset)
        except UnknownAssetError:
            return False
        return True

    def to_native_units(self, amount: int | str, asset: str) -> Decimal:
        """Atomic amount -> token units, e.g. 10000 USDC atoms -> Decimal('0.01')"""
        token = TokenRegistry.resolve(asset)
        try:
            atomic = int(amount)
        except (TypeError, ValueError):
            raise InvalidAmountError(f"Invalid payment amount: {amount!r}")
        return Decimal(atomic).scaleb(-token.decimals)

    def from_native_units(self, amount: Decimal | str | int | float, asset: str) -> int:
        """Token units -> atomic amount; fractions below one atom are truncated"""
        token = TokenRegistry.resolve(asset)
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid payment amount: {amount!r}")
        if not value.is_finite():
            raise InvalidAmountError(f"Invalid payment amount: {amount!r}")
        return int(value.scaleb(token.decimals))

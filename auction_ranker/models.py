"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .errors import AssetAmountParseError


@dataclass(frozen=True)
class AssetAmount:
    """A token quantity, written on-chain as ``<amount>@<symbol>``."""

    amount: Decimal
    symbol: str

    def __post_init__(self) -> None:
        if not self.amount.is_finite() or self.amount < 0:
            raise AssetAmountParseError(f"Invalid amount: {self.amount}")
        if not self.symbol or any(ch.isspace() for ch in self.symbol):
            raise AssetAmountParseError(f"Invalid symbol: {self.symbol!r}")

    @classmethod
    def parse(cls, text: str) -> AssetAmount:
        """Parse an amount string.

        Examples:
            "10@DFI" → AssetAmount(Decimal("10"), "DFI")
            "0.50000000@dTSLA" → AssetAmount(Decimal("0.50000000"), "dTSLA")
        """
        if not isinstance(text, str) or text.count("@") != 1:
            raise AssetAmountParseError(f"Expected '<amount>@<symbol>', got {text!r}")

        raw_amount, symbol = text.split("@")
        try:
            amount = Decimal(raw_amount)
        except InvalidOperation as e:
            raise AssetAmountParseError(f"Invalid amount in {text!r}") from e

        return cls(amount=amount, symbol=symbol)

    def __str__(self) -> str:
        return f"{self.amount}@{self.symbol}"


@dataclass(frozen=True)
class PoolPair:
    """Liquidity pool between two tokens with its spot reserve ratios."""

    symbol_a: str
    symbol_b: str
    reserve_a_per_b: Decimal
    reserve_b_per_a: Decimal

    def rate(self, symbol: str) -> Decimal:
        """Units of the opposite token that one unit of ``symbol`` is worth."""
        if symbol == self.symbol_a:
            return self.reserve_b_per_a
        if symbol == self.symbol_b:
            return self.reserve_a_per_b
        raise ValueError(f"{symbol} is not part of pool {self.symbol_a}-{self.symbol_b}")


@dataclass(frozen=True)
class HighestBid:
    amount: AssetAmount
    owner: str = ""


@dataclass(frozen=True)
class AuctionBatch:
    """One lot of collateral being liquidated within a vault."""

    vault_id: str
    index: int
    loan: AssetAmount
    collaterals: tuple[AssetAmount, ...] = ()
    highest_bid: HighestBid | None = None


@dataclass(frozen=True)
class Vault:
    vault_id: str
    state: str = ""
    batches: tuple[AuctionBatch, ...] = ()
    liquidation_height: int | None = None

    def batch(self, index: int) -> AuctionBatch | None:
        for batch in self.batches:
            if batch.index == index:
                return batch
        return None


@dataclass(frozen=True)
class ValuationResult:
    """Valuation of a single auction batch, in the reference unit."""

    vault_id: str
    batch_index: int
    loan: AssetAmount
    starting_bid: Decimal
    reward: Decimal
    diff: Decimal
    margin: Decimal
    max_price: Decimal
    liquidation_height: int | None = None
    url: str = ""

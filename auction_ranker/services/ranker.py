"""Margin computation, filtering, ranking and formatting, no I/O."""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..config import FilterConfig
from ..errors import MarginUndefined
from ..models import ValuationResult

HUNDRED = Decimal(100)


@dataclass(frozen=True)
class FilterPolicy:
    """Which valued auctions are worth reporting.

    ``min_diff`` and ``max_starting_bid`` are independent and disabled when
    None; with both unset only the margin threshold applies.
    """

    min_margin: Decimal = Decimal(0)
    min_diff: Decimal | None = None
    max_starting_bid: Decimal | None = None

    @classmethod
    def from_config(cls, config: FilterConfig) -> FilterPolicy:
        return cls(
            min_margin=config.min_margin,
            min_diff=config.min_diff,
            max_starting_bid=config.max_starting_bid,
        )

    def with_min_margin(self, min_margin: Decimal | None) -> FilterPolicy:
        if min_margin is None:
            return self
        return replace(self, min_margin=min_margin)

    def accepts(self, result: ValuationResult) -> bool:
        if result.margin < self.min_margin:
            return False
        if self.min_diff is not None and not result.diff > self.min_diff:
            return False
        if self.max_starting_bid is not None and not result.starting_bid < self.max_starting_bid:
            return False
        return True


def compute_margin(starting_bid: Decimal, reward: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(diff, margin)`` where margin is the percentage gain over the bid.

    Examples:
        (100, 120) → (20, 20)
        (100, 0)   → (-100, -100)
    """
    if starting_bid <= 0:
        raise MarginUndefined(f"Starting bid must be positive, got {starting_bid}")
    diff = reward - starting_bid
    return diff, diff / starting_bid * HUNDRED


def rank(results: list[ValuationResult]) -> list[ValuationResult]:
    """Sort by margin, best first; equal margins keep their input order."""
    return sorted(results, key=lambda r: r.margin, reverse=True)


def format_amount(value: Decimal, symbol: str, places: int = 8) -> str:
    """Fixed-precision amount with its unit, e.g. ``"105.00000000 DUSD"``."""
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f} {symbol}"


def format_percentage(value: Decimal, places: int = 2) -> str:
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}%"


def format_result(
    result: ValuationResult, reference_symbol: str, places: int = 8
) -> dict[str, Any]:
    """Render a valuation as a JSON-ready record."""
    bid_token = result.loan.symbol
    return {
        "url": result.url,
        "vaultId": result.vault_id,
        "batchIndex": result.batch_index,
        "bidToken": bid_token,
        "minBid": format_amount(result.loan.amount, bid_token, places),
        "startingBid": format_amount(result.starting_bid, reference_symbol, places),
        "reward": format_amount(result.reward, reference_symbol, places),
        "diff": format_amount(result.diff, reference_symbol, places),
        "margin": format_percentage(result.margin),
        "maxPrice": format_amount(result.max_price, bid_token, places),
        "maxBlockNumber": result.liquidation_height,
    }

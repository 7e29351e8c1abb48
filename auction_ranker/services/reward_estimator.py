"""Collateral reward valuation."""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from ..models import AssetAmount
from .price_oracle import PoolPriceOracle, gather_or_cancel


class RewardEstimator:
    def __init__(self, oracle: PoolPriceOracle) -> None:
        self._oracle = oracle

    async def reward_value(self, collaterals: Iterable[AssetAmount | str]) -> Decimal:
        """Total reference-unit value of the collateral offered as reward.

        Any failed conversion fails the whole sum; a partial sum would
        misstate the margin.
        """
        assets = [
            c if isinstance(c, AssetAmount) else AssetAmount.parse(c)
            for c in collaterals
        ]
        prices = await gather_or_cancel(
            *(self._oracle.price_in_reference_unit(a.amount, a.symbol) for a in assets)
        )
        return sum(prices, Decimal(0))

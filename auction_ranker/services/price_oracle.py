"""Pool-pair price oracle: converts token amounts into the reference unit."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from decimal import Decimal
from typing import TypeVar

from ..config import PricingConfig
from ..errors import PoolNotFound, PriceLookupFailure, RpcError
from ..interfaces.data_source import AuctionDataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_or_cancel(*aws: Awaitable[T]) -> list[T]:
    """Run ``aws`` concurrently; on the first failure cancel the rest.

    Pending lookups are cancelled and awaited before the error is re-raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class PoolPriceOracle:
    """Value tokens in the reference unit (e.g. DUSD) from pool reserve ratios.

    Lookup order for a token ``X``:

    1. ``X`` is the reference unit: the amount itself.
    2. ``X`` is the base token: pool (reference, base).
    3. direct pool (X, reference).
    4. when the direct pool does not exist: pools (X, base) and
       (reference, base), fetched concurrently.
    """

    def __init__(self, data_source: AuctionDataSource, config: PricingConfig) -> None:
        self._source = data_source
        self.reference_symbol = config.reference_symbol
        self.base_symbol = config.base_symbol

    async def price_in_reference_unit(self, amount: Decimal, symbol: str) -> Decimal:
        """Value ``amount`` of ``symbol`` in the reference unit.

        Raises:
            PriceLookupFailure: no conversion path, or the upstream lookup
                failed for a reason other than a missing direct pool.
        """
        amount = Decimal(amount)
        if symbol == self.reference_symbol:
            return amount

        try:
            if symbol == self.base_symbol:
                pool = await self._source.get_pool_pair(
                    self.reference_symbol, self.base_symbol
                )
                return amount * pool.rate(self.base_symbol)

            try:
                pool = await self._source.get_pool_pair(symbol, self.reference_symbol)
                return amount * pool.rate(symbol)
            except PoolNotFound:
                logger.debug(
                    "No %s-%s pool, converting via %s",
                    symbol, self.reference_symbol, self.base_symbol,
                )
            return await self._two_hop(amount, symbol)
        except PoolNotFound as e:
            raise PriceLookupFailure(symbol, "no conversion path") from e
        except (RpcError, ValueError) as e:
            raise PriceLookupFailure(symbol, str(e)) from e

    async def _two_hop(self, amount: Decimal, symbol: str) -> Decimal:
        to_base, base_to_reference = await gather_or_cancel(
            self._source.get_pool_pair(symbol, self.base_symbol),
            self._source.get_pool_pair(self.reference_symbol, self.base_symbol),
        )
        return amount * to_base.rate(symbol) * base_to_reference.rate(self.base_symbol)

    async def reference_to_asset(self, amount: Decimal, symbol: str) -> Decimal:
        """Convert a reference-unit value into units of ``symbol``."""
        unit_price = await self.price_in_reference_unit(Decimal(1), symbol)
        if unit_price <= 0:
            raise PriceLookupFailure(symbol, "zero unit price")
        return Decimal(amount) / unit_price

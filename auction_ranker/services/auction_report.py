"""Auction report orchestration: values every open batch and ranks them."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

from ..config import AppConfig
from ..errors import MarginUndefined, PriceLookupFailure, RpcError, UpstreamUnavailable
from ..interfaces.data_source import AuctionDataSource
from ..models import AuctionBatch, ValuationResult
from .bid_estimator import BidEstimator
from .price_oracle import PoolPriceOracle
from .ranker import FilterPolicy, compute_margin, format_result, rank
from .reward_estimator import RewardEstimator


class AuctionReportService:
    """Builds the ranked auction list for one request.

    Batches are valued one after another with an awaited cool-down between
    them, so a single request never bursts the upstream node. Failures local
    to one batch skip that batch; failures to list auctions or fetch a vault
    abort the request with ``UpstreamUnavailable``.
    """

    def __init__(
        self,
        data_source: AuctionDataSource,
        config: AppConfig,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._source = data_source
        self._pricing = config.pricing
        self._explorer_url = config.auctions.explorer_url.rstrip("/")
        self._cool_down = config.auctions.cool_down_ms / 1000
        self._policy = FilterPolicy.from_config(config.auctions.filters)
        self._logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

        self.oracle = PoolPriceOracle(data_source, config.pricing)
        self.bid_estimator = BidEstimator(self.oracle, config.pricing)
        self.reward_estimator = RewardEstimator(self.oracle)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def auction_url(self, vault_id: str, batch_index: int) -> str:
        return f"{self._explorer_url}/vaults/{vault_id}/auctions/{batch_index}"

    @staticmethod
    def _validate(limit: int, min_margin: Decimal | None) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        if min_margin is not None and (not min_margin.is_finite() or min_margin < 0):
            raise ValueError(f"min_margin must be a non-negative number, got {min_margin}")

    async def _list_batches(self, limit: int) -> list[AuctionBatch]:
        try:
            return await self._source.list_open_auctions(limit)
        except RpcError as e:
            raise UpstreamUnavailable("Could not list auctions") from e

    async def _value_batch(self, batch: AuctionBatch) -> ValuationResult:
        try:
            vault = await self._source.get_vault(batch.vault_id)
        except RpcError as e:
            raise UpstreamUnavailable(f"Could not fetch vault {batch.vault_id}") from e

        loan = batch.loan
        starting_bid = await self.bid_estimator.starting_bid(
            vault, batch.index, loan.amount, loan.symbol
        )
        reward = await self.reward_estimator.reward_value(batch.collaterals)
        diff, margin = compute_margin(starting_bid, reward)
        max_price = (
            await self.oracle.reference_to_asset(reward, loan.symbol)
            * self._pricing.max_price_haircut
        )

        return ValuationResult(
            vault_id=batch.vault_id,
            batch_index=batch.index,
            loan=loan,
            starting_bid=starting_bid,
            reward=reward,
            diff=diff,
            margin=margin,
            max_price=max_price,
            liquidation_height=vault.liquidation_height,
            url=self.auction_url(batch.vault_id, batch.index),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def build_report(
        self, limit: int, min_margin: Decimal | None = None
    ) -> list[ValuationResult]:
        """Value up to ``limit`` open auction batches and return the ranked survivors.

        Args:
            limit: Number of open auction batches to fetch from the node
                (not a cap on the number of results).
            min_margin: Minimum margin percentage; overrides the configured
                threshold when given.
        """
        self._validate(limit, min_margin)
        policy = self._policy.with_min_margin(min_margin)

        batches = await self._list_batches(limit)
        self._logger.info("Valuing %d auction batches", len(batches))

        results: list[ValuationResult] = []
        for position, batch in enumerate(batches):
            if position and self._cool_down:
                await self._sleep(self._cool_down)

            try:
                result = await self._value_batch(batch)
            except PriceLookupFailure as e:
                self._logger.error(
                    "Skipping auction %s/%d: %s (cause: %s)",
                    batch.vault_id, batch.index, e, e.__cause__,
                )
                continue
            except MarginUndefined as e:
                self._logger.warning(
                    "Skipping auction %s/%d: %s", batch.vault_id, batch.index, e
                )
                continue

            if policy.accepts(result):
                self._logger.info(
                    "Auction %s/%d margin %.2f%% accepted",
                    batch.vault_id, batch.index, result.margin,
                )
                results.append(result)
            else:
                self._logger.debug(
                    "Auction %s/%d margin %.2f%% filtered out",
                    batch.vault_id, batch.index, result.margin,
                )

        return rank(results)

    async def render_report(
        self, limit: int, min_margin: Decimal | None = None
    ) -> list[dict[str, Any]]:
        """Ranked report as JSON-ready records."""
        results = await self.build_report(limit, min_margin)
        return [
            format_result(r, self._pricing.reference_symbol, self._pricing.display_places)
            for r in results
        ]

"""Starting bid estimation from auction history."""
from __future__ import annotations

import logging
from decimal import Decimal

from ..config import PricingConfig
from ..models import Vault
from .price_oracle import PoolPriceOracle

logger = logging.getLogger(__name__)


class BidEstimator:
    """Minimum viable bid for an auction batch, in the reference unit.

    A first bid must cover the loan plus ``first_bid_premium`` (5%); later
    bids must beat the highest bid by ``min_bid_increment`` (1%).
    """

    def __init__(self, oracle: PoolPriceOracle, config: PricingConfig) -> None:
        self._oracle = oracle
        self.first_bid_premium = config.first_bid_premium
        self.min_bid_increment = config.min_bid_increment

    async def starting_bid(
        self,
        vault: Vault,
        batch_index: int,
        loan_amount: Decimal,
        loan_symbol: str,
    ) -> Decimal:
        batch = vault.batch(batch_index)
        highest_bid = batch.highest_bid if batch else None

        if highest_bid is None:
            loan_value = await self._oracle.price_in_reference_unit(loan_amount, loan_symbol)
            return loan_value * self.first_bid_premium

        if highest_bid.amount.symbol != loan_symbol:
            logger.warning(
                "Highest bid %s on %s/%d is not in loan token %s; valuing it as %s",
                highest_bid.amount, vault.vault_id, batch_index, loan_symbol, loan_symbol,
            )

        bid_value = await self._oracle.price_in_reference_unit(
            highest_bid.amount.amount, loan_symbol
        )
        return bid_value * self.min_bid_increment

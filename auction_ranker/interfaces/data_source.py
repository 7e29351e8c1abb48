"""Auction data source protocol for read-only blockchain loan/pool state."""
from typing import Protocol

from ..models import AuctionBatch, PoolPair, Vault


class AuctionDataSource(Protocol):
    """Abstract interface for the upstream node.

    ``get_pool_pair`` must raise ``PoolNotFound`` when no pool exists for the
    pair, so callers can distinguish a missing pool from any other failure.
    """

    async def list_open_auctions(self, limit: int) -> list[AuctionBatch]: ...

    async def get_vault(self, vault_id: str) -> Vault: ...

    async def get_pool_pair(self, symbol_a: str, symbol_b: str) -> PoolPair: ...

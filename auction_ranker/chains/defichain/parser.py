"""Pure parsing functions for DeFiChain RPC payloads — no I/O."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from ...models import AssetAmount, AuctionBatch, HighestBid, PoolPair, Vault


def pool_pair_id(symbol_a: str, symbol_b: str) -> str:
    """Pool identifier as accepted by ``getpoolpair``.

    Examples:
        ("DUSD", "DFI") → "DUSD-DFI"
    """
    return f"{symbol_a}-{symbol_b}"


def to_decimal(value: Any) -> Decimal:
    """Convert an RPC number (Decimal, int, str) to Decimal."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal number: {value!r}") from e


def parse_highest_bid(raw: dict[str, Any] | None) -> HighestBid | None:
    if not raw or not raw.get("amount"):
        return None
    return HighestBid(
        amount=AssetAmount.parse(raw["amount"]),
        owner=raw.get("owner", ""),
    )


def parse_batch(raw: dict[str, Any], vault_id: str) -> AuctionBatch:
    """Parse one entry of a vault's ``batches`` list."""
    return AuctionBatch(
        vault_id=vault_id,
        index=int(raw.get("index", 0)),
        loan=AssetAmount.parse(raw["loan"]),
        collaterals=tuple(AssetAmount.parse(c) for c in raw.get("collaterals", [])),
        highest_bid=parse_highest_bid(raw.get("highestBid")),
    )


def parse_liquidation_height(raw: dict[str, Any]) -> int | None:
    height = raw.get("liquidationHeight")
    return int(height) if height is not None else None


def parse_vault(raw: dict[str, Any]) -> Vault:
    """Parse a ``getvault`` result.

    Vaults that are not in liquidation carry no ``batches`` and no
    ``liquidationHeight``.
    """
    vault_id = raw.get("vaultId", "")
    return Vault(
        vault_id=vault_id,
        state=raw.get("state", ""),
        batches=tuple(parse_batch(b, vault_id) for b in raw.get("batches", [])),
        liquidation_height=parse_liquidation_height(raw),
    )


def flatten_auctions(raw: list[dict[str, Any]]) -> list[AuctionBatch]:
    """Flatten a ``listauctions`` result into batches tagged with their vault id."""
    batches: list[AuctionBatch] = []
    for auction in raw:
        vault_id = auction.get("vaultId", "")
        for batch in auction.get("batches", []):
            batches.append(parse_batch(batch, vault_id))
    return batches


def parse_pool_pair(raw: dict[str, Any], symbol_a: str, symbol_b: str) -> PoolPair:
    """Parse a ``getpoolpair`` result, keyed by pool id.

    The node returns ``{"<pool id>": {"symbol": "A-B", "reserveA/reserveB": ...,
    "reserveB/reserveA": ..., ...}}``.
    """
    if not raw:
        raise ValueError(f"Empty pool pair response for {pool_pair_id(symbol_a, symbol_b)}")

    pair = next(iter(raw.values()))
    return PoolPair(
        symbol_a=symbol_a,
        symbol_b=symbol_b,
        reserve_a_per_b=to_decimal(pair["reserveA/reserveB"]),
        reserve_b_per_a=to_decimal(pair["reserveB/reserveA"]),
    )

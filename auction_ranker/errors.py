"""Exception hierarchy for the auction ranker."""
from __future__ import annotations


class AuctionRankerError(Exception):
    """Base class for all auction ranker errors."""


class ConfigurationMissing(AuctionRankerError, ValueError):
    """A required configuration setting is absent or empty."""

    def __init__(self, setting: str) -> None:
        super().__init__(f"Missing required config setting: {setting}")
        self.setting = setting


class AssetAmountParseError(AuctionRankerError, ValueError):
    """Raised for strings that are not of the form ``<amount>@<symbol>``."""


class RpcError(AuctionRankerError, RuntimeError):
    """Upstream JSON-RPC call failed."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class PoolNotFound(RpcError):
    """The node has no pool pair for the requested symbols."""


class PriceLookupFailure(AuctionRankerError):
    """An asset could not be converted into the reference unit."""

    def __init__(self, symbol: str, reason: str = "") -> None:
        message = f"Price lookup failed for {symbol}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.symbol = symbol


class UpstreamUnavailable(AuctionRankerError):
    """Auction list or vault could not be fetched."""


class MarginUndefined(AuctionRankerError, ArithmeticError):
    """Margin cannot be computed for a non-positive starting bid."""

"""Protocol interfaces for the auction ranker."""
from .data_source import AuctionDataSource

__all__ = ["AuctionDataSource"]

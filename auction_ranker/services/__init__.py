"""Service modules"""
from .auction_report import AuctionReportService
from .bid_estimator import BidEstimator
from .price_oracle import PoolPriceOracle
from .reward_estimator import RewardEstimator

__all__ = ["AuctionReportService", "BidEstimator", "PoolPriceOracle", "RewardEstimator"]

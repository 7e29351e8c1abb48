"""DeFiChain loan auction valuation and ranking service."""

__version__ = "0.1.0"

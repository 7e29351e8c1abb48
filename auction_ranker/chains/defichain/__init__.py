"""DeFiChain node data source."""
from .client import DefichainClient

__all__ = ["DefichainClient"]

"""DeFiChain JSON-RPC client with endpoint fallback."""
from __future__ import annotations

import asyncio
import functools
import json
import logging
import ssl
from decimal import Decimal
from typing import Any

import aiohttp
import certifi

from ...config import RpcConfig
from ...errors import PoolNotFound, RpcError
from ...models import AuctionBatch, PoolPair, Vault
from . import parser

logger = logging.getLogger(__name__)

POOL_NOT_FOUND = "Pool not found"

# Reserve ratios and amounts must not pass through float.
_decimal_loads = functools.partial(json.loads, parse_float=Decimal)

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError)


class DefichainClient:
    """DeFiChain node RPC client with automatic endpoint fallback.

    Transport failures move on to the next configured endpoint; error
    responses from a node that answered are raised immediately.
    """

    def __init__(self, config: RpcConfig) -> None:
        self.endpoints = list(config.endpoints)
        self.timeout = config.timeout
        self.current_rpc_index = 0
        self._request_id = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        self._request_id += 1
        payload = {
            "jsonrpc": "1.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json(
                            loads=_decimal_loads, content_type=None
                        )
            except _TRANSPORT_ERRORS as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index

            error = result.get("error") if isinstance(result, dict) else None
            if error:
                message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                code = error.get("code") if isinstance(error, dict) else None
                if POOL_NOT_FOUND.lower() in message.lower():
                    raise PoolNotFound(message, code)
                raise RpcError(f"RPC Error in {method}: {message}", code)

            if not isinstance(result, dict):
                raise RpcError(f"Unexpected RPC response for {method}: {result!r}")
            return result.get("result")

        raise RpcError(f"All RPC endpoints failed. Last error: {last_error}")

    async def list_open_auctions(self, limit: int) -> list[AuctionBatch]:
        """List open auctions, flattened into batches."""
        result = await self.rpc_call("listauctions", [{"limit": limit}])
        try:
            return parser.flatten_auctions(result or [])
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"Malformed listauctions response: {e}") from e

    async def get_vault(self, vault_id: str) -> Vault:
        result = await self.rpc_call("getvault", [vault_id])
        try:
            return parser.parse_vault(result or {})
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"Malformed getvault response for {vault_id}: {e}") from e

    async def get_pool_pair(self, symbol_a: str, symbol_b: str) -> PoolPair:
        """Fetch a pool pair by symbols; raises PoolNotFound if it does not exist."""
        pool_id = parser.pool_pair_id(symbol_a, symbol_b)
        result = await self.rpc_call("getpoolpair", [pool_id])
        try:
            return parser.parse_pool_pair(result or {}, symbol_a, symbol_b)
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"Malformed getpoolpair response for {pool_id}: {e}") from e

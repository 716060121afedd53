from __future__ import annotations

import itertools
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from ether_balance_checker.transactions import to_quantity

logger = logging.getLogger(__name__)


class RpcError(RuntimeError):
    def __init__(self, method: str, message: str, code: Optional[int] = None) -> None:
        super().__init__(f"{method} failed: {message}")
        self.method = method
        self.code = code


class RpcClient:
    """JSON-RPC client for an execution node.

    Each call opens its own ``httpx.AsyncClient``, so concurrent calls
    overlap and the client can be reused across event loops.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self._ids = itertools.count(1)

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(method, str(exc)) from exc
        except ValueError as exc:
            raise RpcError(method, f"invalid JSON response: {exc}") from exc

        latency_ms = (time.perf_counter() - started) * 1000
        logger.debug("%s %s -> %.1fms", method, params, latency_ms)

        if not isinstance(body, dict):
            raise RpcError(method, "response is not a JSON object")
        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(method, str(error.get("message", error)), error.get("code"))
            raise RpcError(method, str(error))
        return body.get("result")

    async def get_balance(self, address: str, block_number: int) -> int:
        return to_quantity(await self.call("eth_getBalance", [address, hex(block_number)]))

    async def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def block_number(self) -> int:
        return to_quantity(await self.call("eth_blockNumber"))

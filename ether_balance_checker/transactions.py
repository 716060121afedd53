from __future__ import annotations

import asyncio
import inspect
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


class MissingReceiptError(RuntimeError):
    pass


class MissingTransactionError(LookupError):
    pass


class TransactionNode(Protocol):
    async def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]: ...

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]: ...


def to_quantity(value: Any) -> int:
    """Convert an int, decimal string or 0x-prefixed hex string to an int."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"Expected an integer or numeric string, got {value!r}")
    if isinstance(value, int):
        return value

    text = value.strip()
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    try:
        if digits[:2].lower() == "0x":
            number = int(digits[2:], 16)
        else:
            number = int(digits, 10)
    except ValueError:
        raise ValueError(f"Not a numeric quantity: {value!r}") from None
    return -number if negative else number


def is_transaction_hash(value: Any) -> bool:
    return isinstance(value, str) and bool(_TX_HASH_RE.match(value))


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    block_number: int
    gas_used: int
    from_address: Optional[str] = None
    effective_gas_price: Optional[int] = None
    status: Optional[int] = None

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> "TransactionReceipt":
        effective_gas_price = payload.get("effectiveGasPrice")
        status = payload.get("status")
        return cls(
            transaction_hash=str(payload["transactionHash"]),
            block_number=to_quantity(payload["blockNumber"]),
            gas_used=to_quantity(payload["gasUsed"]),
            from_address=payload.get("from"),
            effective_gas_price=(
                None if effective_gas_price is None else to_quantity(effective_gas_price)
            ),
            status=None if status is None else to_quantity(status),
        )


class SubmittedTransaction:
    def __init__(
        self,
        node: TransactionNode,
        tx_hash: str,
        from_address: str,
        gas_price: Optional[int] = None,
        *,
        timeout_seconds: float = 60.0,
        poll_interval_seconds: float = 1.0,
    ) -> None:
        self.node = node
        self.hash = tx_hash
        self.from_address = from_address
        self.gas_price = gas_price
        self.timeout_seconds = timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds

    @classmethod
    async def from_hash(
        cls,
        node: TransactionNode,
        tx_hash: str,
        *,
        timeout_seconds: float = 60.0,
        poll_interval_seconds: float = 1.0,
    ) -> "SubmittedTransaction":
        payload = await node.get_transaction(tx_hash)
        if payload is None:
            raise MissingTransactionError(f"Transaction {tx_hash} is unknown to the node")

        gas_price = payload.get("gasPrice")
        return cls(
            node,
            tx_hash,
            str(payload["from"]),
            None if gas_price is None else to_quantity(gas_price),
            timeout_seconds=timeout_seconds,
            poll_interval_seconds=poll_interval_seconds,
        )

    async def wait(self) -> Optional[TransactionReceipt]:
        deadline = time.monotonic() + self.timeout_seconds
        while True:
            payload = await self.node.get_transaction_receipt(self.hash)
            if payload is not None:
                return TransactionReceipt.from_rpc(payload)
            if time.monotonic() >= deadline:
                logger.debug("No receipt for %s after %.1fs", self.hash, self.timeout_seconds)
                return None
            await asyncio.sleep(self.poll_interval_seconds)

    def __repr__(self) -> str:
        return f"SubmittedTransaction(hash={self.hash!r}, from_address={self.from_address!r})"


async def resolve_transaction(subject: Any, node: TransactionNode) -> SubmittedTransaction:
    """Turn a transaction handle into a submitted transaction.

    The handle is a submitted transaction, an awaitable that yields one
    (a pending submission), or a transaction hash. Callables are invoked
    first and their result resolved the same way.
    """
    if callable(subject):
        subject = subject()
    if inspect.isawaitable(subject):
        subject = await subject
    if is_transaction_hash(subject):
        subject = await SubmittedTransaction.from_hash(node, subject)
    if not isinstance(subject, SubmittedTransaction):
        raise TypeError(f"Expected a transaction, got {subject!r}")
    return subject

from __future__ import annotations

import asyncio
from typing import List, Protocol, Sequence


class BalanceNode(Protocol):
    async def get_balance(self, address: str, block_number: int) -> int: ...


class StateTracker:
    def __init__(self, node: BalanceNode) -> None:
        self.node = node

    async def capture_state(self, addresses: Sequence[str], block_number: int) -> List[int]:
        balances = await asyncio.gather(
            *(self.node.get_balance(address, block_number) for address in addresses)
        )
        return [int(balance) for balance in balances]

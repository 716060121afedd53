from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ether_balance_checker.accounts import resolve_addresses, same_address
from ether_balance_checker.state_tracker import StateTracker
from ether_balance_checker.transactions import (
    MissingReceiptError,
    SubmittedTransaction,
    TransactionReceipt,
    resolve_transaction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceChangeOptions:
    # When set, the sender's delta keeps the fee it paid.
    include_fee: bool = False


async def get_balance_changes(
    transaction: Any,
    accounts: Sequence[Any],
    node: Any,
    options: Optional[BalanceChangeOptions] = None,
) -> List[int]:
    """Return each account's balance change caused by ``transaction``.

    The change is measured between the block the transaction was mined in
    and the block before it. Unless ``options.include_fee`` is set, the fee
    paid by the sender is added back to every position holding the sender.
    """
    if not accounts:
        raise ValueError("At least one account is required")

    tx = await resolve_transaction(transaction, node)
    receipt = await tx.wait()
    if receipt is None:
        raise MissingReceiptError(f"Transaction {tx.hash} has no receipt; was it mined?")

    block_number = receipt.block_number
    addresses = await resolve_addresses(accounts)

    tracker = StateTracker(node)
    balances_after, balances_before, tx_fees = await asyncio.gather(
        tracker.capture_state(addresses, block_number),
        tracker.capture_state(addresses, block_number - 1),
        get_tx_fees(addresses, tx, receipt, options),
    )
    logger.debug(
        "Balance changes for %s at block %d: fees=%s", tx.hash, block_number, tx_fees
    )

    return [
        after - before + fee
        for after, before, fee in zip(balances_after, balances_before, tx_fees)
    ]


async def get_tx_fees(
    addresses: Sequence[str],
    tx: SubmittedTransaction,
    receipt: TransactionReceipt,
    options: Optional[BalanceChangeOptions] = None,
) -> List[int]:
    include_fee = options is not None and options.include_fee
    sender = receipt.from_address or tx.from_address

    async def _fee_for(address: str) -> int:
        if include_fee:
            return 0
        if not same_address(address, sender):
            return 0
        gas_price = receipt.effective_gas_price
        if gas_price is None:
            gas_price = tx.gas_price
        if gas_price is None:
            raise ValueError(f"No gas price known for transaction {tx.hash}")
        return receipt.gas_used * gas_price

    return list(await asyncio.gather(*(_fee_for(address) for address in addresses)))

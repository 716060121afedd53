"""Chai-style balance change assertions.

    await expect(tx, node).change_ether_balances([alice, bob], [-100, 100])
    await expect(tx, node).not_.change_ether_balance(alice, 0)

The negation flag is read when the assertion method is called, before any
node request is made.
"""

from __future__ import annotations

from typing import Any, Awaitable, Optional, Sequence

from ether_balance_checker.accounts import resolve_address, resolve_addresses
from ether_balance_checker.balance_changes import BalanceChangeOptions, get_balance_changes
from ether_balance_checker.invariant_checker import build_assert, check_balance_changes
from ether_balance_checker.transactions import to_quantity


class Expectation:
    def __init__(self, subject: Any, node: Any, negated: bool = False) -> None:
        self.subject = subject
        self.node = node
        self.negated = negated

    @property
    def not_(self) -> "Expectation":
        return Expectation(self.subject, self.node, negated=not self.negated)

    def _resolve_subject(self) -> Any:
        subject = self.subject
        if callable(subject):
            subject = subject()
        return subject

    def change_ether_balances(
        self,
        accounts: Sequence[Any],
        balance_changes: Sequence[Any],
        options: Optional[BalanceChangeOptions] = None,
    ) -> Awaitable[None]:
        negated = self.negated
        if not accounts:
            raise ValueError("At least one account is required")
        if len(accounts) != len(balance_changes):
            raise ValueError(
                f"Got {len(accounts)} accounts but {len(balance_changes)} expected balance changes"
            )
        expected = [to_quantity(change) for change in balance_changes]
        subject = self._resolve_subject()

        async def _evaluate() -> None:
            addresses = await resolve_addresses(accounts)
            actual_changes = await get_balance_changes(subject, addresses, self.node, options)
            check_balance_changes(actual_changes, addresses, expected, negated)

        return _evaluate()

    def change_ether_balance(
        self,
        account: Any,
        balance_change: Any,
        options: Optional[BalanceChangeOptions] = None,
    ) -> Awaitable[None]:
        negated = self.negated
        expected = to_quantity(balance_change)
        subject = self._resolve_subject()

        async def _evaluate() -> None:
            address = await resolve_address(account)
            (actual_change,) = await get_balance_changes(subject, [address], self.node, options)
            build_assert(negated)(
                actual_change == expected,
                lambda: (
                    f'Expected the ether balance of "{address}" to change by {expected} wei, '
                    f"but it changed by {actual_change} wei"
                ),
                lambda: (
                    f'Expected the ether balance of "{address}" NOT to change by {expected} wei, '
                    "but it did"
                ),
            )

        return _evaluate()


def expect(subject: Any, node: Any) -> Expectation:
    return Expectation(subject, node)

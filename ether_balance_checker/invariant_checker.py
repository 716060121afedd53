from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence


@dataclass
class InvariantResult:
    name: str
    passed: bool
    message: str


class AssertionMismatch(AssertionError):
    pass


def build_assert(negated: bool) -> Callable[[bool, Callable[[], str], Callable[[], str]], None]:
    """Return an assert function bound to a fixed negation sense.

    Message factories are only called when the assertion fails, and only the
    one matching ``negated``.
    """

    def assert_(
        condition: bool,
        message: Callable[[], str],
        negated_message: Callable[[], str],
    ) -> None:
        if negated and condition:
            raise AssertionMismatch(negated_message())
        if not negated and not condition:
            raise AssertionMismatch(message())

    return assert_


def ordinal(number: int) -> str:
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def mismatch_lines(
    actual_changes: Sequence[int],
    addresses: Sequence[str],
    expected_changes: Sequence[int],
) -> List[str]:
    return [
        f"Expected the ether balance of {addresses[i]} (the {ordinal(i + 1)} address in the list) "
        f"to change by {expected_changes[i]} wei, but it changed by {change} wei"
        for i, change in enumerate(actual_changes)
        if change != expected_changes[i]
    ]


def unexpected_match_lines(
    actual_changes: Sequence[int],
    addresses: Sequence[str],
    expected_changes: Sequence[int],
) -> List[str]:
    return [
        f"Expected the ether balance of {addresses[i]} (the {ordinal(i + 1)} address in the list) "
        f"NOT to change by {expected_changes[i]} wei, but it did"
        for i, change in enumerate(actual_changes)
        if change == expected_changes[i]
    ]


def check_balance_changes(
    actual_changes: Sequence[int],
    addresses: Sequence[str],
    expected_changes: Sequence[int],
    negated: bool = False,
) -> None:
    if not len(actual_changes) == len(addresses) == len(expected_changes):
        raise ValueError(
            f"Length mismatch: {len(actual_changes)} changes, {len(addresses)} addresses, "
            f"{len(expected_changes)} expected changes"
        )

    assert_ = build_assert(negated)
    assert_(
        all(change == expected_changes[i] for i, change in enumerate(actual_changes)),
        lambda: "\n".join(mismatch_lines(actual_changes, addresses, expected_changes)),
        lambda: "\n".join(unexpected_match_lines(actual_changes, addresses, expected_changes)),
    )


class InvariantChecker:
    def check_balance_changes(
        self,
        actual_changes: Sequence[int],
        addresses: Sequence[str],
        expected_changes: Sequence[int],
        negated: bool = False,
    ) -> InvariantResult:
        name = "balance_changes_not_matched" if negated else "balance_changes_matched"
        try:
            check_balance_changes(actual_changes, addresses, expected_changes, negated)
        except AssertionMismatch as exc:
            return InvariantResult(name=name, passed=False, message=str(exc))

        if negated:
            message = "At least one balance change differed from its expected value"
        else:
            message = f"All {len(actual_changes)} balance changes matched"
        return InvariantResult(name=name, passed=True, message=message)

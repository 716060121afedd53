from __future__ import annotations

import asyncio
import inspect
import re
from typing import Any, List, Sequence

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class AddressResolutionError(ValueError):
    pass


async def resolve_address(account: Any) -> str:
    """Return the address string behind an account reference.

    Accepts a hex address string, an object exposing an ``address``
    attribute, or an object with a (sync or async) ``get_address()`` method.
    """
    if isinstance(account, str):
        address = account
    elif callable(getattr(account, "get_address", None)):
        address = account.get_address()
        if inspect.isawaitable(address):
            address = await address
    elif isinstance(getattr(account, "address", None), str):
        address = account.address
    else:
        raise AddressResolutionError(f"Cannot resolve an address from {account!r}")

    if not is_address(address):
        raise AddressResolutionError(f"Invalid address: {address!r}")
    return address


async def resolve_addresses(accounts: Sequence[Any]) -> List[str]:
    return list(await asyncio.gather(*(resolve_address(account) for account in accounts)))


def same_address(left: str | None, right: str | None) -> bool:
    if left is None or right is None:
        return False
    return left.lower() == right.lower()


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))

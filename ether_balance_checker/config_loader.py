from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ether_balance_checker.accounts import is_address
from ether_balance_checker.transactions import is_transaction_hash, to_quantity


@dataclass
class CheckSpec:
    name: str
    transaction: str
    accounts: List[str]
    changes: List[int]
    include_fee: bool = False
    negate: bool = False


@dataclass
class RunConfig:
    rpc_url: str
    checks: List[CheckSpec]
    timeout_seconds: float = 5.0
    receipt_timeout_seconds: float = 60.0
    poll_interval_seconds: float = 1.0
    include_fee: bool = False


class ConfigValidationError(ValueError):
    pass


def load_config(path: str | Path) -> RunConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigValidationError(f"Config file not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ConfigValidationError("Config root must be a YAML mapping")

    rpc_url = raw.get("rpc_url")
    if not isinstance(rpc_url, str) or not rpc_url.strip():
        raise ConfigValidationError("`rpc_url` is required and must be a non-empty string")

    include_fee = raw.get("include_fee", False)
    if not isinstance(include_fee, bool):
        raise ConfigValidationError("`include_fee` must be a boolean")

    checks_raw = raw.get("checks")
    if not isinstance(checks_raw, list) or not checks_raw:
        raise ConfigValidationError("`checks` is required and must be a non-empty list")

    checks = [_parse_check(idx, conf, include_fee) for idx, conf in enumerate(checks_raw)]

    names = [check.name for check in checks]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigValidationError(f"Duplicate check names: {', '.join(duplicates)}")

    return RunConfig(
        rpc_url=rpc_url.rstrip("/"),
        checks=checks,
        timeout_seconds=_positive_float(raw, "timeout_seconds", 5.0),
        receipt_timeout_seconds=_positive_float(raw, "receipt_timeout_seconds", 60.0),
        poll_interval_seconds=_positive_float(raw, "poll_interval_seconds", 1.0),
        include_fee=include_fee,
    )


def _positive_float(raw: Dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigValidationError(f"`{key}` must be a positive number")
    return float(value)


def _parse_check(idx: int, conf: Any, default_include_fee: bool) -> CheckSpec:
    where = f"checks[{idx}]"
    if not isinstance(conf, dict):
        raise ConfigValidationError(f"{where} must be a mapping")

    name = conf.get("name", f"check_{idx + 1}")
    if not isinstance(name, str) or not name.strip():
        raise ConfigValidationError(f"{where}.name must be a non-empty string")

    transaction = conf.get("transaction")
    if not is_transaction_hash(transaction):
        raise ConfigValidationError(f"{where}.transaction must be a 0x-prefixed 32-byte hash")

    accounts = conf.get("accounts")
    if not isinstance(accounts, list) or not accounts:
        raise ConfigValidationError(f"{where}.accounts must be a non-empty list")
    for account_idx, account in enumerate(accounts):
        if not is_address(account):
            raise ConfigValidationError(
                f"{where}.accounts[{account_idx}] must be a 0x-prefixed 20-byte address"
            )

    changes_raw = conf.get("changes")
    if not isinstance(changes_raw, list) or len(changes_raw) != len(accounts):
        raise ConfigValidationError(
            f"{where}.changes must be a list with one entry per account ({len(accounts)})"
        )
    changes: List[int] = []
    for change_idx, change in enumerate(changes_raw):
        try:
            changes.append(to_quantity(change))
        except (TypeError, ValueError) as exc:
            raise ConfigValidationError(f"{where}.changes[{change_idx}]: {exc}") from exc

    include_fee = conf.get("include_fee", default_include_fee)
    negate = conf.get("negate", False)
    if not isinstance(include_fee, bool):
        raise ConfigValidationError(f"{where}.include_fee must be a boolean")
    if not isinstance(negate, bool):
        raise ConfigValidationError(f"{where}.negate must be a boolean")

    return CheckSpec(
        name=name,
        transaction=transaction,
        accounts=accounts,
        changes=changes,
        include_fee=include_fee,
        negate=negate,
    )

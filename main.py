from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ether_balance_checker.accounts import resolve_addresses
from ether_balance_checker.balance_changes import BalanceChangeOptions, get_balance_changes
from ether_balance_checker.config_loader import CheckSpec, ConfigValidationError, RunConfig, load_config
from ether_balance_checker.invariant_checker import InvariantChecker, InvariantResult
from ether_balance_checker.reporter import Reporter
from ether_balance_checker.rpc_client import RpcClient
from ether_balance_checker.transactions import SubmittedTransaction

logger = logging.getLogger(__name__)


def run(
    config_path: str,
    report_file: str | None = None,
    rpc_url: str | None = None,
) -> int:
    try:
        config = load_config(config_path)
    except ConfigValidationError as exc:
        print(f"Config validation failed: {exc}")
        return 2

    client = RpcClient(rpc_url or config.rpc_url, timeout_seconds=config.timeout_seconds)
    invariant_checker = InvariantChecker()
    reporter = Reporter(use_color=True)

    for check in config.checks:
        logger.info("Running check %s for %s", check.name, check.transaction)
        try:
            result = asyncio.run(_run_check(config, check, client, invariant_checker))
        except Exception as exc:
            logger.debug("Check %s failed", check.name, exc_info=True)
            reporter.add_error(check.name, exc)
            continue
        reporter.add_invariant(check.name, result)

    reporter.print()
    if report_file:
        reporter.write(report_file)

    return 1 if reporter.has_failures else 0


async def _run_check(
    config: RunConfig,
    check: CheckSpec,
    client: RpcClient,
    invariant_checker: InvariantChecker,
) -> InvariantResult:
    negated = check.negate
    tx = await SubmittedTransaction.from_hash(
        client,
        check.transaction,
        timeout_seconds=config.receipt_timeout_seconds,
        poll_interval_seconds=config.poll_interval_seconds,
    )
    addresses = await resolve_addresses(check.accounts)
    actual_changes = await get_balance_changes(
        tx, addresses, client, BalanceChangeOptions(include_fee=check.include_fee)
    )
    return invariant_checker.check_balance_changes(
        actual_changes, addresses, check.changes, negated=negated
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Assert ether balance changes caused by mined transactions")
    parser.add_argument("config", help="Path to YAML checks config")
    parser.add_argument("--report-file", help="Optional output path for plain-text report")
    parser.add_argument("--rpc-url", help="Override the node URL from the config")
    parser.add_argument("--verbose", action="store_true", help="Log node requests and fees")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    exit_code = run(args.config, report_file=args.report_file, rpc_url=args.rpc_url)
    sys.exit(exit_code)

from ether_balance_checker.accounts import AddressResolutionError, resolve_address, resolve_addresses
from ether_balance_checker.assertions import Expectation, expect
from ether_balance_checker.balance_changes import BalanceChangeOptions, get_balance_changes, get_tx_fees
from ether_balance_checker.config_loader import CheckSpec, ConfigValidationError, RunConfig, load_config
from ether_balance_checker.invariant_checker import (
    AssertionMismatch,
    InvariantChecker,
    InvariantResult,
    build_assert,
    check_balance_changes,
)
from ether_balance_checker.reporter import Reporter
from ether_balance_checker.rpc_client import RpcClient, RpcError
from ether_balance_checker.state_tracker import StateTracker
from ether_balance_checker.transactions import (
    MissingReceiptError,
    MissingTransactionError,
    SubmittedTransaction,
    TransactionReceipt,
    resolve_transaction,
    to_quantity,
)

__all__ = [
    "AddressResolutionError",
    "AssertionMismatch",
    "BalanceChangeOptions",
    "CheckSpec",
    "ConfigValidationError",
    "Expectation",
    "InvariantChecker",
    "InvariantResult",
    "MissingReceiptError",
    "MissingTransactionError",
    "Reporter",
    "RpcClient",
    "RpcError",
    "RunConfig",
    "StateTracker",
    "SubmittedTransaction",
    "TransactionReceipt",
    "build_assert",
    "check_balance_changes",
    "expect",
    "get_balance_changes",
    "get_tx_fees",
    "load_config",
    "resolve_address",
    "resolve_addresses",
    "resolve_transaction",
    "to_quantity",
]

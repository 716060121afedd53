from __future__ import annotations

import hashlib
import os
import re
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

_lock = Lock()
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

TRANSFER_GAS = 21000
DEFAULT_GAS_PRICE = 1_000_000_000
DEFAULT_ACCOUNTS: Dict[str, int] = {
    "0x" + "a" * 40: 10**21,
    "0x" + "b" * 40: 10**21,
}
STATE: Dict[str, Any] = {
    # history[n] holds every balance after block n was mined
    "history": [dict(DEFAULT_ACCOUNTS)],
    "transactions": {},
    "receipts": {},
}


class RpcMethodError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _latest_block() -> int:
    return len(STATE["history"]) - 1


def _parse_block_tag(tag: Any) -> int:
    if tag in ("latest", "pending", "safe", "finalized"):
        return _latest_block()
    if tag == "earliest":
        return 0
    if not isinstance(tag, str) or not tag.startswith("0x"):
        raise RpcMethodError(-32602, f"invalid block tag: {tag!r}")
    try:
        block_number = int(tag, 16)
    except ValueError:
        raise RpcMethodError(-32602, f"invalid block tag: {tag!r}") from None
    if block_number > _latest_block():
        raise RpcMethodError(-32000, "header not found")
    return block_number


def _eth_get_balance(params: List[Any]) -> str:
    if len(params) < 1 or not isinstance(params[0], str) or not _ADDRESS_RE.match(params[0]):
        raise RpcMethodError(-32602, "invalid address")
    block_number = _parse_block_tag(params[1] if len(params) > 1 else "latest")
    balance = STATE["history"][block_number].get(params[0].lower(), 0)
    return hex(balance)


def _eth_get_transaction_by_hash(params: List[Any]) -> Optional[Dict[str, Any]]:
    tx_hash = params[0] if params else None
    return STATE["transactions"].get(tx_hash)


def _eth_get_transaction_receipt(params: List[Any]) -> Optional[Dict[str, Any]]:
    tx_hash = params[0] if params else None
    return STATE["receipts"].get(tx_hash)


_METHODS = {
    "eth_chainId": lambda _params: hex(1337),
    "eth_blockNumber": lambda _params: hex(_latest_block()),
    "eth_getBalance": _eth_get_balance,
    "eth_getTransactionByHash": _eth_get_transaction_by_hash,
    "eth_getTransactionReceipt": _eth_get_transaction_receipt,
}


def _handle_rpc(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        return {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}

    request_id = body.get("id")
    method = body.get("method")
    params = body.get("params") or []
    handler = _METHODS.get(method)
    if handler is None:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": -32601, "message": f"Method {method} not found"},
        }

    with _lock:
        try:
            result = handler(params)
        except RpcMethodError as exc:
            return {
                "jsonrpc": "2.0",
                "id": request_id,
                "error": {"code": exc.code, "message": exc.message},
            }
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _handle_transfer(body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    from_address = body.get("from")
    to_address = body.get("to")
    value = body.get("value")
    gas_price = body.get("gas_price", DEFAULT_GAS_PRICE)

    if not isinstance(from_address, str) or not _ADDRESS_RE.match(from_address):
        return 400, {"error": "`from` must be an address"}
    if not isinstance(to_address, str) or not _ADDRESS_RE.match(to_address):
        return 400, {"error": "`to` must be an address"}
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 400, {"error": "`value` must be a non-negative integer"}
    if isinstance(gas_price, bool) or not isinstance(gas_price, int) or gas_price < 0:
        return 400, {"error": "`gas_price` must be a non-negative integer"}

    sender = from_address.lower()
    recipient = to_address.lower()
    fee = TRANSFER_GAS * gas_price

    with _lock:
        balances = dict(STATE["history"][-1])
        if sender not in balances:
            return 404, {"error": "Sender not found"}
        if balances[sender] < value + fee:
            return 400, {"error": "Insufficient funds"}

        balances[sender] -= value + fee
        balances[recipient] = balances.get(recipient, 0) + value
        STATE["history"].append(balances)
        block_number = _latest_block()

        tx_hash = "0x" + hashlib.sha256(
            f"{block_number}:{sender}:{recipient}:{value}".encode("utf-8")
        ).hexdigest()
        STATE["transactions"][tx_hash] = {
            "hash": tx_hash,
            "from": from_address,
            "to": to_address,
            "value": hex(value),
            "gas": hex(TRANSFER_GAS),
            "gasPrice": hex(gas_price),
            "blockNumber": hex(block_number),
        }
        STATE["receipts"][tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(block_number),
            "from": from_address,
            "to": to_address,
            "gasUsed": hex(TRANSFER_GAS),
            "effectiveGasPrice": hex(gas_price),
            "status": "0x1",
        }

        return 200, {"hash": tx_hash, "block_number": block_number, "fee": fee}


def _handle_reset(body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    accounts = body.get("accounts", DEFAULT_ACCOUNTS)
    if not isinstance(accounts, dict):
        return 400, {"error": "`accounts` must be a mapping"}

    normalized: Dict[str, int] = {}
    for address, balance in accounts.items():
        if not isinstance(address, str) or not _ADDRESS_RE.match(address):
            return 400, {"error": f"Invalid address {address!r}"}
        if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
            return 400, {"error": f"Balance of {address} must be a non-negative integer"}
        normalized[address.lower()] = balance

    with _lock:
        STATE["history"] = [normalized]
        STATE["transactions"] = {}
        STATE["receipts"] = {}

    return 200, {"status": "reset", "accounts": dict(normalized)}


app = Flask(__name__)


@app.get("/health")
def health() -> Any:
    return jsonify({"status": "ok", "block_number": _latest_block()}), 200


@app.post("/")
def rpc() -> Any:
    body = request.get_json(silent=True)
    return jsonify(_handle_rpc(body)), 200


@app.post("/transfer")
def transfer() -> Any:
    body = request.get_json(silent=True) or {}
    status, payload = _handle_transfer(body)
    return jsonify(payload), status


@app.post("/reset")
def reset() -> Any:
    body = request.get_json(silent=True) or {}
    status, payload = _handle_reset(body)
    return jsonify(payload), status


if __name__ == "__main__":
    host = os.getenv("NODE_API_HOST", "0.0.0.0")
    port = int(os.getenv("NODE_API_PORT", "8545"))
    app.run(host=host, port=port, debug=False)

import asyncio
import json
import unittest

import httpx

from ether_balance_checker.rpc_client import RpcClient, RpcError

ALICE = "0x" + "a" * 40


class RpcClientTests(unittest.IsolatedAsyncioTestCase):
    def _client(self, handler) -> RpcClient:
        self.requests = []

        def recording_handler(request: httpx.Request):
            self.requests.append(request)
            return handler(request)

        return RpcClient(
            "http://node.local:8545/",
            timeout_seconds=2.0,
            transport=httpx.MockTransport(recording_handler),
        )

    @staticmethod
    def _result(value):
        return lambda request: httpx.Response(
            200, json={"jsonrpc": "2.0", "id": json.loads(request.content)["id"], "result": value}
        )

    async def test_get_balance_sends_hex_block(self) -> None:
        client = self._client(self._result("0xde0b6b3a7640000"))

        balance = await client.get_balance(ALICE, 17)

        self.assertEqual(balance, 10**18)
        request = self.requests[0]
        body = json.loads(request.content)
        self.assertEqual(request.url.host, "node.local")
        self.assertEqual(request.url.port, 8545)
        self.assertEqual(body["method"], "eth_getBalance")
        self.assertEqual(body["params"], [ALICE, "0x11"])

    async def test_missing_receipt_is_none(self) -> None:
        client = self._client(self._result(None))
        self.assertIsNone(await client.get_transaction_receipt("0x" + "00" * 32))

    async def test_block_number(self) -> None:
        client = self._client(self._result("0x2a"))
        self.assertEqual(await client.block_number(), 42)

    async def test_request_ids_increase(self) -> None:
        client = self._client(self._result("0x1"))
        await client.call("eth_chainId")
        await client.call("eth_chainId")
        ids = [json.loads(request.content)["id"] for request in self.requests]
        self.assertEqual(ids, [1, 2])

    async def test_rpc_error_is_raised(self) -> None:
        client = self._client(
            lambda request: httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "header not found"}},
            )
        )

        with self.assertRaises(RpcError) as ctx:
            await client.call("eth_getBalance", [ALICE, "0x99"])

        self.assertEqual(ctx.exception.code, -32000)
        self.assertIn("header not found", str(ctx.exception))

    async def test_http_status_error_is_wrapped(self) -> None:
        client = self._client(lambda request: httpx.Response(502, text="bad gateway"))

        with self.assertRaisesRegex(RpcError, "eth_blockNumber failed"):
            await client.call("eth_blockNumber")

    async def test_transport_error_is_wrapped(self) -> None:
        def refuse(request: httpx.Request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(refuse)

        with self.assertRaisesRegex(RpcError, "eth_blockNumber failed: connection refused"):
            await client.call("eth_blockNumber")

    async def test_concurrent_calls_overlap(self) -> None:
        in_flight = 0
        max_in_flight = 0

        async def slow_balance(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            body = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x1"})

        client = RpcClient("http://node.local", transport=httpx.MockTransport(slow_balance))

        balances = await asyncio.gather(*(client.get_balance(ALICE, block) for block in range(4)))

        self.assertEqual(balances, [1, 1, 1, 1])
        self.assertEqual(max_in_flight, 4)


if __name__ == "__main__":
    unittest.main()

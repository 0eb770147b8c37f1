"""JSON-RPC clients for the ERC-4337 bundler and paymaster."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from gasless_agentkit.errors import BundlerError

logger = logging.getLogger("gasless_agentkit.wallet.bundler")

_request_ids = itertools.count(1)


class JsonRpcClient:
    """Posts JSON-RPC 2.0 requests, one short-lived AsyncClient per call."""

    def __init__(self, url: str, timeout: float = 30.0) -> None:
        self.url = url
        self.timeout = timeout

    async def call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(_request_ids),
            "method": method,
            "params": params,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(self.url, json=payload)
            resp.raise_for_status()
            body = resp.json()

        if body.get("error"):
            error = body["error"]
            logger.warning("%s failed: %s", method, error)
            raise BundlerError(error.get("code"), error.get("message", str(error)))
        return body.get("result")


class BundlerClient(JsonRpcClient):
    def __init__(self, url: str, entry_point: str, timeout: float = 30.0) -> None:
        super().__init__(url, timeout)
        self.entry_point = entry_point

    async def estimate_user_operation_gas(self, user_op: dict) -> dict:
        return await self.call("eth_estimateUserOperationGas", [user_op, self.entry_point])

    async def send_user_operation(self, user_op: dict) -> str:
        return await self.call("eth_sendUserOperation", [user_op, self.entry_point])

    async def get_user_operation_receipt(self, user_op_hash: str) -> dict | None:
        return await self.call("eth_getUserOperationReceipt", [user_op_hash])


class PaymasterClient(JsonRpcClient):
    async def sponsor_user_operation(self, user_op: dict) -> dict:
        """Ask the paymaster to pay for *user_op*.

        Returns ``paymasterAndData`` and, when the paymaster computed them,
        the gas limits to use.
        """
        return await self.call(
            "pm_sponsorUserOperation",
            [user_op, {"mode": "SPONSORED", "calculateGasLimits": True}],
        )

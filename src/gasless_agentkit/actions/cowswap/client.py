"""CoW Protocol order book REST client and EIP-712 payloads."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from web3 import Web3

from gasless_agentkit.actions.base import get_integrations
from gasless_agentkit.chains import ZERO_ADDRESS
from gasless_agentkit.errors import AgentkitError
from gasless_agentkit.wallet.abi import hexstr

logger = logging.getLogger("gasless_agentkit.actions.cowswap")

APP_CODE = "0xGasless Agentkit"
VAULT_RELAYER = "0xC92E8bdf79f0507f65a392b0ab4667716BFE0110"
SETTLEMENT_CONTRACT = "0x9008D19f58AAbD9eD0D60971565AA8510560ab41"

# chain_id -> order book API path segment
API_NETWORKS: dict[int, str] = {1: "mainnet", 100: "xdai", 43114: "avalanche"}
# chain_id -> explorer / swap UI path segment
UI_NETWORKS: dict[int, str] = {1: "mainnet", 100: "gnosis", 43114: "avalanche"}

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

ORDER_TYPE = [
    {"name": "sellToken", "type": "address"},
    {"name": "buyToken", "type": "address"},
    {"name": "receiver", "type": "address"},
    {"name": "sellAmount", "type": "uint256"},
    {"name": "buyAmount", "type": "uint256"},
    {"name": "validTo", "type": "uint32"},
    {"name": "appData", "type": "bytes32"},
    {"name": "feeAmount", "type": "uint256"},
    {"name": "kind", "type": "string"},
    {"name": "partiallyFillable", "type": "bool"},
    {"name": "sellTokenBalance", "type": "string"},
    {"name": "buyTokenBalance", "type": "string"},
]

CANCELLATIONS_TYPE = [{"name": "orderUids", "type": "bytes[]"}]


class CowApiError(AgentkitError):
    """A non-2xx answer from the order book."""

    def __init__(self, status_code: int, error_type: str | None, description: str):
        self.status_code = status_code
        self.error_type = error_type
        self.description = description
        label = f"{error_type}: " if error_type else ""
        super().__init__(f"CowSwap API error ({status_code}): {label}{description}")


# ---------------------------------------------------------------------------
# App data and typed data
# ---------------------------------------------------------------------------


def app_data() -> tuple[str, str]:
    """Return the app-data JSON document and its keccak hash."""
    document = json.dumps(
        {"appCode": APP_CODE, "metadata": {}, "version": "1.1.0"},
        separators=(",", ":"),
        sort_keys=True,
    )
    return document, hexstr(Web3.keccak(text=document))


def domain(chain_id: int) -> dict[str, Any]:
    return {
        "name": "Gnosis Protocol",
        "version": "v2",
        "chainId": chain_id,
        "verifyingContract": SETTLEMENT_CONTRACT,
    }


def order_typed_data(chain_id: int, order: dict[str, Any]) -> dict[str, Any]:
    """The EIP-712 message an order owner signs."""
    message = {
        "sellToken": Web3.to_checksum_address(order["sellToken"]),
        "buyToken": Web3.to_checksum_address(order["buyToken"]),
        "receiver": Web3.to_checksum_address(order.get("receiver") or ZERO_ADDRESS),
        "sellAmount": int(order["sellAmount"]),
        "buyAmount": int(order["buyAmount"]),
        "validTo": int(order["validTo"]),
        "appData": order["appDataHash"],
        "feeAmount": int(order["feeAmount"]),
        "kind": order["kind"],
        "partiallyFillable": bool(order["partiallyFillable"]),
        "sellTokenBalance": order["sellTokenBalance"],
        "buyTokenBalance": order["buyTokenBalance"],
    }
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, "Order": ORDER_TYPE},
        "primaryType": "Order",
        "domain": domain(chain_id),
        "message": message,
    }


def cancellation_typed_data(chain_id: int, order_uids: list[str]) -> dict[str, Any]:
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, "OrderCancellations": CANCELLATIONS_TYPE},
        "primaryType": "OrderCancellations",
        "domain": domain(chain_id),
        "message": {"orderUids": list(order_uids)},
    }


def build_order(
    *,
    sell_token: str,
    buy_token: str,
    sell_amount: int,
    buy_amount: int,
    valid_to: int,
    partially_fillable: bool = False,
) -> dict[str, Any]:
    """A sell order in the order book's JSON shape, ready to be signed."""
    document, digest = app_data()
    return {
        "sellToken": sell_token,
        "buyToken": buy_token,
        "receiver": ZERO_ADDRESS,
        "sellAmount": str(sell_amount),
        "buyAmount": str(buy_amount),
        "validTo": valid_to,
        "appData": document,
        "appDataHash": digest,
        "feeAmount": "0",
        "kind": "sell",
        "partiallyFillable": partially_fillable,
        "sellTokenBalance": "erc20",
        "buyTokenBalance": "erc20",
    }


def order_from_quote(quote: dict[str, Any], slippage_bps: int) -> dict[str, Any]:
    """Turn a quote into a fee-less order with slippage applied to the buy side."""
    sell_amount = int(quote["sellAmount"]) + int(quote.get("feeAmount") or 0)
    buy_amount = int(quote["buyAmount"]) * (10_000 - slippage_bps) // 10_000
    return build_order(
        sell_token=quote["sellToken"],
        buy_token=quote["buyToken"],
        sell_amount=sell_amount,
        buy_amount=buy_amount,
        valid_to=int(quote["validTo"]),
    )


# ---------------------------------------------------------------------------
# REST client
# ---------------------------------------------------------------------------


class CowClient:
    """Thin async wrapper over ``/api/v1`` of the CoW order book."""

    def __init__(self, chain_id: int, base_url: str | None = None, timeout: float | None = None):
        if chain_id not in API_NETWORKS:
            raise ValueError(f"CowSwap is not available on chain ID {chain_id}")
        settings = get_integrations()
        root = (base_url or settings.cow_api_url).rstrip("/")
        self.chain_id = chain_id
        self.base_url = f"{root}/{API_NETWORKS[chain_id]}/api/v1"
        self.timeout = timeout or settings.http_timeout

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            resp = await client.request(method, path, **kwargs)
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise CowApiError(
                resp.status_code,
                body.get("errorType"),
                body.get("description") or resp.text or resp.reason_phrase,
            )
        if not resp.content:
            return None
        return resp.json()

    async def get_quote(
        self,
        *,
        sell_token: str,
        buy_token: str,
        sell_amount: int,
        owner: str,
        valid_for: int,
    ) -> dict[str, Any]:
        document, digest = app_data()
        body = {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "from": owner,
            "receiver": owner,
            "kind": "sell",
            "sellAmountBeforeFee": str(sell_amount),
            "validFor": valid_for,
            "appData": document,
            "appDataHash": digest,
            "signingScheme": "eip712",
            "partiallyFillable": False,
        }
        logger.debug("Requesting CowSwap quote %s -> %s", sell_token, buy_token)
        data = await self._request("POST", "/quote", json=body)
        return data["quote"]

    async def post_order(self, order: dict[str, Any], signature: str, owner: str) -> str:
        body = {**order, "signature": signature, "signingScheme": "eip712", "from": owner}
        uid = await self._request("POST", "/orders", json=body)
        logger.info("Posted CowSwap order %s", uid)
        return uid

    async def get_order(self, uid: str) -> dict[str, Any]:
        return await self._request("GET", f"/orders/{uid}")

    async def get_orders(self, owner: str, limit: int = 10, offset: int = 0) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"/account/{owner}/orders", params={"limit": limit, "offset": offset}
        )

    async def cancel_orders(self, order_uids: list[str], signature: str) -> None:
        await self._request(
            "DELETE",
            "/orders",
            json={"orderUids": order_uids, "signature": signature, "signingScheme": "eip712"},
        )

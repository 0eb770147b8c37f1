"""Client for the remote wallet service used in server mode."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from web3 import Web3

from gasless_agentkit.errors import ServerWalletError
from gasless_agentkit.types import Transaction, TransactionResponse
from gasless_agentkit.wallet.provider import get_web3

logger = logging.getLogger("gasless_agentkit.services.server_wallet")


@dataclass
class ServerWallet:
    id: int
    agentkit_id: int
    smart_address: str
    account_index: int
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ServerWallet:
        return cls(
            id=data.get("id", 0),
            agentkit_id=data.get("agentkitId", 0),
            smart_address=data["smartAddress"],
            account_index=int(data["accountIndex"]),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


@dataclass
class ServerTransactionLog:
    id: int
    agentkit_id: int
    wallet_id: int
    from_address: str
    to: str
    chain_id: int
    status: str
    transaction_hash: str | None = None
    user_op_hash: str | None = None
    raw_tx: dict[str, str] | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ServerTransactionLog:
        return cls(
            id=data.get("id", 0),
            agentkit_id=data.get("agentkitId", 0),
            wallet_id=data.get("walletId", 0),
            from_address=data.get("from", ""),
            to=data.get("to", ""),
            chain_id=int(data.get("chainId", 0)),
            status=data.get("status", ""),
            transaction_hash=data.get("transactionHash"),
            user_op_hash=data.get("userOpHash"),
            raw_tx=data.get("rawTx"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


class ServerWalletService:
    """Talks to ``{server_url}/api/agentkit/v1`` with an ``x-api-key`` header."""

    def __init__(self, api_key: str, server_url: str, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.server_url}/api/agentkit/v1",
            headers={"Content-Type": "application/json", "x-api-key": self.api_key},
            timeout=self.timeout,
        )

    async def list_wallets(self) -> list[ServerWallet]:
        try:
            async with self._client() as client:
                resp = await client.get("/wallets")
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ServerWalletError(f"Failed to list wallets: {exc.response.text}") from exc
        except httpx.HTTPError as exc:
            raise ServerWalletError(f"Failed to list wallets: {exc}") from exc
        return [ServerWallet.from_api(item) for item in payload]

    async def get_wallet(self, index: int) -> ServerWallet | None:
        for wallet in await self.list_wallets():
            if wallet.account_index == index:
                return wallet
        return None

    async def send_transaction(self, wallet_index: int, tx: Transaction) -> TransactionResponse:
        body = {"to": tx.to, "data": tx.data or "0x", "value": str(tx.value or 0)}
        try:
            async with self._client() as client:
                resp = await client.post(f"/wallets/{wallet_index}/send-transaction", json=body)
                resp.raise_for_status()
                result = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Server wallet %s rejected transaction: %s", wallet_index, exc.response.text)
            return TransactionResponse(success=False, error=f"Transaction failed: {exc.response.text}")
        except httpx.HTTPError as exc:
            logger.error("Server wallet %s request failed: %s", wallet_index, exc)
            return TransactionResponse(success=False, error=str(exc))

        if not result.get("success"):
            return TransactionResponse(success=False, error=result.get("error") or "Transaction failed")

        receipt = result.get("receipt") or {}
        return TransactionResponse(
            success=True,
            tx_hash=result.get("txHash"),
            user_op_hash=receipt.get("userOpHash"),
            message=result.get("message"),
            receipt=receipt or None,
        )

    async def get_transactions(self) -> list[ServerTransactionLog]:
        try:
            async with self._client() as client:
                resp = await client.get("/transactions")
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise ServerWalletError(f"Failed to get transactions: {exc}") from exc
        return [ServerTransactionLog.from_api(item) for item in payload.get("transactions", [])]


class ServerWalletAccount:
    """The account handle actions receive in server mode.

    Holds no key material; the address is looked up on the server every
    time it is needed.
    """

    def __init__(
        self,
        service: ServerWalletService,
        chain_id: int,
        wallet_index: int,
        web3: Web3 | None = None,
    ) -> None:
        self.service = service
        self.chain_id = chain_id
        self.wallet_index = wallet_index
        self._web3 = web3

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            self._web3 = get_web3(self.chain_id)
        return self._web3

    async def get_wallet(self) -> ServerWallet | None:
        return await self.service.get_wallet(self.wallet_index)

    async def get_address(self) -> str:
        wallet = await self.get_wallet()
        if wallet is None:
            raise ServerWalletError(f"No wallet found at index {self.wallet_index}")
        return wallet.smart_address

    async def send_transaction(self, tx: Transaction) -> TransactionResponse:
        return await self.service.send_transaction(self.wallet_index, tx)

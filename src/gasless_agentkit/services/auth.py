"""In-memory API-key authority used by API-key mode."""

from __future__ import annotations

import logging
from typing import Protocol

from eth_account import Account

from gasless_agentkit.config import ApiKeyEntry, AuthConfig
from gasless_agentkit.types import AuthVerificationResponse, CredentialSnapshot

logger = logging.getLogger("gasless_agentkit.services.auth")

AVALANCHE_RPC_URL = "https://api.avax.network/ext/bc/C/rpc"

# Development keys; a real deployment supplies its own through AuthConfig.
_DEMO_KEYS = {
    "test-api-key-123": (
        "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"
    ),
    "demo-key-456": (
        "0xabcdef1234567890abcdef1234567890abcdef1234567890abcdef1234567890"
    ),
}


class CredentialAuthority(Protocol):
    async def verify_api_key(self, api_key: str) -> AuthVerificationResponse: ...


class ApiKeyStore:
    """Maps API keys to the wallet credentials they unlock.

    Unknown keys are rejected rather than issued a fresh wallet.
    """

    def __init__(self, include_demo_keys: bool = True) -> None:
        self._keys: dict[str, tuple[str, str, int]] = {}
        if include_demo_keys:
            for api_key, private_key in _DEMO_KEYS.items():
                self.add_api_key(api_key, private_key)

    @classmethod
    def from_config(cls, auth: AuthConfig) -> ApiKeyStore:
        store = cls(include_demo_keys=not auth.keys)
        for entry in auth.keys:
            store.add_entry(entry)
        return store

    def add_api_key(
        self,
        api_key: str,
        private_key: str,
        rpc_url: str = AVALANCHE_RPC_URL,
        chain_id: int = 43114,
    ) -> None:
        self._keys[api_key] = (private_key, rpc_url, chain_id)

    def add_entry(self, entry: ApiKeyEntry) -> None:
        self.add_api_key(entry.api_key, entry.private_key, entry.rpc_url, entry.chain_id)

    def remove_api_key(self, api_key: str) -> bool:
        return self._keys.pop(api_key, None) is not None

    def has_api_key(self, api_key: str) -> bool:
        return api_key in self._keys

    def get_registered_api_keys(self) -> list[str]:
        return list(self._keys)

    async def verify_api_key(self, api_key: str) -> AuthVerificationResponse:
        if not api_key:
            return AuthVerificationResponse(success=False, error="API key is required")

        record = self._keys.get(api_key)
        if record is None:
            logger.warning("Rejected unknown API key")
            return AuthVerificationResponse(success=False, error="Invalid API key")

        private_key, rpc_url, chain_id = record
        try:
            address = Account.from_key(private_key).address
        except ValueError as exc:
            logger.error("Stored key for API key is unusable: %s", exc)
            return AuthVerificationResponse(success=False, error="Internal server error")

        return AuthVerificationResponse(
            success=True,
            data=CredentialSnapshot(
                private_key=private_key,
                address=address,
                rpc_url=rpc_url,
                chain_id=chain_id,
            ),
        )

"""Agentkit: credential context and the action dispatcher.

An :class:`Agentkit` is configured in exactly one credential mode:

* local: a signer held in-process drives one smart account, built once;
* API key: every call asks the authority for fresh credentials and builds a
  smart account for that call only;
* server wallet: a remote service holds the keys and the instance only
  remembers which of the caller's wallets is selected.

:meth:`Agentkit.run` validates arguments, resolves the account for the
current mode and hands it (or an :class:`ActionContext`) to the action.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from pydantic import BaseModel

from gasless_agentkit.actions.base import (
    Action,
    ActionKind,
    ActionErr,
    ActionResult,
    ErrorKind,
    classify_result,
    use_integrations,
)
from gasless_agentkit.chains import get_chain
from gasless_agentkit.config import AgentkitConfig
from gasless_agentkit.errors import (
    ActionValidationError,
    ConfigurationError,
    CredentialError,
    UnsupportedChainError,
)
from gasless_agentkit.services.auth import ApiKeyStore, CredentialAuthority
from gasless_agentkit.services.server_wallet import ServerWalletAccount, ServerWalletService
from gasless_agentkit.types import CredentialSnapshot
from gasless_agentkit.wallet.signer import SmartAccountSignerAdapter, load_signer
from gasless_agentkit.wallet.smart_account import SmartAccount

logger = logging.getLogger("gasless_agentkit.agentkit")

DEFAULT_API_KEY_CHAIN_ID = 43114

AccountHandle = Union[SmartAccount, ServerWalletAccount]


# ---------------------------------------------------------------------------
# Credential context variants
# ---------------------------------------------------------------------------


@dataclass
class LocalCredentials:
    chain_id: int
    smart_account: SmartAccount


@dataclass
class ApiKeyCredentials:
    api_key: str
    authority: CredentialAuthority

    async def reauthorize(self) -> CredentialSnapshot:
        """Ask the authority for this call's credentials.

        Raises :class:`CredentialError` when the key is rejected, the
        authority is unreachable, or the issued chain is unsupported.
        """
        try:
            result = await self.authority.verify_api_key(self.api_key)
        except Exception as exc:
            raise CredentialError(f"API key verification failed: {exc}") from exc
        if not result.success or result.data is None:
            raise CredentialError(result.error or "API key verification failed")
        try:
            get_chain(result.data.chain_id)
        except UnsupportedChainError as exc:
            raise CredentialError(str(exc)) from exc
        return result.data


@dataclass
class ServerWalletCredentials:
    api_key: str = field(repr=False)
    server_url: str
    chain_id: int
    service: ServerWalletService
    selected_wallet_index: int = 0


CredentialContext = Union[LocalCredentials, ApiKeyCredentials, ServerWalletCredentials]


# ---------------------------------------------------------------------------
# Context for extended actions
# ---------------------------------------------------------------------------


@dataclass
class ActionContext:
    """What an extended action sees: the dispatcher plus this call's account."""

    agentkit: Agentkit
    account: AccountHandle | None
    wallet_index: int | None = None

    @property
    def is_server_mode(self) -> bool:
        return self.agentkit.is_server_mode

    @property
    def server_wallet_service(self) -> ServerWalletService | None:
        return self.agentkit.server_wallet_service

    @property
    def selected_wallet_index(self) -> int:
        if self.wallet_index is not None:
            return self.wallet_index
        return self.agentkit.selected_wallet_index

    def select_wallet(self, index: int) -> int:
        """Make *index* the session's wallet; returns the previous index."""
        previous = self.agentkit.selected_wallet_index
        self.agentkit.set_selected_wallet_index(index)
        return previous

    def get_smart_account(self) -> SmartAccount | None:
        return self.account if isinstance(self.account, SmartAccount) else None

    def get_signer_adapter(self) -> SmartAccountSignerAdapter | None:
        account = self.get_smart_account()
        return SmartAccountSignerAdapter(account) if account else None


# ---------------------------------------------------------------------------
# Agentkit
# ---------------------------------------------------------------------------


class Agentkit:
    """Dispatcher bound to one credential context."""

    def __init__(self, chain_id: int, settings: AgentkitConfig | None = None):
        self.settings = settings or AgentkitConfig()
        get_chain(chain_id, testnet=self._testnet)
        self.chain_id = chain_id
        self._credentials: CredentialContext | None = None
        self._lock = asyncio.Lock()

    @property
    def _testnet(self) -> bool | None:
        return True if self.settings.testnet_support else None

    def _build_smart_account(
        self, signer, chain_id: int, api_key: str, rpc_url: str | None
    ) -> SmartAccount:
        return SmartAccount.create(
            signer,
            chain_id,
            api_key,
            rpc_url=rpc_url,
            settings=self.settings.smart_account,
            timeout=self.settings.integrations.http_timeout,
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def configure_with_wallet(
        cls,
        chain_id: int,
        api_key: str,
        private_key: str | None = None,
        mnemonic_phrase: str | None = None,
        account_index: int = 0,
        rpc_url: str | None = None,
        settings: AgentkitConfig | None = None,
    ) -> Agentkit:
        """Local mode: the signer lives in this process."""
        if not api_key:
            raise ConfigurationError("API_KEY is required for smart agent configuration")

        agentkit = cls(chain_id, settings)
        signer = load_signer(private_key, mnemonic_phrase, account_index)
        smart_account = agentkit._build_smart_account(signer, chain_id, api_key, rpc_url)
        agentkit._credentials = LocalCredentials(chain_id=chain_id, smart_account=smart_account)
        logger.info("Configured local smart account on chain %s (owner %s)", chain_id, signer.address)
        return agentkit

    @classmethod
    async def configure_with_api_key(
        cls,
        api_key: str,
        authority: CredentialAuthority | None = None,
        settings: AgentkitConfig | None = None,
    ) -> Agentkit:
        """API-key mode: credentials are fetched again for every call."""
        if not api_key:
            raise ConfigurationError("API key is required")

        agentkit = cls(DEFAULT_API_KEY_CHAIN_ID, settings)
        credentials = ApiKeyCredentials(
            api_key=api_key,
            authority=authority or ApiKeyStore.from_config(agentkit.settings.auth),
        )
        try:
            snapshot = await credentials.reauthorize()
        except CredentialError as exc:
            raise ConfigurationError(f"Failed to configure Agentkit: {exc}") from exc

        agentkit.chain_id = snapshot.chain_id
        agentkit._credentials = credentials
        logger.info("Configured API-key mode on chain %s", snapshot.chain_id)
        return agentkit

    @classmethod
    def configure_server_wallet(
        cls,
        api_key: str,
        server_url: str,
        chain_id: int = DEFAULT_API_KEY_CHAIN_ID,
        settings: AgentkitConfig | None = None,
    ) -> Agentkit:
        """Server mode: a remote service signs; no key material is held here."""
        if not api_key:
            raise ConfigurationError("API key is required for server wallet mode")
        if not server_url:
            raise ConfigurationError("Server URL is required for server wallet mode")

        agentkit = cls(chain_id, settings)
        service = ServerWalletService(
            api_key, server_url, timeout=agentkit.settings.integrations.http_timeout
        )
        agentkit._credentials = ServerWalletCredentials(
            api_key=api_key, server_url=server_url, chain_id=chain_id, service=service
        )
        logger.info("Configured server wallet mode against %s", server_url)
        return agentkit

    @classmethod
    async def from_config(cls, config: AgentkitConfig) -> Agentkit:
        """Configure in whichever mode ``config.wallet.mode`` names."""
        wallet = config.wallet
        if wallet.mode == "server":
            return cls.configure_server_wallet(
                wallet.api_key, wallet.server_url, wallet.chain_id, settings=config
            )
        if wallet.mode == "api_key":
            return await cls.configure_with_api_key(wallet.api_key, settings=config)
        return cls.configure_with_wallet(
            chain_id=wallet.chain_id,
            api_key=wallet.api_key,
            private_key=wallet.private_key or None,
            mnemonic_phrase=wallet.mnemonic_phrase or None,
            account_index=wallet.account_index,
            rpc_url=wallet.rpc_url,
            settings=config,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def credentials(self) -> CredentialContext | None:
        return self._credentials

    @property
    def is_server_mode(self) -> bool:
        return isinstance(self._credentials, ServerWalletCredentials)

    @property
    def api_key(self) -> str | None:
        creds = self._credentials
        if isinstance(creds, (ApiKeyCredentials, ServerWalletCredentials)):
            return creds.api_key
        return None

    @property
    def server_url(self) -> str | None:
        if isinstance(self._credentials, ServerWalletCredentials):
            return self._credentials.server_url
        return None

    @property
    def server_wallet_service(self) -> ServerWalletService | None:
        if isinstance(self._credentials, ServerWalletCredentials):
            return self._credentials.service
        return None

    @property
    def selected_wallet_index(self) -> int:
        if isinstance(self._credentials, ServerWalletCredentials):
            return self._credentials.selected_wallet_index
        return 0

    def set_selected_wallet_index(self, index: int) -> None:
        if index < 0:
            raise ValueError("Wallet index must be a non-negative integer")
        if not isinstance(self._credentials, ServerWalletCredentials):
            raise ConfigurationError("Wallet selection is only available in server mode")
        self._credentials.selected_wallet_index = index
        logger.info("Selected server wallet index %s", index)

    def get_smart_account(self) -> SmartAccount | None:
        """The local-mode smart account; other modes build accounts per call."""
        if isinstance(self._credentials, LocalCredentials):
            return self._credentials.smart_account
        return None

    def get_signer_adapter(self) -> SmartAccountSignerAdapter | None:
        account = self.get_smart_account()
        return SmartAccountSignerAdapter(account) if account else None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _account_from_snapshot(self, snapshot: CredentialSnapshot, api_key: str) -> SmartAccount:
        signer = load_signer(snapshot.private_key)
        return self._build_smart_account(signer, snapshot.chain_id, api_key, snapshot.rpc_url)

    async def _resolve_account(self, wallet_index: int | None = None) -> AccountHandle | None:
        creds = self._credentials
        if creds is None:
            return None
        if isinstance(creds, LocalCredentials):
            return creds.smart_account
        if isinstance(creds, ApiKeyCredentials):
            snapshot = await creds.reauthorize()
            return self._account_from_snapshot(snapshot, creds.api_key)
        index = creds.selected_wallet_index if wallet_index is None else wallet_index
        return ServerWalletAccount(creds.service, creds.chain_id, index)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def run(
        self,
        action: Action,
        args: Mapping[str, Any] | BaseModel | None = None,
        *,
        wallet_index: int | None = None,
    ) -> str:
        """Execute *action* and return its text result.

        Invalid arguments raise :class:`ActionValidationError` before anything
        else happens. Credential and capability problems come back as
        ``Unable to run Action: ...`` strings. Unexpected exceptions from the
        action propagate.
        """
        parsed = action.parse_args(args)
        if wallet_index is not None and wallet_index < 0:
            raise ValueError("Wallet index must be a non-negative integer")

        async with self._lock:
            with use_integrations(self.settings.integrations):
                try:
                    account = await self._resolve_account(wallet_index)
                except CredentialError as exc:
                    logger.warning("Credential check failed for %s: %s", action.name, exc)
                    return f"Unable to run Action: {action.name}. API key validation failed: {exc}"

                if action.requires_account and account is None:
                    return (
                        f"Unable to run Action: {action.name}. A Smart Account is required. "
                        "Please configure Agentkit with a Wallet to run this action."
                    )

                if action.kind is ActionKind.EXTENDED:
                    target: Any = ActionContext(self, account, wallet_index)
                else:
                    target = account

                logger.info("Running action %s", action.name)
                return await action.invoke(target, parsed)

    async def run_result(
        self,
        action: Action,
        args: Mapping[str, Any] | BaseModel | None = None,
        *,
        wallet_index: int | None = None,
    ) -> ActionResult:
        """Like :meth:`run` but returns a tagged :data:`ActionResult`.

        Argument validation failures come back as ``ErrorKind.VALIDATION``
        instead of raising.
        """
        try:
            message = await self.run(action, args, wallet_index=wallet_index)
        except ActionValidationError as exc:
            return ActionErr(ErrorKind.VALIDATION, str(exc))
        return classify_result(message)

    async def get_address(self) -> str:
        creds = self._credentials
        if isinstance(creds, ApiKeyCredentials):
            try:
                snapshot = await creds.reauthorize()
            except CredentialError as exc:
                raise CredentialError(f"Cannot get address: API key validation failed: {exc}") from exc
            return await self._account_from_snapshot(snapshot, creds.api_key).get_address()

        account = await self._resolve_account()
        if account is None:
            raise ConfigurationError("Smart account not configured")
        return await account.get_address()

    async def get_chain_id(self) -> int:
        creds = self._credentials
        if isinstance(creds, ApiKeyCredentials):
            try:
                snapshot = await creds.reauthorize()
            except CredentialError as exc:
                raise CredentialError(f"Cannot get chain ID: API key validation failed: {exc}") from exc
            return snapshot.chain_id
        if creds is None:
            raise ConfigurationError("Smart account not configured")
        return creds.chain_id

"""Exception types raised by the agentkit core."""

from __future__ import annotations


class AgentkitError(Exception):
    """Base class for all agentkit errors."""


class ConfigurationError(AgentkitError, ValueError):
    """Fatal problem with how an Agentkit instance is being constructed."""


class UnsupportedChainError(ConfigurationError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(f"Chain ID {chain_id} is not supported")


class CredentialError(AgentkitError):
    """Per-call credential revalidation failed."""


class ActionValidationError(AgentkitError, ValueError):
    """Raw action arguments did not satisfy the action's schema."""

    def __init__(self, action: str, errors: list[str]) -> None:
        self.action = action
        self.errors = errors
        super().__init__(f"Invalid arguments for {action}: {'; '.join(errors)}")


class BundlerError(AgentkitError):
    """JSON-RPC error returned by the bundler or paymaster."""

    def __init__(self, code: int | None, message: str) -> None:
        self.code = code
        super().__init__(f"{message} (code {code})" if code is not None else message)


class ServerWalletError(AgentkitError):
    """The remote wallet service rejected a request."""


class SmartAccountSignatureError(AgentkitError):
    """A counterparty recovered a signer that is not the smart account.

    Raised when an off-chain protocol only accepts plain EOA signatures
    and the signature produced through the smart account adapter is
    attributed to the owner key instead.
    """

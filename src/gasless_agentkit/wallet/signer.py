"""Owner key loading and the signer adapter handed to off-chain protocols."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eth_account import Account

from gasless_agentkit.errors import ConfigurationError, SmartAccountSignatureError

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

    from gasless_agentkit.wallet.smart_account import SmartAccount

logger = logging.getLogger("gasless_agentkit.wallet.signer")

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/{index}"

# Phrases counterparties use when the recovered signer is the owner key
# rather than the smart account.
_SIGNATURE_MISMATCH_MARKERS = ("wrongowner", "recovered signer", "does not match")


def load_signer(
    private_key: str | None = None,
    mnemonic_phrase: str | None = None,
    account_index: int = 0,
) -> LocalAccount:
    """Build the owner key from a private key, or derive it from a mnemonic."""
    if private_key:
        key = private_key if private_key.startswith("0x") else f"0x{private_key}"
        try:
            return Account.from_key(key)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid private key: {exc}") from exc

    if mnemonic_phrase:
        Account.enable_unaudited_hdwallet_features()
        path = DEFAULT_DERIVATION_PATH.format(index=account_index)
        try:
            return Account.from_mnemonic(mnemonic_phrase, account_path=path)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid mnemonic phrase: {exc}") from exc

    raise ConfigurationError("Either private_key or mnemonic_phrase must be provided")


def is_signature_mismatch(message: str) -> bool:
    """Fallback detection for counterparties that only report mismatches as text."""
    lowered = message.lower()
    return any(marker in lowered for marker in _SIGNATURE_MISMATCH_MARKERS)


class SmartAccountSignerAdapter:
    """Presents a smart account as a typed-data signer.

    Signatures are produced by the owner key, so protocols that recover an
    EOA from the signature and compare it with the order owner will reject
    them. Callers catch :class:`SmartAccountSignatureError` for that case.
    """

    def __init__(self, account: SmartAccount) -> None:
        self.account = account

    async def get_address(self) -> str:
        return await self.account.get_address()

    @property
    def chain_id(self) -> int:
        return self.account.chain_id

    async def sign_typed_data(self, typed_data: dict) -> str:
        logger.debug("Signing %s for %s", typed_data.get("primaryType"), self.account.owner)
        return await self.account.sign_typed_data(typed_data)

    async def sign_message(self, message: str | bytes) -> str:
        return await self.account.sign_message(message)


def raise_for_signature_mismatch(error_type: str | None, description: str) -> None:
    """Raise :class:`SmartAccountSignatureError` if a rejection is a signer mismatch."""
    if error_type == "WrongOwner" or is_signature_mismatch(description):
        raise SmartAccountSignatureError(description or error_type or "Signature rejected")

"""Plain data types passed between accounts, services and actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

TransactionState = Literal["pending", "confirmed", "failed"]


@dataclass
class Transaction:
    """A call to submit through a smart account or a server wallet."""

    to: str
    data: str = "0x"
    value: int = 0


@dataclass
class TransactionResponse:
    success: bool
    user_op_hash: str | None = None
    tx_hash: str | None = None
    message: str | None = None
    error: str | None = None
    receipt: dict[str, Any] | None = None


@dataclass
class TransactionStatus:
    status: TransactionState
    tx_hash: str | None = None
    block_number: int | None = None
    error: str | None = None
    receipt: dict[str, Any] | None = None


@dataclass
class TokenBalance:
    address: str
    amount: int
    decimals: int
    formatted_amount: str


@dataclass
class TokenDetails:
    name: str
    symbol: str
    decimals: int
    address: str
    chain_id: int


@dataclass(frozen=True)
class CredentialSnapshot:
    """Signing material issued for a single call in API-key mode."""

    private_key: str = field(repr=False)
    address: str
    rpc_url: str
    chain_id: int


@dataclass
class AuthVerificationResponse:
    success: bool
    data: CredentialSnapshot | None = None
    error: str | None = None

"""Submitting transactions through either account type, plus token reads."""

from __future__ import annotations

import logging
from typing import Union

from web3 import Web3

from gasless_agentkit.services.server_wallet import ServerWalletAccount
from gasless_agentkit.types import (
    TokenDetails,
    Transaction,
    TransactionResponse,
    TransactionStatus,
)
from gasless_agentkit.wallet.abi import encode_call
from gasless_agentkit.wallet.provider import read_allowance, read_decimals, read_token_details
from gasless_agentkit.wallet.smart_account import SmartAccount, status_from_receipt

logger = logging.getLogger("gasless_agentkit.services.transactions")

Account = Union[SmartAccount, ServerWalletAccount]

MAX_UINT256 = 2**256 - 1


def encode_transfer(to: str, amount: int) -> str:
    return encode_call("transfer", ["address", "uint256"], [to, amount])


def encode_approve(spender: str, amount: int) -> str:
    return encode_call("approve", ["address", "uint256"], [spender, amount])


async def send_transaction(account: Account, tx: Transaction) -> TransactionResponse:
    """Submit *tx* and report the outcome without raising for expected failures."""
    if isinstance(account, ServerWalletAccount):
        return await account.send_transaction(tx)

    try:
        response = await account.send_transaction(tx)
    except Exception as exc:
        logger.error("User operation to %s failed: %s", tx.to, exc)
        return TransactionResponse(success=False, error=str(exc))
    return TransactionResponse(
        success=True,
        user_op_hash=response.user_op_hash,
        message="Transaction submitted successfully",
    )


async def wait_for_transaction(
    account: Account, response: TransactionResponse, timeout: float | None = None
) -> TransactionStatus:
    """Resolve a submitted transaction to a final (or still pending) status."""
    if response.receipt and "success" in response.receipt:
        return status_from_receipt(response.receipt)
    if isinstance(account, SmartAccount) and response.user_op_hash:
        return await account.wait_for_user_operation(response.user_op_hash, timeout)
    if response.tx_hash:
        return TransactionStatus(status="confirmed", tx_hash=response.tx_hash)
    return TransactionStatus(status="pending")


async def check_transaction_status(account: SmartAccount, user_op_hash: str) -> TransactionStatus:
    """One-shot receipt lookup; ``pending`` when the bundler has none yet."""
    receipt = await account.get_user_operation_receipt(user_op_hash)
    if not receipt:
        return TransactionStatus(status="pending")
    return status_from_receipt(receipt)


def get_decimals(account: Account, token_address: str) -> int:
    return read_decimals(account.web3, token_address)


def fetch_token_details(account: Account, token_address: str) -> TokenDetails:
    return read_token_details(account.web3, token_address, account.chain_id)


async def ensure_allowance(
    account: Account, token_address: str, spender: str, amount: int
) -> TransactionResponse | None:
    """Approve *spender* for *amount* if the current allowance is short.

    Returns ``None`` when no approval was needed, otherwise the approval's
    (waited-for) response. An approval still pending when the wait gives up
    is reported as unsuccessful.
    """
    owner = await account.get_address()
    current = read_allowance(account.web3, token_address, owner, spender)
    if current >= amount:
        return None

    logger.info("Approving %s to spend %s of %s", spender, amount, token_address)
    approval = await send_transaction(
        account,
        Transaction(to=Web3.to_checksum_address(token_address), data=encode_approve(spender, amount)),
    )
    if not approval.success:
        return approval
    status = await wait_for_transaction(account, approval)
    if status.status == "failed":
        return TransactionResponse(success=False, error=status.error or "Approval reverted")
    if status.status != "confirmed":
        # the dependent step must not be sent on top of an unconfirmed approval
        return TransactionResponse(
            success=False,
            user_op_hash=approval.user_op_hash,
            error=f"Approval not confirmed yet (user op {approval.user_op_hash or approval.tx_hash})",
        )
    return approval

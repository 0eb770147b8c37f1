"""check_transaction: status of a submitted user operation."""

from __future__ import annotations

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.services.server_wallet import ServerWalletAccount
from gasless_agentkit.services.transactions import check_transaction_status

CHECK_TRANSACTION_PROMPT = """
This tool checks the status of a previously submitted transaction using its user operation hash.
It reports whether the transaction is still pending, was confirmed (with block number and
transaction hash) or failed (with the reason).

USAGE GUIDANCE:
- Use the user operation hash returned by a transfer, swap or deposit
- Set wait to true to keep polling until the transaction is included or the wait times out
"""


class CheckTransactionInput(BaseModel):
    user_op_hash: str = Field(..., description="The user operation hash to check")
    wait: bool = Field(False, description="Wait for the transaction to be confirmed")


async def check_transaction(account, args: CheckTransactionInput) -> str:
    if isinstance(account, ServerWalletAccount):
        return (
            "Error: Transaction status lookups are not available for server wallets. "
            "The transaction hash is reported when the transaction is sent."
        )
    try:
        if args.wait:
            status = await account.wait_for_user_operation(args.user_op_hash)
        else:
            status = await check_transaction_status(account, args.user_op_hash)
    except EXPECTED_ERRORS as e:
        return f"Error checking transaction status: {e}"

    if status.status == "confirmed":
        return (
            "Transaction confirmed!\n"
            f"Block number: {status.block_number}\n"
            f"Transaction hash: {status.tx_hash}"
        )
    if status.status == "failed":
        return f"Transaction failed: {status.error}"
    return f"Transaction is still pending. User operation hash: {args.user_op_hash}"


CHECK_TRANSACTION_ACTION = Action(
    name="check_transaction",
    description=CHECK_TRANSACTION_PROMPT,
    args_schema=CheckTransactionInput,
    func=check_transaction,
)

"""Server-mode wallet listing and selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, ActionKind, EmptyArgs

if TYPE_CHECKING:
    from gasless_agentkit.agentkit import ActionContext

SERVER_MODE_ONLY = (
    "Error: This action is only available in server mode. "
    "Please configure the agent with an API key."
)

LIST_SERVER_WALLETS_PROMPT = """
This tool lists all smart wallets available on the server for your agent.
Each wallet has an index number that can be used to select it for transactions.

USAGE GUIDANCE:
- Use this tool to see all available wallets and their addresses
- The response will show wallet index and address
- Note the index number if you want to switch to a different wallet

This action only works when the agent is configured in server mode.
"""

SELECT_SERVER_WALLET_PROMPT = """
This tool switches the currently active wallet to a different one by its index number.
Use the list_server_wallets tool first to see available wallets and their indices.

USAGE GUIDANCE:
- Provide the wallet index number you want to switch to
- The index must correspond to an existing wallet
- After switching, all transactions will use the newly selected wallet

This action only works when the agent is configured in server mode.
"""


class SelectServerWalletInput(BaseModel):
    wallet_index: int = Field(..., ge=0, description="The wallet index to switch to")


async def list_server_wallets(context: ActionContext, args: EmptyArgs) -> str:
    service = context.server_wallet_service
    if not context.is_server_mode or service is None:
        return SERVER_MODE_ONLY
    try:
        wallets = await service.list_wallets()
    except EXPECTED_ERRORS as e:
        return f"Error listing wallets: {e}"

    if not wallets:
        return "No wallets found. You may need to create a wallet first."

    current = context.selected_wallet_index
    lines = [
        f"Index {w.account_index}{' (CURRENT)' if w.account_index == current else ''}: {w.smart_address}"
        for w in wallets
    ]
    return "Available Wallets:\n" + "\n".join(lines) + f"\n\nCurrently selected wallet index: {current}"


async def select_server_wallet(context: ActionContext, args: SelectServerWalletInput) -> str:
    if not context.is_server_mode:
        return SERVER_MODE_ONLY
    previous = context.select_wallet(args.wallet_index)
    return (
        f"Successfully switched from wallet index {previous} to wallet index {args.wallet_index}. "
        f"All future transactions will use wallet index {args.wallet_index}."
    )


LIST_SERVER_WALLETS_ACTION = Action(
    name="list_server_wallets",
    description=LIST_SERVER_WALLETS_PROMPT,
    args_schema=EmptyArgs,
    func=list_server_wallets,
    requires_account=False,
    kind=ActionKind.EXTENDED,
)

SELECT_SERVER_WALLET_ACTION = Action(
    name="select_server_wallet",
    description=SELECT_SERVER_WALLET_PROMPT,
    args_schema=SelectServerWalletInput,
    func=select_server_wallet,
    requires_account=False,
    kind=ActionKind.EXTENDED,
)

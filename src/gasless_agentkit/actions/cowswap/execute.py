"""cowswap_execute: quote, approve, sign and post a market sell order."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, ActionKind
from gasless_agentkit.actions.cowswap.client import (
    VAULT_RELAYER,
    CowApiError,
    CowClient,
    logger,
    order_from_quote,
    order_typed_data,
)
from gasless_agentkit.actions.cowswap.common import (
    SwapInput,
    explorer_order_url,
    is_native,
    resolve_pair,
    swap_ui_url,
    token_amount,
    unsupported_chain_message,
)
from gasless_agentkit.errors import SmartAccountSignatureError
from gasless_agentkit.services.transactions import ensure_allowance
from gasless_agentkit.wallet.signer import raise_for_signature_mismatch

if TYPE_CHECKING:
    from gasless_agentkit.agentkit import ActionContext

COWSWAP_EXECUTE_PROMPT = """
IMPORTANT LIMITATION: CowSwap currently has limited support for smart account (ERC-4337) orders.

This tool will attempt to execute CowSwap trades, but if the order signature is rejected because of smart account limitations, it will provide:
1. Complete trade parameters for manual execution
2. A link to the CowSwap interface with pre-filled parameters
3. Alternative swap recommendations

You can specify swaps in two ways:
1. Using token addresses (e.g., "0x...")
2. Using token symbols (e.g., "ETH", "USDC", "USDT", "WETH", etc.)

USAGE GUIDANCE:
- Provide either token_in_address/token_out_address OR token_in_symbol/token_out_symbol
- Specify the amount to swap (in the input token's units)
- If automatic execution fails, follow the provided manual instructions

EXAMPLES:
- "Swap 10 USDC to ETH using CowSwap"
- "Execute CowSwap trade: 100 USDT to USDC"

Note: CowSwap is available on Ethereum Mainnet, Gnosis Chain, and Avalanche.
For guaranteed execution with smart accounts, consider debridge_swap instead.
"""


def _manual_instructions(chain_id: int, args: SwapInput, token_in: str, token_out: str, owner: str) -> str:
    return (
        "Smart Account Limitation Detected\n\n"
        "CowSwap currently has limited support for smart accounts (ERC-4337). "
        "The signature from your smart account was rejected.\n\n"
        "MANUAL EXECUTION OPTIONS:\n\n"
        "Option 1: Use CowSwap Interface\n"
        f"Visit: {swap_ui_url(chain_id, token_in, token_out, args.amount)}\n\n"
        "Option 2: Use Alternative DEX\n"
        "Consider using debridge_swap instead:\n"
        f"\"Swap {args.amount} {args.token_in_symbol or 'tokens'} to "
        f"{args.token_out_symbol or 'output tokens'} using debridge\"\n\n"
        "Trade Parameters (for reference):\n"
        f"- From: {args.amount} {args.label_in(token_in)}\n"
        f"- To: {args.label_out(token_out)}\n"
        f"- Slippage: {args.slippage_bps / 100}%\n"
        f"- Smart Account: {owner}\n\n"
        "Why This Happened:\n"
        "CowSwap's order validation expects the signature to come from the order owner. "
        "With smart accounts, the signing key's address differs from the smart account address."
    )


async def cowswap_execute(ctx: ActionContext, args: SwapInput) -> str:
    account = ctx.account
    signer = ctx.get_signer_adapter()
    if signer is None:
        return "Error executing CowSwap trade: order signing needs a locally configured smart account"

    chain_id = account.chain_id
    error = unsupported_chain_message(chain_id)
    if error:
        return error
    pair = resolve_pair(chain_id, args)
    if isinstance(pair, str):
        return pair
    token_in, token_out = pair

    try:
        sell_amount = token_amount(account, token_in, args.amount)
    except EXPECTED_ERRORS as e:
        return (
            f"Error: Could not format token amount for {token_in}. "
            f"Ensure it's a valid token address and you have balance. Error: {e}"
        )

    owner = ""
    try:
        owner = await signer.get_address()
        client = CowClient(chain_id)
        quote = await client.get_quote(
            sell_token=token_in,
            buy_token=token_out,
            sell_amount=sell_amount,
            owner=owner,
            valid_for=args.validity_seconds,
        )
        order = order_from_quote(quote, args.slippage_bps)

        if not is_native(token_in):
            approval = await ensure_allowance(account, token_in, VAULT_RELAYER, int(order["sellAmount"]))
            if approval is not None and not approval.success:
                return f"Error executing CowSwap trade: token approval failed: {approval.error}"

        signature = await signer.sign_typed_data(order_typed_data(chain_id, order))
        try:
            order_uid = await client.post_order(order, signature, owner)
        except CowApiError as e:
            raise_for_signature_mismatch(e.error_type, e.description)
            raise
    except SmartAccountSignatureError as e:
        logger.warning("CowSwap rejected the smart account signature: %s", e)
        return _manual_instructions(chain_id, args, token_in, token_out, owner)
    except EXPECTED_ERRORS as e:
        logger.error("CowSwap execution failed: %s", e)
        return (
            f"Error executing CowSwap trade: {e}\n\n"
            "Please ensure you have sufficient balance and try again."
        )

    return (
        "CowSwap Order Executed Successfully!\n\n"
        "Order Details:\n"
        f"- Order UID: {order_uid}\n"
        f"- Input: {args.amount} {args.label_in(token_in)}\n"
        f"- Minimum Output: {order['buyAmount']} (base units of {args.label_out(token_out)})\n"
        f"- Slippage Tolerance: {args.slippage_bps / 100}%\n"
        "- Order Kind: SELL\n\n"
        "What happens next:\n"
        "1. Your order is now live in CowSwap's batch auction\n"
        "2. Solvers compete to find the best execution\n"
        "3. Settlement typically occurs within 1-5 minutes\n\n"
        f"Track your order: {explorer_order_url(chain_id, order_uid)}"
    )


COWSWAP_EXECUTE_ACTION = Action(
    name="cowswap_execute",
    description=COWSWAP_EXECUTE_PROMPT,
    args_schema=SwapInput,
    func=cowswap_execute,
    kind=ActionKind.EXTENDED,
)

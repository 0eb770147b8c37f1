"""cowswap_quote: price a sell order without placing it."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from decimal import Decimal

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.actions.cowswap.client import UI_NETWORKS, VAULT_RELAYER, CowClient, logger
from gasless_agentkit.actions.cowswap.common import (
    SwapInput,
    display_decimals,
    is_native,
    resolve_pair,
    token_amount,
    unsupported_chain_message,
)

COWSWAP_QUOTE_PROMPT = """
This tool provides price quotes from CowSwap for comparison and planning purposes.

IMPORTANT: This action only provides quotes - it does NOT execute swaps.

CowSwap uses a batch auction mechanism with Coincidence of Wants (CoW) that can provide better prices and MEV protection compared to traditional AMMs.

You can get quotes for token swaps in two ways:
1. Using token addresses (e.g., "0x...")
2. Using token symbols (e.g., "ETH", "USDC", "USDT", "WETH", etc.)

USAGE GUIDANCE:
- Provide either token_in_address/token_out_address OR token_in_symbol/token_out_symbol
- Specify the amount to swap (in the input token's units)
- Optionally set a custom slippage (default is 50 basis points = 0.5%)

EXAMPLES:
- "Get CowSwap quote for 10 USDC to ETH"
- "Quote 100 USDT to USDC on CowSwap"

Note: CowSwap is available on Ethereum Mainnet, Gnosis Chain, and Avalanche.
Use cowswap_execute to place the order.
"""


def _fixed(amount: int, decimals: int, places: int = 6) -> str:
    return f"{Decimal(amount).scaleb(-decimals):.{places}f}"


async def cowswap_quote(account, args: SwapInput) -> str:
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

    try:
        owner = await account.get_address()
        quote = await CowClient(chain_id).get_quote(
            sell_token=token_in,
            buy_token=token_out,
            sell_amount=sell_amount,
            owner=owner,
            valid_for=args.validity_seconds,
        )
    except EXPECTED_ERRORS as e:
        logger.error("CowSwap quote failed: %s", e)
        return f"Error getting CowSwap quote: {e}"

    in_decimals = display_decimals(token_in)
    out_decimals = display_decimals(token_out)
    quote_sell = int(quote["sellAmount"])
    quote_buy = int(quote["buyAmount"])
    price = Decimal(quote_buy) / Decimal(quote_sell) if quote_sell else Decimal(0)
    valid_until = datetime.fromtimestamp(time.time() + args.validity_seconds, tz=timezone.utc)
    label_in = args.label_in(token_in)
    label_out = args.label_out(token_out)
    approval_required = not is_native(token_in)

    lines = [
        "CowSwap Quote Retrieved Successfully!",
        "",
        "Quote Details:",
        f"- Input: {args.amount} {label_in}",
        f"- Expected Output: ~{_fixed(quote_buy, out_decimals)} {label_out}",
        f"- Protocol Fee: {_fixed(int(quote.get('feeAmount') or 0), in_decimals)} {label_in}",
        f"- Effective Price: {price:.8f} {args.token_out_symbol or 'output tokens'} "
        f"per {args.token_in_symbol or 'input token'}",
        f"- Slippage Tolerance: {args.slippage_bps / 100}%",
        f"- Valid Until: {valid_until.isoformat()}",
        "",
    ]
    if approval_required:
        lines += [
            f"Token Approval Required: {token_in} must be approved for the CowSwap Vault Relayer "
            f"({VAULT_RELAYER}) before executing this trade.",
            "",
        ]
    lines += [
        "This is a quote only. To execute the swap use cowswap_execute, which approves the "
        "token if needed and submits the order to CowSwap's batch auction.",
        "",
        f"CowSwap Explorer: https://explorer.cow.fi/{UI_NETWORKS[chain_id]}",
        "",
        f"Note: This quote is valid for {args.validity_seconds / 60:g} minutes.",
    ]
    return "\n".join(lines)


COWSWAP_QUOTE_ACTION = Action(
    name="cowswap_quote",
    description=COWSWAP_QUOTE_PROMPT,
    args_schema=SwapInput,
    func=cowswap_quote,
)

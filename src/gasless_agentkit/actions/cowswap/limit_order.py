"""cowswap_limit_order: place a sell order with a minimum buy amount."""

from __future__ import annotations

import time
from decimal import Decimal, InvalidOperation

from pydantic import Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.actions.cowswap.client import (
    VAULT_RELAYER,
    CowClient,
    build_order,
    logger,
    order_typed_data,
)
from gasless_agentkit.actions.cowswap.common import (
    TokenPairInput,
    explorer_order_url,
    is_native,
    resolve_pair,
    token_amount,
    unsupported_chain_message,
)
from gasless_agentkit.services.transactions import ensure_allowance
from gasless_agentkit.wallet.signer import SmartAccountSignerAdapter
from gasless_agentkit.wallet.smart_account import SmartAccount

COWSWAP_LIMIT_ORDER_PROMPT = """
This tool creates limit orders on CowSwap.

CowSwap limit orders let you specify an exact price at which you want to trade; the order only executes when that price is met within the batch auction.

You can specify limit orders in two ways:
1. Using token addresses (e.g., "0x...")
2. Using token symbols (e.g., "ETH", "USDC", "USDT", "WETH", etc.)

USAGE GUIDANCE:
- Provide either token_in_address/token_out_address OR token_in_symbol/token_out_symbol
- Specify the amount to sell
- Specify the minimum amount you want to receive (limit price)
- Set the order validity period

EXAMPLES:
- "Create CowSwap limit order to sell 100 USDC for at least 0.06 ETH"
- "Create limit order to sell 1 ETH for at least 1650 USDC, valid for 24 hours"

Note: CowSwap is available on Ethereum Mainnet, Gnosis Chain, and Avalanche.
"""


class LimitOrderInput(TokenPairInput):
    sell_amount: str = Field(..., description="The amount of input token to sell")
    min_buy_amount: str = Field(..., description="The minimum amount of output token to receive")
    validity_hours: int = Field(24, gt=0, description="Order validity in hours (default: 24)")


def _limit_price(args: LimitOrderInput) -> str:
    try:
        return f"{Decimal(args.min_buy_amount) / Decimal(args.sell_amount):.8f}"
    except (InvalidOperation, ArithmeticError):
        return "n/a"


async def cowswap_limit_order(account, args: LimitOrderInput) -> str:
    chain_id = account.chain_id
    error = unsupported_chain_message(chain_id)
    if error:
        return error
    pair = resolve_pair(chain_id, args)
    if isinstance(pair, str):
        return pair
    token_in, token_out = pair
    if not isinstance(account, SmartAccount):
        return "Error creating CowSwap limit order: order signing needs a locally configured smart account"

    try:
        sell_amount = token_amount(account, token_in, args.sell_amount)
        buy_amount = token_amount(account, token_out, args.min_buy_amount)
    except EXPECTED_ERRORS as e:
        return f"Error: Could not format token amounts. Ensure token addresses are valid. Error: {e}"

    signer = SmartAccountSignerAdapter(account)
    order = build_order(
        sell_token=token_in,
        buy_token=token_out,
        sell_amount=sell_amount,
        buy_amount=buy_amount,
        valid_to=int(time.time()) + args.validity_hours * 3600,
    )
    try:
        owner = await signer.get_address()
        if not is_native(token_in):
            approval = await ensure_allowance(account, token_in, VAULT_RELAYER, sell_amount)
            if approval is not None and not approval.success:
                return f"Error creating CowSwap limit order: token approval failed: {approval.error}"
        signature = await signer.sign_typed_data(order_typed_data(chain_id, order))
        order_uid = await CowClient(chain_id).post_order(order, signature, owner)
    except EXPECTED_ERRORS as e:
        logger.error("CowSwap limit order failed: %s", e)
        return (
            f"Error creating CowSwap limit order: {e}\n\n"
            "Please ensure you have sufficient balance and try again."
        )

    return (
        "CowSwap Limit Order Created Successfully!\n\n"
        "Order Details:\n"
        f"- Order UID: {order_uid}\n"
        f"- Sell Token: {args.label_in(token_in)}\n"
        f"- Buy Token: {args.label_out(token_out)}\n"
        f"- Sell Amount: {args.sell_amount} {args.token_in_symbol or 'tokens'}\n"
        f"- Minimum Buy Amount: {args.min_buy_amount} {args.token_out_symbol or 'tokens'}\n"
        f"- Limit Price: {_limit_price(args)} {args.token_out_symbol or 'output tokens'} "
        f"per {args.token_in_symbol or 'input token'}\n"
        f"- Valid For: {args.validity_hours} hours\n\n"
        "The order stays in the order book until it is filled, cancelled or expires.\n\n"
        f"Track your order: {explorer_order_url(chain_id, order_uid)}"
    )


COWSWAP_LIMIT_ORDER_ACTION = Action(
    name="cowswap_limit_order",
    description=COWSWAP_LIMIT_ORDER_PROMPT,
    args_schema=LimitOrderInput,
    func=cowswap_limit_order,
)

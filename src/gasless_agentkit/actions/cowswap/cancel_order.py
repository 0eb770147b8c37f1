"""cowswap_cancel_order: off-chain cancellation of an open order."""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.actions.cowswap.client import CowClient, cancellation_typed_data, logger
from gasless_agentkit.actions.cowswap.common import (
    COW_CHAIN_NAMES,
    explorer_order_url,
    unsupported_chain_message,
)
from gasless_agentkit.wallet.signer import SmartAccountSignerAdapter
from gasless_agentkit.wallet.smart_account import SmartAccount

# 32-byte order digest + 20-byte owner + 4-byte validTo
ORDER_UID_PATTERN = re.compile(r"^0x[0-9a-fA-F]{112}$")

COWSWAP_CANCEL_ORDER_PROMPT = """
This tool cancels orders on CowSwap.

Cancellation signs an EIP-712 cancellation message and submits it to the CowSwap API.

USAGE GUIDANCE:
- Provide the Order UID of the order you want to cancel
- Only orders in 'open' (pending) status can be cancelled
- Cancellation is best effort: orders already being settled cannot be cancelled

EXAMPLES:
- "Cancel CowSwap order 0x123..."

Note: CowSwap is available on Ethereum Mainnet, Gnosis Chain, and Avalanche.
"""


class CancelOrderInput(BaseModel):
    order_uid: str = Field(..., description="The Order UID to cancel (e.g., 0x...)")
    reason: Optional[str] = Field(None, description="Optional reason for cancellation")


async def cowswap_cancel_order(account, args: CancelOrderInput) -> str:
    chain_id = account.chain_id
    error = unsupported_chain_message(chain_id)
    if error:
        return error
    if not ORDER_UID_PATTERN.match(args.order_uid):
        return (
            "Error: Invalid Order UID format. Expected 0x followed by 112 hex characters "
            f"(114 characters total), got {len(args.order_uid)} characters."
        )
    if not isinstance(account, SmartAccount):
        return "Error cancelling CowSwap order: signing needs a locally configured smart account"

    client = CowClient(chain_id)
    explorer = explorer_order_url(chain_id, args.order_uid)
    try:
        order = await client.get_order(args.order_uid)
        status = order.get("status")
        if status != "open":
            return (
                f"Cannot cancel order {args.order_uid}\n\n"
                f"Order Status: {status}\n"
                "Reason: Only orders with 'open' status can be cancelled.\n\n"
                "Current order details:\n"
                f"- Status: {status}\n"
                f"- Created: {order.get('creationDate')}\n"
                f"- Owner: {order.get('owner')}\n\n"
                f"Order Explorer: {explorer}"
            )

        signer = SmartAccountSignerAdapter(account)
        owner = await signer.get_address()
        signature = await signer.sign_typed_data(cancellation_typed_data(chain_id, [args.order_uid]))
        await client.cancel_orders([args.order_uid], signature)
    except EXPECTED_ERRORS as e:
        logger.error("CowSwap cancellation failed: %s", e)
        return (
            f"Error cancelling CowSwap order: {e}\n\n"
            "The order may not exist, may already be executed or cancelled, "
            "or there may be a network issue."
        )

    lines = [
        "CowSwap Order Cancelled Successfully!",
        "",
        "Cancellation Details:",
        f"- Order UID: {args.order_uid}",
        f"- User Address: {owner}",
        f"- Chain: {COW_CHAIN_NAMES[chain_id]}",
    ]
    if args.reason:
        lines.append(f"- Reason: {args.reason}")
    lines += ["", f"Order Explorer: {explorer}"]
    return "\n".join(lines)


COWSWAP_CANCEL_ORDER_ACTION = Action(
    name="cowswap_cancel_order",
    description=COWSWAP_CANCEL_ORDER_PROMPT,
    args_schema=CancelOrderInput,
    func=cowswap_cancel_order,
)

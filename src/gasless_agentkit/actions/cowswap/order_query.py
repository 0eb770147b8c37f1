"""cowswap_order_query: one order by UID, or an owner's recent orders."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.actions.cowswap.client import CowClient
from gasless_agentkit.actions.cowswap.common import explorer_order_url, unsupported_chain_message

COWSWAP_ORDER_QUERY_PROMPT = """
This tool allows you to query order information from CowSwap.

You can query orders in several ways:
1. By Order UID (unique identifier) - for specific order details
2. By user address - to get all orders for a specific address
3. Get recent orders from the current wallet

USAGE GUIDANCE:
- Provide either an order UID or use the current wallet address
- Check if orders are pending, filled, or cancelled

EXAMPLES:
- "Check CowSwap order status for UID 0x123..."
- "Get my CowSwap orders"

Note: CowSwap is available on Ethereum Mainnet, Gnosis Chain, and Avalanche.
"""


class OrderQueryInput(BaseModel):
    order_uid: Optional[str] = Field(None, description="Specific order UID to query (e.g., 0x...)")
    user_address: Optional[str] = Field(
        None, description="User address to get orders for (optional, defaults to current wallet)"
    )
    limit: int = Field(10, gt=0, le=1000, description="Maximum number of orders to return (default: 10)")


def _valid_until(valid_to: int | None) -> str:
    if valid_to is None:
        return "unknown"
    return datetime.fromtimestamp(int(valid_to), tz=timezone.utc).isoformat()


async def cowswap_order_query(account, args: OrderQueryInput) -> str:
    chain_id = account.chain_id
    error = unsupported_chain_message(chain_id)
    if error:
        return error
    client = CowClient(chain_id)

    if args.order_uid:
        try:
            order = await client.get_order(args.order_uid)
        except EXPECTED_ERRORS as e:
            return f"Error: Could not find order with UID {args.order_uid}. {e}"
        return (
            "CowSwap Order Details\n\n"
            f"Order UID: {args.order_uid}\n"
            f"Status: {order.get('status')}\n"
            f"Owner: {order.get('owner')}\n\n"
            "Order Parameters:\n"
            f"- Sell Token: {order.get('sellToken')}\n"
            f"- Buy Token: {order.get('buyToken')}\n"
            f"- Kind: {order.get('kind')} order\n"
            f"- Partially Fillable: {str(order.get('partiallyFillable')).lower()}\n\n"
            "Timing:\n"
            f"- Created: {order.get('creationDate')}\n"
            f"- Valid Until: {_valid_until(order.get('validTo'))}\n\n"
            f"Explorer Link: {explorer_order_url(chain_id, args.order_uid)}"
        )

    try:
        address = args.user_address or await account.get_address()
        orders = await client.get_orders(address, limit=args.limit)
    except EXPECTED_ERRORS as e:
        return f"Error querying orders: {e}"

    if not orders:
        return f"No CowSwap orders found for address {address}."
    lines = [f"CowSwap Orders for {address}:", ""]
    for i, order in enumerate(orders, start=1):
        lines.append(
            f"{i}. Order {order['uid'][:10]}... - Status: {order.get('status')} "
            f"- Created: {order.get('creationDate')}"
        )
    return "\n".join(lines)


COWSWAP_ORDER_QUERY_ACTION = Action(
    name="cowswap_order_query",
    description=COWSWAP_ORDER_QUERY_PROMPT,
    args_schema=OrderQueryInput,
    func=cowswap_order_query,
)

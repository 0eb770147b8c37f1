"""CoW Protocol actions: quotes, market and limit orders, order queries and cancellation."""

from gasless_agentkit.actions.cowswap.cancel_order import COWSWAP_CANCEL_ORDER_ACTION
from gasless_agentkit.actions.cowswap.execute import COWSWAP_EXECUTE_ACTION
from gasless_agentkit.actions.cowswap.limit_order import COWSWAP_LIMIT_ORDER_ACTION
from gasless_agentkit.actions.cowswap.order_query import COWSWAP_ORDER_QUERY_ACTION
from gasless_agentkit.actions.cowswap.quote import COWSWAP_QUOTE_ACTION

__all__ = [
    "COWSWAP_QUOTE_ACTION",
    "COWSWAP_EXECUTE_ACTION",
    "COWSWAP_LIMIT_ORDER_ACTION",
    "COWSWAP_ORDER_QUERY_ACTION",
    "COWSWAP_CANCEL_ORDER_ACTION",
]

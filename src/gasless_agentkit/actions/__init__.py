"""Built-in actions, in registry order."""

from __future__ import annotations

from gasless_agentkit.actions.base import (  # noqa: F401
    Action,
    ActionErr,
    ActionKind,
    ActionOk,
    ActionResult,
    EmptyArgs,
    ErrorKind,
    classify_result,
)
from gasless_agentkit.actions.check_transaction import CHECK_TRANSACTION_ACTION
from gasless_agentkit.actions.codex import ANALYZE_NETWORK_ACTION, ANALYZE_TOKEN_ACTION
from gasless_agentkit.actions.cowswap import (
    COWSWAP_CANCEL_ORDER_ACTION,
    COWSWAP_EXECUTE_ACTION,
    COWSWAP_LIMIT_ORDER_ACTION,
    COWSWAP_ORDER_QUERY_ACTION,
    COWSWAP_QUOTE_ACTION,
)
from gasless_agentkit.actions.debridge_swap import DEBRIDGE_SWAP_ACTION
from gasless_agentkit.actions.deposit import SMART_DEPOSIT_ACTION
from gasless_agentkit.actions.fourmeme import CREATE_FOURMEME_TOKEN_ACTION
from gasless_agentkit.actions.get_address import GET_ADDRESS_ACTION
from gasless_agentkit.actions.get_balance import GET_BALANCE_ACTION
from gasless_agentkit.actions.registry import ActionRegistry
from gasless_agentkit.actions.server_wallets import (
    LIST_SERVER_WALLETS_ACTION,
    SELECT_SERVER_WALLET_ACTION,
)
from gasless_agentkit.actions.smart_transfer import SMART_TRANSFER_ACTION
from gasless_agentkit.actions.token_details import GET_TOKEN_DETAILS_ACTION

_registry: ActionRegistry | None = None


def get_all_actions() -> list[Action]:
    return [
        GET_BALANCE_ACTION,
        GET_ADDRESS_ACTION,
        GET_TOKEN_DETAILS_ACTION,
        CHECK_TRANSACTION_ACTION,
        SMART_TRANSFER_ACTION,
        DEBRIDGE_SWAP_ACTION,
        SMART_DEPOSIT_ACTION,
        CREATE_FOURMEME_TOKEN_ACTION,
        COWSWAP_QUOTE_ACTION,
        COWSWAP_EXECUTE_ACTION,
        COWSWAP_LIMIT_ORDER_ACTION,
        COWSWAP_ORDER_QUERY_ACTION,
        COWSWAP_CANCEL_ORDER_ACTION,
        ANALYZE_TOKEN_ACTION,
        ANALYZE_NETWORK_ACTION,
        LIST_SERVER_WALLETS_ACTION,
        SELECT_SERVER_WALLET_ACTION,
    ]


def get_registry() -> ActionRegistry:
    """The shared registry of built-in actions."""
    global _registry
    if _registry is None:
        _registry = ActionRegistry(get_all_actions())
    return _registry

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gasless_agentkit.actions.cowswap.cancel_order import CancelOrderInput, cowswap_cancel_order
from gasless_agentkit.actions.cowswap.client import (
    VAULT_RELAYER,
    CowApiError,
    CowClient,
    build_order,
    cancellation_typed_data,
    order_from_quote,
    order_typed_data,
)
from gasless_agentkit.actions.cowswap.common import SwapInput, resolve_pair, unsupported_chain_message
from gasless_agentkit.actions.cowswap.execute import cowswap_execute
from gasless_agentkit.actions.cowswap.limit_order import LimitOrderInput, cowswap_limit_order
from gasless_agentkit.actions.cowswap.order_query import OrderQueryInput, cowswap_order_query
from gasless_agentkit.agentkit import ActionContext
from gasless_agentkit.chains import NATIVE_TOKEN_ADDRESS

from tests.conftest import make_smart_account

ORDER_UID = "0x" + "ab" * 56
USDC_AVALANCHE = "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e"

QUOTE = {
    "sellToken": NATIVE_TOKEN_ADDRESS,
    "buyToken": USDC_AVALANCHE,
    "sellAmount": "990000000000000000",
    "feeAmount": "10000000000000000",
    "buyAmount": "30000000",
    "validTo": 1_900_000_000,
}


# ---------------------------------------------------------------------------
# Order construction
# ---------------------------------------------------------------------------


def test_order_from_quote_folds_fee_and_applies_slippage():
    order = order_from_quote(QUOTE, slippage_bps=50)
    assert order["sellAmount"] == str(10**18)
    assert order["buyAmount"] == str(30_000_000 * 9950 // 10_000)
    assert order["feeAmount"] == "0"
    assert order["kind"] == "sell"
    assert order["validTo"] == 1_900_000_000
    assert order["partiallyFillable"] is False


def test_zero_slippage_keeps_the_quoted_buy_amount():
    assert order_from_quote(QUOTE, slippage_bps=0)["buyAmount"] == "30000000"


def test_typed_data_is_bound_to_chain_and_settlement():
    order = build_order(
        sell_token=USDC_AVALANCHE,
        buy_token=NATIVE_TOKEN_ADDRESS,
        sell_amount=1_000_000,
        buy_amount=1,
        valid_to=1_900_000_000,
    )
    typed = order_typed_data(43114, order)
    assert typed["primaryType"] == "Order"
    assert typed["domain"]["chainId"] == 43114
    assert typed["domain"]["name"] == "Gnosis Protocol"
    assert "EIP712Domain" in typed["types"]

    cancellation = cancellation_typed_data(100, [ORDER_UID])
    assert cancellation["primaryType"] == "OrderCancellations"
    assert cancellation["message"]["orderUids"] == [ORDER_UID]


def test_client_rejects_unsupported_chains():
    with pytest.raises(ValueError):
        CowClient(8453)


# ---------------------------------------------------------------------------
# Shared checks
# ---------------------------------------------------------------------------


def test_unsupported_chain_message():
    assert unsupported_chain_message(43114) is None
    assert unsupported_chain_message(8453).startswith("Error: CowSwap is not available on chain ID 8453.")


def test_resolve_pair_needs_both_sides():
    args = SwapInput(amount="1", token_in_symbol="USDC")
    assert resolve_pair(43114, args).startswith("Error: You must provide either")

    args = SwapInput(amount="1", token_in_symbol="eth", token_out_symbol="USDC")
    token_in, token_out = resolve_pair(43114, args)
    assert token_in == NATIVE_TOKEN_ADDRESS
    assert token_out.lower() == USDC_AVALANCHE


async def test_limit_order_on_unsupported_chain():
    account = make_smart_account(chain_id=8453)
    args = LimitOrderInput(sell_amount="1", min_buy_amount="2", token_in_symbol="ETH", token_out_symbol="USDC")
    result = await cowswap_limit_order(account, args)
    assert result.startswith("Error: CowSwap is not available on chain ID 8453.")


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


async def test_cancel_rejects_malformed_uid(smart_account):
    result = await cowswap_cancel_order(smart_account, CancelOrderInput(order_uid="0x1234"))
    assert result.startswith("Error: Invalid Order UID format.")
    smart_account.sign_typed_data.assert_not_awaited()


async def test_cancel_of_filled_order_never_signs(smart_account):
    order = {"status": "fulfilled", "creationDate": "2024-01-01T00:00:00Z", "owner": "0xowner"}
    with patch.object(CowClient, "get_order", AsyncMock(return_value=order)), \
            patch.object(CowClient, "cancel_orders", AsyncMock()) as cancel:
        result = await cowswap_cancel_order(smart_account, CancelOrderInput(order_uid=ORDER_UID))

    assert result.startswith(f"Cannot cancel order {ORDER_UID}")
    assert "Order Status: fulfilled" in result
    smart_account.sign_typed_data.assert_not_awaited()
    cancel.assert_not_awaited()


async def test_cancel_of_open_order(smart_account):
    with patch.object(CowClient, "get_order", AsyncMock(return_value={"status": "open"})), \
            patch.object(CowClient, "cancel_orders", AsyncMock()) as cancel:
        result = await cowswap_cancel_order(
            smart_account, CancelOrderInput(order_uid=ORDER_UID, reason="price moved")
        )

    assert result.startswith("CowSwap Order Cancelled Successfully!")
    assert "- Reason: price moved" in result
    assert f"https://explorer.cow.fi/avalanche/orders/{ORDER_UID}" in result
    cancel.assert_awaited_once_with([ORDER_UID], "0x" + "ab" * 65)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def test_order_query_for_wallet_without_orders(smart_account):
    with patch.object(CowClient, "get_orders", AsyncMock(return_value=[])):
        result = await cowswap_order_query(smart_account, OrderQueryInput())
    assert result == "No CowSwap orders found for address 0x1111111111111111111111111111111111111111."


async def test_order_query_by_uid_not_found(smart_account):
    error = CowApiError(404, "NotFound", "Order was not found")
    with patch.object(CowClient, "get_order", AsyncMock(side_effect=error)):
        result = await cowswap_order_query(smart_account, OrderQueryInput(order_uid=ORDER_UID))
    assert result.startswith(f"Error: Could not find order with UID {ORDER_UID}.")


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _context(account) -> ActionContext:
    return ActionContext(agentkit=MagicMock(), account=account)


async def test_execute_falls_back_to_manual_instructions_on_wrong_owner(smart_account):
    args = SwapInput(amount="1", token_in_symbol="eth", token_out_symbol="USDC")
    rejection = CowApiError(400, "WrongOwner", "recovered signer does not match the order owner")
    with patch.object(CowClient, "get_quote", AsyncMock(return_value=QUOTE)), \
            patch.object(CowClient, "post_order", AsyncMock(side_effect=rejection)):
        result = await cowswap_execute(_context(smart_account), args)

    assert result.startswith("Smart Account Limitation Detected")
    assert "https://swap.cow.fi/#/avalanche/swap?" in result
    assert "- Smart Account: 0x1111111111111111111111111111111111111111" in result
    smart_account.sign_typed_data.assert_awaited_once()


async def test_execute_reports_other_api_errors(smart_account):
    args = SwapInput(amount="1", token_in_symbol="eth", token_out_symbol="USDC")
    rejection = CowApiError(400, "InsufficientBalance", "not enough balance")
    with patch.object(CowClient, "get_quote", AsyncMock(return_value=QUOTE)), \
            patch.object(CowClient, "post_order", AsyncMock(side_effect=rejection)):
        result = await cowswap_execute(_context(smart_account), args)

    assert result.startswith("Error executing CowSwap trade:")
    assert "InsufficientBalance" in result


async def test_execute_success_with_native_sell_token(smart_account):
    args = SwapInput(amount="1", token_in_symbol="eth", token_out_symbol="USDC")
    with patch.object(CowClient, "get_quote", AsyncMock(return_value=QUOTE)) as get_quote, \
            patch.object(CowClient, "post_order", AsyncMock(return_value=ORDER_UID)), \
            patch("gasless_agentkit.actions.cowswap.execute.ensure_allowance") as ensure_allowance:
        result = await cowswap_execute(_context(smart_account), args)

    assert result.startswith("CowSwap Order Executed Successfully!")
    assert f"- Order UID: {ORDER_UID}" in result
    assert get_quote.await_args.kwargs["sell_amount"] == 10**18
    ensure_allowance.assert_not_called()


async def test_execute_needs_a_local_signer():
    result = await cowswap_execute(_context(None), SwapInput(amount="1"))
    assert result.startswith("Error executing CowSwap trade: order signing needs")


def test_vault_relayer_is_the_allowance_target():
    assert VAULT_RELAYER.startswith("0x") and len(VAULT_RELAYER) == 42

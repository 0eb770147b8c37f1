from unittest.mock import AsyncMock, MagicMock, patch

from gasless_agentkit.actions.debridge_swap import DebridgeSwapInput, check_minimum, debridge_swap
from gasless_agentkit.errors import BundlerError

RECIPIENT = "0x3333333333333333333333333333333333333333"


def test_minimum_per_token_and_chain():
    assert check_minimum("usdt", 43114, "1.0") is None
    assert check_minimum("USDT", 1, "0.6") is None
    assert check_minimum("DAI", 8453, "auto") is None
    message = check_minimum("usdt", 43114, "0.5")
    assert message == (
        "Error: Amount too small for cross-chain swap. For USDT on chain 43114, "
        "the minimum amount is 1.0 to cover operational costs."
    )


def test_unknown_tokens_use_the_default_minimum():
    assert "minimum amount is 1.0" in check_minimum("WAVAX", 43114, "0.1")


async def test_below_minimum_makes_no_network_calls(smart_account):
    args = DebridgeSwapInput(
        src_chain_token_in="USDT",
        src_chain_token_in_amount="0.5",
        dst_chain_token_out="USDT",
        dst_chain_token_out_recipient=RECIPIENT,
        dst_chain_id=56,
    )
    with patch("gasless_agentkit.actions.debridge_swap.httpx.AsyncClient") as client, \
            patch("gasless_agentkit.actions.debridge_swap.get_decimals") as get_decimals:
        result = await debridge_swap(smart_account, args)

    assert result.startswith("Error: Amount too small for cross-chain swap.")
    client.assert_not_called()
    get_decimals.assert_not_called()
    smart_account.get_address.assert_not_awaited()
    smart_account.send_transaction.assert_not_awaited()


async def test_unsupported_destination_chain(smart_account):
    args = DebridgeSwapInput(
        src_chain_token_in="USDT",
        src_chain_token_in_amount="5",
        dst_chain_token_out="USDT",
        dst_chain_token_out_recipient=RECIPIENT,
        dst_chain_id=999999,
    )
    result = await debridge_swap(smart_account, args)
    assert result == "Error: Destination chain ID 999999 is not supported"


async def test_receipt_polling_errors_are_reported(smart_account):
    args = DebridgeSwapInput(
        src_chain_token_in="eth",
        src_chain_token_in_amount="2",
        dst_chain_token_out="eth",
        dst_chain_token_out_recipient=RECIPIENT,
        dst_chain_id=56,
        wait=True,
    )
    order = {"orderId": "0xorder", "tx": {"to": RECIPIENT, "data": "0xdead", "value": "2"}}
    smart_account.send_transaction.return_value = MagicMock(user_op_hash="0xop")
    smart_account.wait_for_user_operation.side_effect = BundlerError(-32000, "bundler down")
    with patch("gasless_agentkit.actions.debridge_swap.create_order", AsyncMock(return_value=order)):
        result = await debridge_swap(smart_account, args)

    assert result == "Error creating DeBridge swap: bundler down (code -32000)"
    smart_account.send_transaction.assert_awaited_once()

"""Tests for the dispatcher and the three credential modes."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from eth_abi import encode

from gasless_agentkit.actions import get_registry
from gasless_agentkit.actions.base import (
    Action,
    ActionErr,
    ActionKind,
    ActionOk,
    EmptyArgs,
    ErrorKind,
    get_integrations,
)
from gasless_agentkit.agentkit import ActionContext, Agentkit
from gasless_agentkit.config import AgentkitConfig, IntegrationsConfig
from gasless_agentkit.errors import (
    ActionValidationError,
    ConfigurationError,
    CredentialError,
    UnsupportedChainError,
)
from gasless_agentkit.services.server_wallet import ServerWallet
from gasless_agentkit.types import AuthVerificationResponse, CredentialSnapshot

from tests.conftest import SMART_ADDRESS, TEST_PRIVATE_KEY, make_smart_account

ADDRESS = "0x1111111111111111111111111111111111111111"

# Smallest valid arguments for every action that needs an account.
MINIMAL_ARGS = {
    "get_balance": {},
    "get_address": {},
    "get_token_details": {"token_address": ADDRESS},
    "check_transaction": {"user_op_hash": "0x" + "00" * 32},
    "smart_transfer": {"amount": "1", "token_address": "eth", "destination": ADDRESS},
    "debridge_swap": {
        "src_chain_token_in": "USDT",
        "src_chain_token_in_amount": "5",
        "dst_chain_token_out": "USDT",
        "dst_chain_token_out_recipient": ADDRESS,
    },
    "smart_deposit": {"amount": "1", "token_ticker": "USDC"},
    "create_fourmeme_token": {
        "name": "My Token",
        "symbol": "MTK",
        "description": "test",
        "image_url": "https://example.com/a.png",
        "category": "Meme",
    },
    "cowswap_quote": {"amount": "1"},
    "cowswap_execute": {"amount": "1"},
    "cowswap_limit_order": {"sell_amount": "1", "min_buy_amount": "2"},
    "cowswap_order_query": {},
    "cowswap_cancel_order": {"order_uid": "0x" + "ab" * 56},
}


def _server_wallets():
    return [
        ServerWallet(id=1, agentkit_id=1, smart_address="0xAAAA000000000000000000000000000000000000", account_index=0),
        ServerWallet(id=2, agentkit_id=1, smart_address="0xBBBB000000000000000000000000000000000000", account_index=2),
    ]


def _server_agentkit() -> Agentkit:
    agentkit = Agentkit.configure_server_wallet("server-key", "http://localhost:3001")
    agentkit.server_wallet_service.list_wallets = AsyncMock(return_value=_server_wallets())
    return agentkit


def _local_agentkit(chain_id: int = 43114) -> Agentkit:
    with patch.object(Agentkit, "_build_smart_account", return_value=make_smart_account(chain_id)):
        return Agentkit.configure_with_wallet(chain_id, "paymaster-key", private_key=TEST_PRIVATE_KEY)


# ---------------------------------------------------------------------------
# Capability checks
# ---------------------------------------------------------------------------


async def test_actions_requiring_an_account_fail_softly_without_one():
    agentkit = Agentkit(8453)
    required = [a for a in get_registry() if a.requires_account]
    assert {a.name for a in required} == set(MINIMAL_ARGS)
    for action in required:
        result = await agentkit.run(action, MINIMAL_ARGS[action.name])
        assert "A Smart Account is required" in result
        assert result.startswith(f"Unable to run Action: {action.name}.")


async def test_validation_happens_before_anything_else():
    agentkit = Agentkit(8453)
    action = get_registry().find_by_name("smart_transfer")
    with pytest.raises(ActionValidationError):
        await agentkit.run(action, {"amount": "1"})


async def test_unexpected_exceptions_propagate_from_run():
    def boom(account, args):
        raise RuntimeError("boom")

    action = Action(name="boom", description="raises", args_schema=EmptyArgs, func=boom)
    agentkit = _local_agentkit()
    with pytest.raises(RuntimeError, match="boom"):
        await agentkit.run(action, {})


async def test_run_serializes_calls_on_one_instance():
    running = 0
    peak = 0

    async def slow(account, args):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return "done"

    action = Action(name="slow", description="slow", args_schema=EmptyArgs, func=slow, requires_account=False)
    agentkit = Agentkit(8453)
    results = await asyncio.gather(*(agentkit.run(action) for _ in range(3)))
    assert results == ["done"] * 3
    assert peak == 1


async def test_integration_settings_stay_with_their_instance():
    def codex_key(account, args):
        return get_integrations().codex_api_key

    action = Action(
        name="codex_key", description="reads settings", args_schema=EmptyArgs,
        func=codex_key, requires_account=False,
    )
    first = Agentkit(8453, AgentkitConfig(integrations=IntegrationsConfig(codex_api_key="key-A")))
    second = Agentkit(8453, AgentkitConfig(integrations=IntegrationsConfig(codex_api_key="key-B")))

    assert await first.run(action) == "key-A"
    assert await second.run(action) == "key-B"
    assert await first.run(action) == "key-A"
    assert get_integrations().codex_api_key == ""


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------


def test_unsupported_chain_is_rejected_at_configuration():
    with pytest.raises(UnsupportedChainError) as exc_info:
        Agentkit.configure_with_wallet(1, "paymaster-key", private_key=TEST_PRIVATE_KEY)
    assert "1" in str(exc_info.value)
    assert exc_info.value.chain_id == 1


def test_local_mode_requires_key_material():
    with pytest.raises(ConfigurationError):
        Agentkit.configure_with_wallet(43114, "paymaster-key")
    with pytest.raises(ConfigurationError):
        Agentkit.configure_with_wallet(43114, "", private_key=TEST_PRIVATE_KEY)


async def test_local_mode_get_address_on_avalanche():
    agentkit = Agentkit.configure_with_wallet(43114, "paymaster-key", private_key=TEST_PRIVATE_KEY)
    account = agentkit.get_smart_account()
    account.web3 = MagicMock()
    account.web3.eth.call.return_value = encode(["address"], [SMART_ADDRESS])

    result = await agentkit.run(get_registry().find_by_name("get_address"))

    assert result.startswith("Smart Account: 0x")
    address = result.removeprefix("Smart Account: ")
    assert len(address) == 42
    int(address[2:], 16)
    assert address.lower() == SMART_ADDRESS
    assert await agentkit.get_chain_id() == 43114


async def test_extended_actions_receive_a_context():
    seen = {}

    async def capture(ctx, args):
        seen["ctx"] = ctx
        return "ok"

    action = Action(
        name="capture", description="capture", args_schema=EmptyArgs, func=capture, kind=ActionKind.EXTENDED
    )
    agentkit = _local_agentkit()
    assert await agentkit.run(action) == "ok"
    ctx = seen["ctx"]
    assert isinstance(ctx, ActionContext)
    assert ctx.get_smart_account() is agentkit.get_smart_account()
    assert ctx.get_signer_adapter() is not None
    assert not ctx.is_server_mode


async def test_get_address_without_configuration_raises():
    with pytest.raises(ConfigurationError, match="Smart account not configured"):
        await Agentkit(8453).get_address()


# ---------------------------------------------------------------------------
# API-key mode
# ---------------------------------------------------------------------------


def _authority(success: bool = True) -> MagicMock:
    authority = MagicMock()
    snapshot = CredentialSnapshot(
        private_key=TEST_PRIVATE_KEY, address=ADDRESS, rpc_url="http://rpc", chain_id=43114
    )
    authority.verify_api_key = AsyncMock(
        return_value=AuthVerificationResponse(success=success, data=snapshot if success else None,
                                              error=None if success else "Invalid API key")
    )
    return authority


async def test_api_key_mode_revalidates_on_every_call():
    authority = _authority()
    agentkit = await Agentkit.configure_with_api_key("key", authority=authority)
    assert authority.verify_api_key.await_count == 1

    with patch.object(Agentkit, "_account_from_snapshot", return_value=make_smart_account()):
        assert await agentkit.get_address() == SMART_ADDRESS
        assert await agentkit.get_address() == SMART_ADDRESS

    assert authority.verify_api_key.await_count == 3


async def test_api_key_mode_reports_rejection_as_text():
    authority = _authority()
    agentkit = await Agentkit.configure_with_api_key("key", authority=authority)
    authority.verify_api_key.return_value = AuthVerificationResponse(success=False, error="Invalid API key")

    result = await agentkit.run(get_registry().find_by_name("get_address"))
    assert result.startswith("Unable to run Action: get_address. API key validation failed")

    classified = await agentkit.run_result(get_registry().find_by_name("get_address"))
    assert isinstance(classified, ActionErr)
    assert classified.kind is ErrorKind.CREDENTIAL

    with pytest.raises(CredentialError, match="Cannot get address"):
        await agentkit.get_address()


async def test_api_key_mode_rejected_at_configuration():
    with pytest.raises(ConfigurationError):
        await Agentkit.configure_with_api_key("bogus", authority=_authority(success=False))


# ---------------------------------------------------------------------------
# Server-wallet mode
# ---------------------------------------------------------------------------


async def test_server_wallet_switch_changes_subsequent_calls():
    agentkit = _server_agentkit()
    registry = get_registry()

    before = await agentkit.run(registry.find_by_name("get_address"))
    assert before == "Smart Account (Server Wallet Index 0): 0xAAAA000000000000000000000000000000000000"

    switched = await agentkit.run(registry.find_by_name("select_server_wallet"), {"wallet_index": 2})
    assert switched.startswith("Successfully switched from wallet index 0 to wallet index 2.")

    after = await agentkit.run(registry.find_by_name("get_address"))
    assert after == "Smart Account (Server Wallet Index 2): 0xBBBB000000000000000000000000000000000000"

    balance = await agentkit.run(registry.find_by_name("get_balance"))
    assert "0xBBBB000000000000000000000000000000000000" in balance
    assert "Wallet Index: 2" in balance


async def test_per_call_wallet_index_leaves_selection_alone():
    agentkit = _server_agentkit()
    result = await agentkit.run(get_registry().find_by_name("get_address"), wallet_index=2)
    assert "Server Wallet Index 2" in result
    assert agentkit.selected_wallet_index == 0


async def test_missing_server_wallet_is_reported():
    agentkit = _server_agentkit()
    result = await agentkit.run(get_registry().find_by_name("get_address"), wallet_index=5)
    assert result.startswith("Error: No wallet found at index 5.")


async def test_list_server_wallets_marks_current():
    agentkit = _server_agentkit()
    result = await agentkit.run(get_registry().find_by_name("list_server_wallets"))
    assert "Index 0 (CURRENT): 0xAAAA000000000000000000000000000000000000" in result
    assert "Index 2: 0xBBBB000000000000000000000000000000000000" in result
    assert result.endswith("Currently selected wallet index: 0")


async def test_server_only_actions_outside_server_mode():
    agentkit = _local_agentkit()
    result = await agentkit.run(get_registry().find_by_name("list_server_wallets"))
    assert result.startswith("Error: This action is only available in server mode.")
    result = await agentkit.run(get_registry().find_by_name("select_server_wallet"), {"wallet_index": 1})
    assert result.startswith("Error: This action is only available in server mode.")


async def test_run_result_wraps_success():
    agentkit = _server_agentkit()
    result = await agentkit.run_result(get_registry().find_by_name("get_address"))
    assert isinstance(result, ActionOk)
    assert result.ok


async def test_run_result_tags_invalid_arguments():
    agentkit = Agentkit(8453)
    result = await agentkit.run_result(get_registry().find_by_name("smart_transfer"), {"amount": "1"})
    assert isinstance(result, ActionErr)
    assert result.kind is ErrorKind.VALIDATION
    assert "destination" in result.message

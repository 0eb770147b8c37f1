"""Tests for the action catalog and argument validation."""

import pytest

from gasless_agentkit.actions import get_all_actions, get_registry
from gasless_agentkit.actions.base import Action, ActionKind, EmptyArgs
from gasless_agentkit.actions.registry import ActionRegistry
from gasless_agentkit.errors import ActionValidationError

EXPECTED_ORDER = [
    "get_balance",
    "get_address",
    "get_token_details",
    "check_transaction",
    "smart_transfer",
    "debridge_swap",
    "smart_deposit",
    "create_fourmeme_token",
    "cowswap_quote",
    "cowswap_execute",
    "cowswap_limit_order",
    "cowswap_order_query",
    "cowswap_cancel_order",
    "analyze_token",
    "analyze_network",
    "list_server_wallets",
    "select_server_wallet",
]


def test_registry_names_are_unique_and_non_empty():
    names = get_registry().list_names()
    assert all(names)
    assert len(names) == len(set(names))


def test_registry_order_is_stable():
    assert get_registry().list_names() == EXPECTED_ORDER


def test_every_action_has_a_description_and_schema():
    for action in get_all_actions():
        assert action.description.strip()
        definition = action.to_definition()
        assert definition.name == action.name
        assert definition.parameters["type"] == "object"


def test_zero_argument_schemas_accept_empty_object():
    zero_arg = [a for a in get_all_actions() if a.args_schema is EmptyArgs]
    assert {a.name for a in zero_arg} == {"get_address", "list_server_wallets"}
    for action in zero_arg:
        assert isinstance(action.parse_args({}), EmptyArgs)
        assert isinstance(action.parse_args(None), EmptyArgs)


def test_missing_required_field_is_rejected():
    action = get_registry().find_by_name("smart_transfer")
    with pytest.raises(ActionValidationError) as exc_info:
        action.parse_args({"amount": "1"})
    message = str(exc_info.value)
    assert "smart_transfer" in message
    assert "token_address" in message
    assert "destination" in message


def test_parse_args_fills_defaults_and_drops_unknown_keys():
    action = get_registry().find_by_name("cowswap_quote")
    parsed = action.parse_args({"amount": "1", "unexpected": True})
    assert parsed.slippage_bps == 50
    assert parsed.validity_seconds == 3600
    assert not hasattr(parsed, "unexpected")


def test_debridge_rejects_both_amounts_auto():
    action = get_registry().find_by_name("debridge_swap")
    with pytest.raises(ActionValidationError):
        action.parse_args({
            "src_chain_token_in": "USDT",
            "src_chain_token_in_amount": "auto",
            "dst_chain_token_out": "USDT",
            "dst_chain_token_out_amount": "auto",
            "dst_chain_token_out_recipient": "0x1111111111111111111111111111111111111111",
        })


def test_select_server_wallet_rejects_negative_index():
    action = get_registry().find_by_name("select_server_wallet")
    with pytest.raises(ActionValidationError):
        action.parse_args({"wallet_index": -1})


def test_action_kinds_and_account_requirements():
    registry = get_registry()
    assert registry.find_by_name("cowswap_execute").kind is ActionKind.EXTENDED
    assert registry.find_by_name("select_server_wallet").kind is ActionKind.EXTENDED
    assert registry.find_by_name("get_balance").kind is ActionKind.STANDARD
    assert not registry.find_by_name("analyze_token").requires_account
    assert registry.find_by_name("smart_transfer").requires_account


def test_find_by_name_returns_last_registered_duplicate():
    first = Action(name="dup", description="first", args_schema=EmptyArgs, func=lambda a, b: "1")
    second = Action(name="dup", description="second", args_schema=EmptyArgs, func=lambda a, b: "2")
    registry = ActionRegistry([first, second])
    assert registry.find_by_name("dup") is second
    assert len(registry) == 2
    assert registry.find_by_name("missing") is None


def test_action_requires_name_and_description():
    with pytest.raises(ValueError):
        Action(name="", description="x", args_schema=EmptyArgs, func=lambda a, b: "")

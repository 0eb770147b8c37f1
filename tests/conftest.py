"""Shared fixtures: mocked accounts that never touch the network."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from gasless_agentkit.wallet.smart_account import SmartAccount

SMART_ADDRESS = "0x1111111111111111111111111111111111111111"
OWNER_ADDRESS = "0x2222222222222222222222222222222222222222"
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def make_smart_account(chain_id: int = 43114, address: str = SMART_ADDRESS) -> MagicMock:
    account = MagicMock(spec=SmartAccount)
    account.chain_id = chain_id
    account.owner = OWNER_ADDRESS
    account.web3 = MagicMock()
    account.get_address = AsyncMock(return_value=address)
    account.sign_typed_data = AsyncMock(return_value="0x" + "ab" * 65)
    account.sign_message = AsyncMock(return_value="0x" + "cd" * 65)
    account.send_transaction = AsyncMock()
    account.wait_for_user_operation = AsyncMock()
    account.get_user_operation_receipt = AsyncMock(return_value=None)
    account.get_balances = AsyncMock(return_value=[])
    return account


@pytest.fixture
def smart_account() -> MagicMock:
    return make_smart_account()

from eth_account import Account

from gasless_agentkit.config import ApiKeyEntry, AuthConfig
from gasless_agentkit.services.auth import ApiKeyStore

from tests.conftest import TEST_PRIVATE_KEY


async def test_unknown_keys_are_rejected():
    result = await ApiKeyStore().verify_api_key("not-a-key")
    assert not result.success
    assert result.error == "Invalid API key"
    assert result.data is None


async def test_empty_key():
    result = await ApiKeyStore().verify_api_key("")
    assert result.error == "API key is required"


async def test_demo_key_issues_avalanche_credentials():
    result = await ApiKeyStore().verify_api_key("test-api-key-123")
    assert result.success
    assert result.data.chain_id == 43114
    assert result.data.address == Account.from_key(result.data.private_key).address
    assert "avax" in result.data.rpc_url


async def test_configured_keys_replace_demo_keys():
    auth = AuthConfig(keys=[ApiKeyEntry(
        api_key="prod-key", private_key=TEST_PRIVATE_KEY, address="0x0", chain_id=8453,
        rpc_url="https://base.rpc",
    )])
    store = ApiKeyStore.from_config(auth)
    assert store.get_registered_api_keys() == ["prod-key"]
    assert not (await store.verify_api_key("test-api-key-123")).success

    result = await store.verify_api_key("prod-key")
    assert result.success
    assert result.data.chain_id == 8453
    assert result.data.rpc_url == "https://base.rpc"


async def test_unusable_stored_key():
    store = ApiKeyStore(include_demo_keys=False)
    store.add_api_key("broken", "0x1234")
    result = await store.verify_api_key("broken")
    assert not result.success
    assert result.error == "Internal server error"


def test_key_management():
    store = ApiKeyStore(include_demo_keys=False)
    store.add_api_key("k", TEST_PRIVATE_KEY)
    assert store.has_api_key("k")
    assert store.remove_api_key("k")
    assert not store.remove_api_key("k")

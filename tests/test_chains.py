import pytest

from gasless_agentkit.chains import (
    NATIVE_TOKEN_ADDRESS,
    get_chain,
    get_explorer,
    get_supported_chains,
    is_supported_chain,
    resolve_token,
)
from gasless_agentkit.errors import UnsupportedChainError

MAINNETS = {8453, 250, 1284, 1088, 43114, 56}


def test_supported_mainnets(monkeypatch):
    monkeypatch.delenv("TESTNET_SUPPORT", raising=False)
    assert set(get_supported_chains()) == MAINNETS
    assert not is_supported_chain(1)


def test_sepolia_only_with_testnet_support(monkeypatch):
    assert 11155111 in get_supported_chains(testnet=True)
    monkeypatch.setenv("TESTNET_SUPPORT", "true")
    assert is_supported_chain(11155111)


def test_get_chain():
    assert get_chain(43114).native_symbol == "AVAX"
    with pytest.raises(UnsupportedChainError, match="Chain ID 1 is not supported"):
        get_chain(1)


def test_resolve_token():
    address = "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7"
    assert resolve_token(43114, address) == address
    assert resolve_token(43114, "ETH") == NATIVE_TOKEN_ADDRESS
    assert resolve_token(43114, "usdt") == address
    assert resolve_token(43114, "NOPE") is None


def test_explorer_falls_back_to_etherscan():
    assert get_explorer(56)[0].startswith("https://")
    assert get_explorer(999) == ("https://etherscan.io", "Etherscan")

"""Chain definitions and token mappings for supported EVM networks."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from gasless_agentkit.errors import UnsupportedChainError

NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class Chain:
    """An EVM network the smart account infrastructure is deployed on."""

    chain_id: int
    name: str
    rpc_url: str
    native_symbol: str
    explorer_url: str
    explorer_name: str
    is_testnet: bool = False


MAINNET_CHAINS: dict[int, Chain] = {
    8453: Chain(
        chain_id=8453,
        name="Base",
        rpc_url="https://rpc.ankr.com/base",
        native_symbol="ETH",
        explorer_url="https://basescan.org",
        explorer_name="BaseScan",
    ),
    250: Chain(
        chain_id=250,
        name="Fantom",
        rpc_url="https://rpc.ankr.com/fantom",
        native_symbol="FTM",
        explorer_url="https://ftmscan.com",
        explorer_name="FTMScan",
    ),
    1284: Chain(
        chain_id=1284,
        name="Moonbeam",
        rpc_url="https://rpc.ankr.com/moonbeam",
        native_symbol="GLMR",
        explorer_url="https://moonscan.io",
        explorer_name="Moonscan",
    ),
    1088: Chain(
        chain_id=1088,
        name="Metis",
        rpc_url="https://rpc.ankr.com/metis",
        native_symbol="METIS",
        explorer_url="https://explorer.metis.io",
        explorer_name="Metis Explorer",
    ),
    43114: Chain(
        chain_id=43114,
        name="Avalanche",
        rpc_url="https://rpc.ankr.com/avalanche",
        native_symbol="AVAX",
        explorer_url="https://snowscan.xyz",
        explorer_name="Snowscan",
    ),
    56: Chain(
        chain_id=56,
        name="BNB Smart Chain",
        rpc_url="https://rpc.ankr.com/bsc",
        native_symbol="BNB",
        explorer_url="https://bscscan.com",
        explorer_name="BscScan",
    ),
}

SEPOLIA = Chain(
    chain_id=11155111,
    name="Sepolia Testnet",
    rpc_url=os.environ.get("SEPOLIA_RPC_URL", "https://rpc.ankr.com/eth_sepolia"),
    native_symbol="ETH",
    explorer_url="https://sepolia.etherscan.io",
    explorer_name="Etherscan",
    is_testnet=True,
)

TOKEN_MAPPINGS: dict[int, dict[str, str]] = {
    43114: {
        "USDT": "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7",
        "USDC": "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e",
        "WAVAX": "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",
        "BTC.E": "0x152b9d0fdc40c096757f570a51e494bd4b943e50",
        "BUSD": "0x9c9e5fd8bbc25984b178fdce6117defa39d2db39",
        "WETH": "0x49d5c2bdffac6ce2bfdb6640f4f80f226bc10bab",
        "USDC.E": "0xa7d7079b0fead91f3e65f86e8915cb59c1a4c664",
        "WBTC": "0x50b7545627a5162f82a992c33b87adc75187b218",
        "DAI": "0xd586e7f844cea2f87f50152665bcbc2c279d8d70",
    },
    56: {
        "USDT": "0x55d398326f99059ff775485246999027b3197955",
        "WBNB": "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
        "WETH": "0x2170ed0880ac9a755fd29b2688956bd959f933f8",
        "BUSD": "0xe9e7cea3dedca5984780bafc599bd69add087d56",
        "CAKE": "0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82",
        "SOL": "0x570a5d26f7765ecb712c0924e4de545b89fd43df",
        "TST": "0x86bb94ddd16efc8bc58e6b056e8df71d9e666429",
        "DAI": "0x1af3f329e8be154074d8769d1ffa4ee058b1dbc3",
        "TON": "0x76a797a59ba2c17726896976b7b3747bfd1d220f",
        "PEPE": "0x25d887ce7a35172c62febfd67a1856f20faebb00",
    },
    8453: {
        "WETH": "0x4200000000000000000000000000000000000006",
        "USDC": "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        "DAI": "0x50c5725949a6f0c72e6c4a641f24049a917db0cb",
    },
    250: {},
    1284: {},
    1088: {},
}

_SEPOLIA_TOKENS = {
    "WETH": "0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14",
    "USDC": os.environ.get("SEPOLIA_USDC_ADDRESS", ZERO_ADDRESS),
    "USDT": os.environ.get("SEPOLIA_USDT_ADDRESS", ZERO_ADDRESS),
    "DAI": os.environ.get("SEPOLIA_DAI_ADDRESS", ZERO_ADDRESS),
}

# Symbols that exist on most chains, for prompting.
COMMON_TOKENS = ["ETH", "USDT", "USDC", "DAI", "WETH", "WBTC", "BUSD"]


def testnet_enabled() -> bool:
    """True when ``TESTNET_SUPPORT`` is switched on in the environment."""
    return os.environ.get("TESTNET_SUPPORT", "").lower() == "true"


def get_supported_chains(testnet: bool | None = None) -> dict[int, Chain]:
    """Return the supported chains keyed by chain ID.

    Sepolia is only included when *testnet* is true (or, when *testnet* is
    ``None``, when ``TESTNET_SUPPORT=true``).
    """
    if testnet is None:
        testnet = testnet_enabled()
    chains = dict(MAINNET_CHAINS)
    if testnet:
        chains[SEPOLIA.chain_id] = SEPOLIA
    return chains


def get_token_mappings(testnet: bool | None = None) -> dict[int, dict[str, str]]:
    if testnet is None:
        testnet = testnet_enabled()
    mappings = {cid: dict(tokens) for cid, tokens in TOKEN_MAPPINGS.items()}
    if testnet:
        mappings[SEPOLIA.chain_id] = dict(_SEPOLIA_TOKENS)
    return mappings


def is_supported_chain(chain_id: int, testnet: bool | None = None) -> bool:
    return chain_id in get_supported_chains(testnet)


def get_chain(chain_id: int, testnet: bool | None = None) -> Chain:
    """Get a chain by ID. Raises ``UnsupportedChainError`` if not found."""
    chains = get_supported_chains(testnet)
    if chain_id not in chains:
        raise UnsupportedChainError(chain_id)
    return chains[chain_id]


def get_chain_name(chain_id: int) -> str:
    chain = get_supported_chains(True).get(chain_id)
    return chain.name if chain else "Unknown Chain"


def get_native_symbol(chain_id: int) -> str:
    chain = get_supported_chains(True).get(chain_id)
    return chain.native_symbol if chain else "ETH"


def get_explorer(chain_id: int) -> tuple[str, str]:
    """Return ``(explorer_url, explorer_name)``, defaulting to Etherscan."""
    chain = get_supported_chains(True).get(chain_id)
    if chain is None:
        return "https://etherscan.io", "Etherscan"
    return chain.explorer_url, chain.explorer_name


def is_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value or ""))


def resolve_token_symbol(chain_id: int, symbol: str) -> str | None:
    """Look up a token address by ticker on *chain_id* (case-insensitive)."""
    tokens = get_token_mappings().get(chain_id, {})
    return tokens.get(symbol.upper())


def resolve_token(chain_id: int, token: str) -> str | None:
    """Resolve an address, the literal ``eth`` or a ticker into an address."""
    if is_address(token):
        return token
    if token.lower() == "eth":
        return NATIVE_TOKEN_ADDRESS
    return resolve_token_symbol(chain_id, token)


def symbol_for_address(chain_id: int, address: str) -> str | None:
    target = address.lower()
    for symbol, token_address in get_token_mappings().get(chain_id, {}).items():
        if token_address.lower() == target:
            return symbol
    return None

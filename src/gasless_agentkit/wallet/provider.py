"""Web3 connections and ERC-20 reads for the supported chains."""

from __future__ import annotations

import logging

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from gasless_agentkit.chains import get_chain
from gasless_agentkit.types import TokenDetails

logger = logging.getLogger("gasless_agentkit.wallet.provider")

ERC20_ABI = [
    {"name": "name", "type": "function", "stateMutability": "view",
     "inputs": [], "outputs": [{"name": "", "type": "string"}]},
    {"name": "symbol", "type": "function", "stateMutability": "view",
     "inputs": [], "outputs": [{"name": "", "type": "string"}]},
    {"name": "decimals", "type": "function", "stateMutability": "view",
     "inputs": [], "outputs": [{"name": "", "type": "uint8"}]},
    {"name": "balanceOf", "type": "function", "stateMutability": "view",
     "inputs": [{"name": "account", "type": "address"}],
     "outputs": [{"name": "", "type": "uint256"}]},
    {"name": "allowance", "type": "function", "stateMutability": "view",
     "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
     "outputs": [{"name": "", "type": "uint256"}]},
]


class Web3Provider:
    """Caches one Web3 instance per RPC URL."""

    def __init__(self) -> None:
        self._instances: dict[str, Web3] = {}

    def get_web3(self, chain_id: int, rpc_url: str | None = None) -> Web3:
        """Return a (cached) Web3 instance for *chain_id*.

        Falls back to the chain's public RPC when *rpc_url* is not given and
        injects POA middleware for everything except Ethereum mainnet.
        """
        url = rpc_url or get_chain(chain_id, testnet=True).rpc_url
        if url in self._instances:
            return self._instances[url]

        w3 = Web3(Web3.HTTPProvider(url))
        if chain_id != 1:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        self._instances[url] = w3
        logger.debug("Connected to chain %s via %s", chain_id, url)
        return w3


_provider = Web3Provider()


def get_web3(chain_id: int, rpc_url: str | None = None) -> Web3:
    return _provider.get_web3(chain_id, rpc_url)


def erc20(w3: Web3, token_address: str):
    return w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)


def read_decimals(w3: Web3, token_address: str) -> int:
    return int(erc20(w3, token_address).functions.decimals().call())


def read_balance(w3: Web3, token_address: str, owner: str) -> int:
    return int(
        erc20(w3, token_address).functions.balanceOf(Web3.to_checksum_address(owner)).call()
    )


def read_allowance(w3: Web3, token_address: str, owner: str, spender: str) -> int:
    return int(
        erc20(w3, token_address)
        .functions.allowance(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
        )
        .call()
    )


def read_token_details(w3: Web3, token_address: str, chain_id: int) -> TokenDetails:
    contract = erc20(w3, token_address)
    return TokenDetails(
        name=contract.functions.name().call(),
        symbol=contract.functions.symbol().call(),
        decimals=int(contract.functions.decimals().call()),
        address=Web3.to_checksum_address(token_address),
        chain_id=chain_id,
    )

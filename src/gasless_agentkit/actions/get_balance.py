"""get_balance: native and ERC-20 balances of the smart account."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.amounts import is_zero
from gasless_agentkit.chains import (
    NATIVE_TOKEN_ADDRESS,
    get_explorer,
    get_native_symbol,
    get_token_mappings,
    resolve_token_symbol,
    symbol_for_address,
)
from gasless_agentkit.services.server_wallet import ServerWalletAccount

logger = logging.getLogger("gasless_agentkit.actions.get_balance")

GET_BALANCE_PROMPT = """
This tool gets the balance of the smart account that is already configured with the SDK.
No additional wallet setup or private key generation is needed.

You can check balances in three ways:
1. By default, it returns balances for all supported tokens on the current chain
2. By token ticker symbols (e.g., "ETH", "USDC", "USDT", "WETH", etc.)
3. By token contract addresses (e.g., "0x...")

USAGE GUIDANCE:
- When a user asks to check or get balances, use this tool immediately without asking for confirmation
- If the user doesn't specify tokens, call the tool with no parameters to get ALL token balances
- If the user mentions specific tokens by name (like "USDC" or "USDT"), use the token_symbols parameter
- Only use token_addresses parameter if the user specifically provides contract addresses

Note: This action works on supported networks only (Base, Fantom, Moonbeam, Metis, Avalanche, BSC).
"""


class GetBalanceInput(BaseModel):
    token_addresses: Optional[list[str]] = Field(
        None, description="Optional list of token contract addresses to get balances for"
    )
    token_symbols: Optional[list[str]] = Field(
        None,
        description="Optional list of token symbols (e.g., 'USDC', 'USDT', 'WETH') to get balances for",
    )


def _requested_tokens(chain_id: int, args: GetBalanceInput) -> list[str]:
    native_symbol = get_native_symbol(chain_id)
    tokens: list[str] = list(args.token_addresses or [])
    for symbol in args.token_symbols or []:
        if symbol.upper() in ("ETH", native_symbol):
            tokens.append(NATIVE_TOKEN_ADDRESS)
            continue
        address = resolve_token_symbol(chain_id, symbol)
        if address is None:
            logger.warning("Token symbol %s not found for chain ID %s", symbol.upper(), chain_id)
        else:
            tokens.append(address)
    unique: dict[str, str] = {}
    for token in tokens:
        unique.setdefault(token.lower(), token)
    return list(unique.values())


def _display_name(chain_id: int, address: str) -> str:
    if address.lower() == NATIVE_TOKEN_ADDRESS.lower():
        return get_native_symbol(chain_id)
    return symbol_for_address(chain_id, address) or address


async def _server_wallet_balance(account: ServerWalletAccount) -> str:
    wallet = await account.get_wallet()
    if wallet is None:
        return (
            f"Error: No wallet found at index {account.wallet_index}. "
            "Use list_server_wallets to see available wallets."
        )
    explorer_url, explorer_name = get_explorer(account.chain_id)
    return (
        "Server Wallet Balance Check\n\n"
        f"Wallet Address: {wallet.smart_address}\n"
        f"Wallet Index: {account.wallet_index}\n\n"
        "For server-managed wallets, balances cannot be checked directly through the SDK.\n"
        f"Please check your balance on {explorer_name}:\n"
        f"{explorer_url}/address/{wallet.smart_address}\n\n"
        "Note: Direct balance checking for server wallets will be available in a future update."
    )


async def get_balance(account, args: GetBalanceInput) -> str:
    try:
        if isinstance(account, ServerWalletAccount):
            return await _server_wallet_balance(account)

        chain_id = account.chain_id
        explicit = bool(args.token_addresses or args.token_symbols)
        if explicit:
            tokens = _requested_tokens(chain_id, args)
            title = "Balances:"
        else:
            tokens = [NATIVE_TOKEN_ADDRESS, *get_token_mappings().get(chain_id, {}).values()]
            title = "All Token Balances:"

        address = await account.get_address()
        if not tokens:
            return "No balances found for the requested tokens"

        balances = await account.get_balances(tokens)
        lines = sorted(
            f"{_display_name(chain_id, b.address)}: {b.formatted_amount}"
            for b in balances
            if explicit or not is_zero(b.formatted_amount)
        )
        if not lines:
            return f"Smart Account: {address}\n{title}\nNo non-zero balances found"
        return f"Smart Account: {address}\n{title}\n" + "\n".join(lines)
    except EXPECTED_ERRORS as e:
        logger.error("Balance fetch error: %s", e)
        return f"Error getting balance: {e}"


GET_BALANCE_ACTION = Action(
    name="get_balance",
    description=GET_BALANCE_PROMPT,
    args_schema=GetBalanceInput,
    func=get_balance,
)

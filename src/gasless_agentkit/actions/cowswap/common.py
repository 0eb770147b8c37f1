"""Helpers shared by the CoW Protocol actions."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from gasless_agentkit.actions.cowswap.client import API_NETWORKS, UI_NETWORKS
from gasless_agentkit.amounts import to_base_units
from gasless_agentkit.chains import NATIVE_TOKEN_ADDRESS, ZERO_ADDRESS, resolve_token
from gasless_agentkit.services.transactions import get_decimals

COW_CHAIN_NAMES = {1: "Ethereum Mainnet", 100: "Gnosis Chain", 43114: "Avalanche"}

SIX_DECIMAL_TOKENS = frozenset(
    {
        "0xdac17f958d2ee523a2206206994597c13d831ec7",  # USDT Ethereum
        "0xa0b86a33e6441c8c1b96a4c0a4b8c50b32a8c64f",  # USDC Ethereum
        "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7",  # USDT Avalanche
        "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e",  # USDC Avalanche
        "0xc7198437980c041c805a1edcba50c1ce5db95118",  # USDT.e Avalanche
        "0xa7d7079b0fead91f3e65f86e8915cb59c1a4c664",  # USDC.e Avalanche
        "0x2791bca1f2de4661ed88a30c99a7a9449aa84174",  # USDC Polygon
        "0xc2132d05d31c914a87c6611c10748aeb04b58e8f",  # USDT Polygon
    }
)

TOKEN_PAIR_REQUIRED = (
    "Error: You must provide either (tokenInSymbol AND tokenOutSymbol) "
    "OR (tokenInAddress AND tokenOutAddress)"
)


class TokenPairInput(BaseModel):
    token_in_address: Optional[str] = Field(None, description="The input token contract address (e.g., 0x...)")
    token_out_address: Optional[str] = Field(None, description="The output token contract address (e.g., 0x...)")
    token_in_symbol: Optional[str] = Field(None, description="The input token symbol (e.g., USDC, WETH, DAI)")
    token_out_symbol: Optional[str] = Field(None, description="The output token symbol (e.g., ETH, USDC, DAI)")

    def label_in(self, address: str) -> str:
        return self.token_in_symbol or address

    def label_out(self, address: str) -> str:
        return self.token_out_symbol or address


class SwapInput(TokenPairInput):
    amount: str = Field(..., description="The amount of input token to swap")
    slippage_bps: int = Field(
        50, ge=0, lt=10_000, description="Slippage tolerance in basis points (default: 50 = 0.5%)"
    )
    validity_seconds: int = Field(3600, gt=0, description="Order validity in seconds (default: 1 hour)")


def unsupported_chain_message(chain_id: int) -> str | None:
    if chain_id in API_NETWORKS:
        return None
    return (
        f"Error: CowSwap is not available on chain ID {chain_id}. CowSwap is available on "
        "Ethereum Mainnet (1), Gnosis Chain (100), and Avalanche (43114)."
    )


def resolve_pair(chain_id: int, args: TokenPairInput) -> tuple[str, str] | str:
    """Return ``(token_in, token_out)`` addresses, or an error message."""
    if args.token_in_symbol and args.token_out_symbol:
        token_in = resolve_token(chain_id, args.token_in_symbol)
        token_out = resolve_token(chain_id, args.token_out_symbol)
        if not token_in or not token_out:
            return (
                "Error: Could not resolve token symbols. "
                f"tokenIn: {args.token_in_symbol}, tokenOut: {args.token_out_symbol}"
            )
        return token_in, token_out
    if args.token_in_address and args.token_out_address:
        return args.token_in_address, args.token_out_address
    return TOKEN_PAIR_REQUIRED


def is_native(address: str) -> bool:
    return address.lower() in (NATIVE_TOKEN_ADDRESS.lower(), ZERO_ADDRESS)


def display_decimals(address: str) -> int:
    """Decimals used when formatting quote amounts for display."""
    return 6 if address.lower() in SIX_DECIMAL_TOKENS else 18


def token_amount(account, token: str, amount: str) -> int:
    """Scale a human-readable *amount* by the token's on-chain decimals."""
    decimals = 18 if is_native(token) else get_decimals(account, token)
    return to_base_units(amount, decimals)


def explorer_order_url(chain_id: int, order_uid: str) -> str:
    return f"https://explorer.cow.fi/{UI_NETWORKS[chain_id]}/orders/{order_uid}"


def swap_ui_url(chain_id: int, sell: str, buy: str, amount: str) -> str:
    return f"https://swap.cow.fi/#/{UI_NETWORKS[chain_id]}/swap?sell={sell}&buy={buy}&sellAmount={amount}"

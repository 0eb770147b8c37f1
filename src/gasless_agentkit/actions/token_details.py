"""get_token_details: ERC-20 metadata lookup."""

from __future__ import annotations

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.chains import resolve_token
from gasless_agentkit.services.transactions import fetch_token_details

GET_TOKEN_DETAILS_PROMPT = """
This tool fetches details about an ERC20 token: its name, symbol, decimals and address
on the current chain.

USAGE GUIDANCE:
- Provide the token contract address, or a ticker symbol supported on the current chain (e.g. "USDC")
- Use this before transfers or swaps when you need a token's decimals
"""


class GetTokenDetailsInput(BaseModel):
    token_address: str = Field(..., description="The token contract address or ticker symbol")


async def get_token_details(account, args: GetTokenDetailsInput) -> str:
    address = resolve_token(account.chain_id, args.token_address)
    if address is None:
        return f"Error getting token details: Unknown token {args.token_address}"
    try:
        details = fetch_token_details(account, address)
    except EXPECTED_ERRORS as e:
        return f"Error getting token details: {e}"
    return (
        "Token Details:\n"
        f"Name: {details.name}\n"
        f"Symbol: {details.symbol}\n"
        f"Decimals: {details.decimals}\n"
        f"Address: {details.address}\n"
        f"Chain ID: {details.chain_id}"
    )


GET_TOKEN_DETAILS_ACTION = Action(
    name="get_token_details",
    description=GET_TOKEN_DETAILS_PROMPT,
    args_schema=GetTokenDetailsInput,
    func=get_token_details,
)

"""analyze_token: token metadata, prices, pairs, search and ranking via Codex."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.actions.codex.client import (
    MISSING_API_KEY,
    codex_configured,
    execute,
    format_error,
    to_float,
)

TOKEN_ANALYSIS_PROMPT = """
This tool provides comprehensive token analysis using Codex API. It can:
- Fetch detailed token information and metadata
- Get token price and market data
- Track liquidity pairs and trading activities
- Search for tokens by name, symbol, or address
- Filter and rank tokens based on various metrics

Required Setup:
- Set CODEX_API_KEY environment variable with your Codex API key

Input options:
- type: Type of analysis ('tokenInfo', 'priceData', 'pairData', 'searchTokens', 'filterTokens')
- query: Token address, pair address, or search term
- network_id: Network ID for token lookups (required for tokenInfo)
- limit: Maximum number of results to return (optional)
- low_volume_filter: Whether to filter out low volume results (optional for searchTokens)
- network_filter: List of network IDs to filter by (optional for searchTokens)
- resolution: Time frame for token metadata (optional for searchTokens)
"""

TOKEN_INFO_QUERY = """
query TokenInfo($address: String!, $networkId: Int!) {
  getTokenInfo(address: $address, networkId: $networkId) {
    name
    symbol
    totalSupply
    circulatingSupply
    imageLargeUrl
    isScam
    description
    networkId
  }
}
"""

PRICE_DATA_QUERY = """
query PriceData($address: String!, $networkId: Int) {
  getToken(address: $address, networkId: $networkId) {
    symbol
    priceUSD
    priceChange24h
    volumeUSD24h
    marketCapUSD
  }
}
"""

PAIR_DATA_QUERY = """
query PairData($id: String!) {
  getPair(id: $id) {
    token0 { symbol }
    token1 { symbol }
    volumeUSD24h
    reserveUSD
  }
}
"""

SEARCH_TOKENS_QUERY = """
query SearchTokens(
  $search: String!, $limit: Int, $lowVolumeFilter: Boolean, $networkFilter: [Int!], $resolution: String
) {
  searchTokens(
    search: $search
    limit: $limit
    lowVolumeFilter: $lowVolumeFilter
    networkFilter: $networkFilter
    resolution: $resolution
  ) {
    hasMore
    hasMoreLowVolume
    tokens {
      name
      symbol
      address
      networkId
      price
      priceChange
      volume
      liquidity
      isScam
    }
  }
}
"""

FILTER_TOKENS_QUERY = """
query FilterTokens($phrase: String!, $limit: Int) {
  filterTokens(
    phrase: $phrase
    limit: $limit
    offset: 0
    rankings: [{field: VOLUME_24H, direction: DESC}]
  ) {
    count
    page
    results {
      token { name symbol address networkId }
      priceUSD
      change24
      volume24
      liquidity
      txnCount24
      uniqueBuys24
      uniqueSells24
      isScam
    }
  }
}
"""


class TokenAnalysisInput(BaseModel):
    type: Literal["tokenInfo", "priceData", "pairData", "searchTokens", "filterTokens"] = Field(
        ..., description="Type of analysis"
    )
    query: str = Field(..., description="Token address, pair address, or search term")
    network_id: Optional[int] = Field(None, description="Network ID (required for tokenInfo)")
    limit: int = Field(10, gt=0, description="Maximum number of results to return")
    low_volume_filter: bool = Field(True, description="Filter out low volume results")
    network_filter: Optional[list[int]] = Field(None, description="Network IDs to filter by")
    resolution: Literal["60", "240", "720", "1D"] = Field("1D", description="Time frame for token metadata")


async def _token_info(args: TokenAnalysisInput) -> str:
    if not args.network_id:
        raise ValueError("Network ID is required for tokenInfo")
    data = await execute(TOKEN_INFO_QUERY, {"address": args.query, "networkId": args.network_id})
    token = data["getTokenInfo"]
    lines = [
        "Token Information:",
        f"Name: {token.get('name')}",
        f"Symbol: {token.get('symbol')}",
        f"Total Supply: {token.get('totalSupply')}",
        f"Circulating Supply: {token.get('circulatingSupply') or 'N/A'}",
        f"Network ID: {token.get('networkId')}",
        f"Scam Flag: {'Flagged as scam' if token.get('isScam') else 'Not flagged'}",
    ]
    if token.get("description"):
        lines.append(f"Description: {token['description']}")
    return "\n".join(lines)


async def _price_data(args: TokenAnalysisInput) -> str:
    data = await execute(PRICE_DATA_QUERY, {"address": args.query, "networkId": args.network_id})
    token = data["getToken"]
    return (
        f"Price Data for {token.get('symbol')}:\n"
        f"Price: ${to_float(token.get('priceUSD')):.6f}\n"
        f"24h Change: {to_float(token.get('priceChange24h')):.2f}%\n"
        f"24h Volume: ${to_float(token.get('volumeUSD24h')):.2f}\n"
        f"Market Cap: ${to_float(token.get('marketCapUSD')):.2f}"
    )


async def _pair_data(args: TokenAnalysisInput) -> str:
    data = await execute(PAIR_DATA_QUERY, {"id": args.query})
    pair = data["getPair"]
    return (
        "Pair Data:\n"
        f"Tokens: {pair['token0']['symbol']}/{pair['token1']['symbol']}\n"
        f"24h Volume: ${to_float(pair.get('volumeUSD24h')):.2f}\n"
        f"Liquidity: ${to_float(pair.get('reserveUSD')):.2f}"
    )


async def _search_tokens(args: TokenAnalysisInput) -> str:
    data = await execute(
        SEARCH_TOKENS_QUERY,
        {
            "search": args.query,
            "limit": args.limit,
            "lowVolumeFilter": args.low_volume_filter,
            "networkFilter": args.network_filter,
            "resolution": args.resolution,
        },
    )
    result = data["searchTokens"]
    tokens = result.get("tokens") or []
    if not tokens:
        return f'No tokens found matching "{args.query}"'

    lines = [f'Search Results for "{args.query}":']
    for i, token in enumerate(tokens, start=1):
        lines += [
            f"{i}. {token['name']} ({token['symbol']})",
            f"   Address: {token['address']} (Network: {token['networkId']})",
            f"   Price: ${to_float(token.get('price')):.6f}",
            f"   24h Change: {to_float(token.get('priceChange')):.2f}%",
            f"   Volume: ${to_float(token.get('volume'))}",
            f"   Liquidity: ${to_float(token.get('liquidity'))}",
        ]
        if token.get("isScam"):
            lines.append("   Flagged as scam")
    more = (result.get("hasMore") or 0) + (result.get("hasMoreLowVolume") or 0)
    if more > 0:
        lines.append(f"\nAdditional results available: {more} token(s)")
    return "\n".join(lines)


async def _filter_tokens(args: TokenAnalysisInput) -> str:
    data = await execute(FILTER_TOKENS_QUERY, {"phrase": args.query, "limit": args.limit})
    result = data["filterTokens"]
    items = result.get("results") or []
    if not items:
        return f'No tokens found matching filter criteria for "{args.query}"'

    lines = [f'Filtered Token Results for "{args.query}":']
    for i, item in enumerate(items, start=1):
        token = item["token"]
        lines += [
            "",
            f"{i}. {token['name']} ({token['symbol']})",
            f"   Address: {token['address']} (Network: {token['networkId']})",
            f"   Price: ${to_float(item.get('priceUSD')):.6f}",
            f"   24h Change: {to_float(item.get('change24')):.2f}%",
            f"   24h Volume: ${to_float(item.get('volume24'))}",
            f"   Liquidity: ${to_float(item.get('liquidity'))}",
            f"   24h Transactions: {item.get('txnCount24')} "
            f"(Buys: {item.get('uniqueBuys24')}, Sells: {item.get('uniqueSells24')})",
        ]
        if item.get("isScam"):
            lines.append("   Flagged as scam")
    lines.append(
        f"\nShowing {len(items)} of {result.get('count')} results (page {(result.get('page') or 0) + 1})"
    )
    return "\n".join(lines)


_HANDLERS = {
    "tokenInfo": _token_info,
    "priceData": _price_data,
    "pairData": _pair_data,
    "searchTokens": _search_tokens,
    "filterTokens": _filter_tokens,
}


async def analyze_token(account, args: TokenAnalysisInput) -> str:
    if not codex_configured():
        return MISSING_API_KEY
    try:
        return await _HANDLERS[args.type](args)
    except (*EXPECTED_ERRORS, KeyError, TypeError) as e:
        return format_error(e)


ANALYZE_TOKEN_ACTION = Action(
    name="analyze_token",
    description=TOKEN_ANALYSIS_PROMPT,
    args_schema=TokenAnalysisInput,
    func=analyze_token,
    requires_account=False,
)

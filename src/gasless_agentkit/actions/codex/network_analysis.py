"""analyze_network: Codex network listing, statistics and indexer status."""

from __future__ import annotations

from datetime import datetime, timezone
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

NETWORK_ANALYSIS_PROMPT = """
This tool provides network analysis using Codex API. It can:
- Get available blockchain networks
- Fetch network statistics
- Monitor network status

Required Setup:
- Set CODEX_API_KEY environment variable with your Codex API key

Input options:
- type: Type of analysis ('networks', 'networkStats', 'networkStatus')
- query: Exchange address (optional, for networkStats)
- network_id: Network ID (required for networkStats)
- network_ids: List of network IDs (required for networkStatus)
"""

NETWORKS_QUERY = "query Networks { getNetworks { name id } }"

NETWORK_STATS_QUERY = """
query NetworkStats($networkId: Int!, $exchangeAddress: String) {
  getNetworkStats(networkId: $networkId, exchangeAddress: $exchangeAddress) {
    liquidity
    transactions1
    transactions4
    transactions12
    transactions24
    volume1
    volume4
    volume12
    volume24
  }
}
"""

NETWORK_STATUS_QUERY = """
query NetworkStatus($networkIds: [Int!]!) {
  getNetworkStatus(networkIds: $networkIds) {
    networkId
    networkName
    lastProcessedBlock
    lastProcessedTimestamp
  }
}
"""


class NetworkAnalysisInput(BaseModel):
    type: Literal["networks", "networkStats", "networkStatus"] = Field(..., description="Type of analysis")
    query: Optional[str] = Field(None, description="Exchange address (optional, for networkStats)")
    network_id: Optional[int] = Field(None, description="Network ID (required for networkStats)")
    network_ids: Optional[list[int]] = Field(None, description="Network IDs (required for networkStatus)")


async def _networks(args: NetworkAnalysisInput) -> str:
    data = await execute(NETWORKS_QUERY)
    lines = [f"{n['name']} (ID: {n['id']})" for n in data["getNetworks"]]
    return "Available Networks:\n" + "\n".join(lines)


async def _network_stats(args: NetworkAnalysisInput) -> str:
    if not args.network_id:
        raise ValueError("Network ID is required for networkStats")
    data = await execute(
        NETWORK_STATS_QUERY, {"networkId": args.network_id, "exchangeAddress": args.query}
    )
    stats = data["getNetworkStats"]
    return (
        "Network Statistics:\n"
        f"Liquidity: ${to_float(stats.get('liquidity')):.2f}\n"
        f"Transactions (1h/4h/12h/24h): {stats.get('transactions1')}/{stats.get('transactions4')}/"
        f"{stats.get('transactions12')}/{stats.get('transactions24')}\n"
        f"Volume 1h: ${to_float(stats.get('volume1')):.2f}\n"
        f"Volume 4h: ${to_float(stats.get('volume4')):.2f}\n"
        f"Volume 12h: ${to_float(stats.get('volume12')):.2f}\n"
        f"Volume 24h: ${to_float(stats.get('volume24')):.2f}"
    )


async def _network_status(args: NetworkAnalysisInput) -> str:
    if not args.network_ids:
        raise ValueError("Network IDs are required for networkStatus")
    data = await execute(NETWORK_STATUS_QUERY, {"networkIds": args.network_ids})
    blocks = []
    for status in data["getNetworkStatus"]:
        updated = datetime.fromtimestamp(int(status["lastProcessedTimestamp"]), tz=timezone.utc)
        blocks.append(
            f"{status['networkName']} (ID: {status['networkId']}):\n"
            f"Last Block: {status['lastProcessedBlock']}\n"
            f"Last Update: {updated.isoformat()}"
        )
    return "Network Status:\n" + "\n\n".join(blocks)


_HANDLERS = {
    "networks": _networks,
    "networkStats": _network_stats,
    "networkStatus": _network_status,
}


async def analyze_network(account, args: NetworkAnalysisInput) -> str:
    if not codex_configured():
        return MISSING_API_KEY
    try:
        return await _HANDLERS[args.type](args)
    except (*EXPECTED_ERRORS, KeyError, TypeError) as e:
        return format_error(e)


ANALYZE_NETWORK_ACTION = Action(
    name="analyze_network",
    description=NETWORK_ANALYSIS_PROMPT,
    args_schema=NetworkAnalysisInput,
    func=analyze_network,
    requires_account=False,
)

"""Market data actions backed by the Codex GraphQL API."""

from gasless_agentkit.actions.codex.network_analysis import ANALYZE_NETWORK_ACTION
from gasless_agentkit.actions.codex.token_analysis import ANALYZE_TOKEN_ACTION

__all__ = ["ANALYZE_TOKEN_ACTION", "ANALYZE_NETWORK_ACTION"]

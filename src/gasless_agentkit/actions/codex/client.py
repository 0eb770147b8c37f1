"""Minimal Codex GraphQL client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gasless_agentkit.actions.base import get_integrations
from gasless_agentkit.errors import AgentkitError

logger = logging.getLogger("gasless_agentkit.actions.codex")

MISSING_API_KEY = "Error: CODEX_API_KEY is not configured"


class CodexError(AgentkitError):
    pass


def codex_configured() -> bool:
    return bool(get_integrations().codex_api_key)


def format_error(exc: BaseException) -> str:
    return f"Error analyzing data: {exc}"


def to_float(value: Any) -> float:
    """Codex returns most numbers as strings; missing values read as zero."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


async def execute(query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
    """Run *query* and return its ``data`` object.

    GraphQL-level errors raise :class:`CodexError` with the first message.
    """
    settings = get_integrations()
    if not settings.codex_api_key:
        raise CodexError("CODEX_API_KEY is not configured")

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.post(
            settings.codex_api_url,
            json={"query": query, "variables": variables or {}},
            headers={"Authorization": settings.codex_api_key, "Content-Type": "application/json"},
        )
        resp.raise_for_status()
        body = resp.json()

    if body.get("errors"):
        message = body["errors"][0].get("message", "Unknown GraphQL error")
        logger.warning("Codex query failed: %s", message)
        raise CodexError(message)
    data = body.get("data")
    if data is None:
        raise CodexError("Empty response from Codex")
    return data

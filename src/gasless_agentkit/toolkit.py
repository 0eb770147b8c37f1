"""Expose registered actions to an LLM as tools."""

from __future__ import annotations

import logging
from typing import Any

from gasless_agentkit.actions import get_registry
from gasless_agentkit.actions.registry import ActionRegistry
from gasless_agentkit.agentkit import Agentkit
from gasless_agentkit.errors import ActionValidationError
from gasless_agentkit.llm.base import ToolDefinition

logger = logging.getLogger("gasless_agentkit.toolkit")


class AgentkitToolkit:
    """Binds an :class:`Agentkit` to a registry and turns tool calls into runs.

    :meth:`execute` never raises: every outcome, including bugs inside an
    action, comes back as text the model can read.
    """

    def __init__(self, agentkit: Agentkit, registry: ActionRegistry | None = None):
        self.agentkit = agentkit
        self.registry = registry or get_registry()

    def get_tools(self) -> list[ToolDefinition]:
        return [action.to_definition() for action in self.registry]

    async def execute(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        action = self.registry.find_by_name(name)
        if action is None:
            return f"Error: Unknown tool '{name}'"

        logger.info("Calling tool %s(%s)", name, arguments)
        try:
            return await self.agentkit.run(action, arguments or {})
        except ActionValidationError as e:
            return f"Error: {e}"
        except Exception as e:
            logger.exception("Action %s raised", name)
            return f"Action {name} failed: {e}"

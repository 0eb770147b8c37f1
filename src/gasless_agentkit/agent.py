"""AgentkitAgent - a tool-calling chat loop over the action toolkit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator

from gasless_agentkit.llm.base import BaseLLMProvider, LLMMessage
from gasless_agentkit.prompts import build_system_prompt
from gasless_agentkit.toolkit import AgentkitToolkit

logger = logging.getLogger("gasless_agentkit.agent")


@dataclass
class AgentEvent:
    """One chunk of a streamed turn: model text (``agent``) or a tool result (``tools``)."""

    source: str
    content: str
    tool_name: str | None = None


class AgentkitAgent:
    """Keeps the conversation and drives the model until it stops calling tools."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        toolkit: AgentkitToolkit,
        system_prompt: str | None = None,
        max_iterations: int = 15,
    ):
        self.provider = provider
        self.toolkit = toolkit
        self.max_iterations = max_iterations
        self._system_prompt = system_prompt or build_system_prompt()
        self._conversation: list[LLMMessage] = [
            LLMMessage(role="system", content=self._system_prompt)
        ]

    @property
    def conversation(self) -> list[LLMMessage]:
        return list(self._conversation)

    def reset(self) -> None:
        self._conversation = [LLMMessage(role="system", content=self._system_prompt)]

    async def stream(self, message: str) -> AsyncIterator[AgentEvent]:
        """Run one user turn, yielding model text and tool results as they happen."""
        self._conversation.append(LLMMessage(role="user", content=message))
        tools = self.toolkit.get_tools()

        for iteration in range(self.max_iterations):
            try:
                response = await self.provider.complete(messages=self._conversation, tools=tools)
            except Exception as e:
                logger.error(f"LLM error: {e}")
                yield AgentEvent(source="agent", content=f"Error: {e}")
                return

            if not response.tool_calls:
                reply = response.content or "(no response)"
                self._conversation.append(LLMMessage(role="assistant", content=reply))
                yield AgentEvent(source="agent", content=reply)
                return

            if response.content:
                yield AgentEvent(source="agent", content=response.content)
            self._conversation.append(LLMMessage(
                role="assistant",
                content=response.content or "",
                tool_calls=[
                    {"id": tc.id, "name": tc.name, "arguments": tc.arguments}
                    for tc in response.tool_calls
                ],
            ))

            for tc in response.tool_calls:
                result = await self.toolkit.execute(tc.name, tc.arguments)
                self._conversation.append(LLMMessage(
                    role="tool",
                    content=result,
                    tool_call_id=tc.id,
                ))
                yield AgentEvent(source="tools", content=result, tool_name=tc.name)

        logger.warning("Stopped after %s iterations without a final answer", self.max_iterations)
        yield AgentEvent(source="agent", content="Failed: exceeded maximum iterations.")

    async def chat(self, message: str) -> str:
        """Run one user turn and return the final reply."""
        reply = ""
        async for event in self.stream(message):
            if event.source == "agent":
                reply = event.content
        return reply

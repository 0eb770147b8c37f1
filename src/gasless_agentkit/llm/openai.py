"""Chat-completions provider for OpenAI-compatible endpoints (OpenRouter by default)."""

from __future__ import annotations

import json
import logging
from typing import AsyncIterator

from gasless_agentkit.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ToolCall,
    ToolDefinition,
)

logger = logging.getLogger(__name__)

# OpenRouter uses these to attribute traffic; other endpoints ignore them.
_ATTRIBUTION_HEADERS = {
    "HTTP-Referer": "https://github.com/0xgasless/agentkit",
    "X-Title": "gasless-agentkit",
}


class OpenAIProvider(BaseLLMProvider):
    """Backed by :class:`openai.AsyncOpenAI`.

    ``base_url`` selects the endpoint, so the same class drives OpenAI,
    OpenRouter or any self-hosted server speaking the same protocol.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "The 'openai' package is required for the agent loop. "
                "Install it with: pip install openai"
            ) from exc

        client_kwargs: dict = {"api_key": self.api_key}
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
            if "openrouter.ai" in self.base_url:
                client_kwargs["default_headers"] = dict(_ATTRIBUTION_HEADERS)

        self._client = openai.AsyncOpenAI(**client_kwargs)

    # ------------------------------------------------------------------
    # Format conversion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _convert_messages(messages: list[LLMMessage]) -> list[dict]:
        converted: list[dict] = []
        for msg in messages:
            if msg.role == "tool":
                converted.append(
                    {
                        "role": "tool",
                        "content": msg.content,
                        "tool_call_id": msg.tool_call_id or "",
                    }
                )
                continue

            entry: dict = {"role": msg.role, "content": msg.content}
            if msg.role == "assistant" and msg.tool_calls:
                entry["content"] = msg.content or None
                entry["tool_calls"] = [
                    {
                        "id": call.get("id", ""),
                        "type": "function",
                        "function": {
                            "name": call.get("name", ""),
                            "arguments": _dump_arguments(call.get("arguments", {})),
                        },
                    }
                    for call in msg.tool_calls
                ]
            converted.append(entry)
        return converted

    @staticmethod
    def _convert_tools(tools: list[ToolDefinition]) -> list[dict]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in tools
        ]

    @staticmethod
    def _parse_response(response) -> LLMResponse:
        choice = response.choices[0]
        message = choice.message

        tool_calls: list[ToolCall] = []
        for tc in message.tool_calls or []:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except (json.JSONDecodeError, TypeError):
                logger.warning("Model sent unparseable arguments for %s", tc.function.name)
                arguments = {}
            tool_calls.append(ToolCall(id=tc.id, name=tc.function.name, arguments=arguments))

        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls or None,
            usage=usage,
            stop_reason=choice.finish_reason,
        )

    def _request_kwargs(
        self, messages: list[LLMMessage], tools: list[ToolDefinition] | None
    ) -> dict:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": self._convert_messages(messages),
        }
        if tools:
            kwargs["tools"] = self._convert_tools(tools)
        return kwargs

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def complete(
        self,
        messages: list[LLMMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponse:
        kwargs = self._request_kwargs(messages, tools)
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as exc:
            logger.error("Chat completion failed (model=%s): %s", self.model, exc)
            raise
        return self._parse_response(response)

    async def stream(
        self,
        messages: list[LLMMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> AsyncIterator[str]:
        kwargs = self._request_kwargs(messages, tools)
        kwargs["stream"] = True
        try:
            chunks = await self._client.chat.completions.create(**kwargs)
            async for chunk in chunks:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except Exception as exc:
            logger.error("Streaming completion failed (model=%s): %s", self.model, exc)
            raise


def _dump_arguments(arguments) -> str:
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments)

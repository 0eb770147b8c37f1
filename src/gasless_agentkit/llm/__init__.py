"""LLM provider abstraction used by the agent loop."""

from gasless_agentkit.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ToolCall,
    ToolDefinition,
)
from gasless_agentkit.llm.router import LLMRouter

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMRouter",
    "ToolCall",
    "ToolDefinition",
]

"""Resolves the configured LLM endpoint into a provider instance."""

from __future__ import annotations

import logging

from gasless_agentkit.config import OPENROUTER_BASE_URL, LLMConfig, LLMProviderConfig
from gasless_agentkit.llm.base import BaseLLMProvider
from gasless_agentkit.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)

# Both names speak the chat-completions protocol; they differ only in the
# default endpoint.
_DEFAULT_BASE_URLS: dict[str, str | None] = {
    "openrouter": OPENROUTER_BASE_URL,
    "openai": None,
}


class LLMRouter:
    """Creates providers lazily and caches them per ``name:model``."""

    def __init__(self, llm_config: LLMConfig):
        self._config = llm_config
        self._providers: dict[str, BaseLLMProvider] = {}

    def _get_provider_config(self, name: str) -> LLMProviderConfig:
        if name not in _DEFAULT_BASE_URLS:
            raise ValueError(
                f"Unknown provider '{name}'. "
                f"Supported providers: {sorted(_DEFAULT_BASE_URLS)}"
            )
        block = getattr(self._config, name, None)
        if block is None:
            raise ValueError(
                f"Provider '{name}' is not configured. "
                f"Add an '{name}' section to the llm configuration."
            )
        return block

    def get_provider(
        self,
        provider_name: str | None = None,
        model_override: str | None = None,
    ) -> BaseLLMProvider:
        """Return a ready provider, raising ``ValueError`` on missing settings."""
        name = provider_name or self._config.default_provider
        cache_key = f"{name}:{model_override}" if model_override else name
        if cache_key in self._providers:
            return self._providers[cache_key]

        provider_config = self._get_provider_config(name)
        if not provider_config.api_key:
            raise ValueError(
                f"API key for provider '{name}' is empty. "
                f"Set it in the configuration file or via ${{OPENROUTER_API_KEY}}."
            )
        model = model_override or provider_config.model
        if not model:
            raise ValueError(f"No model specified for provider '{name}'.")

        base_url = provider_config.base_url or _DEFAULT_BASE_URLS[name]
        provider = OpenAIProvider(
            api_key=provider_config.api_key,
            model=model,
            base_url=base_url,
            max_tokens=provider_config.max_tokens,
            temperature=provider_config.temperature,
        )
        self._providers[cache_key] = provider
        logger.info("Created %s provider (model=%s, base_url=%s)", name, model, base_url or "default")
        return provider

import pytest

from gasless_agentkit.config import LLMConfig, LLMProviderConfig
from gasless_agentkit.llm import LLMRouter
from gasless_agentkit.llm.openai import OpenAIProvider


def test_router_builds_openrouter_provider():
    config = LLMConfig(openrouter=LLMProviderConfig(api_key="sk-or", model="gpt-4o"))
    router = LLMRouter(config)
    provider = router.get_provider()
    assert isinstance(provider, OpenAIProvider)
    assert provider.base_url == "https://openrouter.ai/api/v1"
    assert router.get_provider() is provider
    assert router.get_provider(model_override="other").model == "other"


def test_router_errors():
    with pytest.raises(ValueError, match="not configured"):
        LLMRouter(LLMConfig()).get_provider()
    with pytest.raises(ValueError, match="is empty"):
        LLMRouter(LLMConfig(openrouter=LLMProviderConfig(model="m"))).get_provider()
    with pytest.raises(ValueError, match="Unknown provider"):
        LLMRouter(LLMConfig()).get_provider("anthropic")

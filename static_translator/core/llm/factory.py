"""
Factory for LLM providers
"""
import os

from static_translator.config import (
    API_ENDPOINT,
    DEFAULT_MODEL,
    OPENAI_API_KEY,
    OPENROUTER_API_KEY,
    OPENROUTER_MODEL,
    REQUEST_TIMEOUT,
)
from static_translator.core.exceptions import ConfigurationError
from .base import LLMProvider
from .providers.openai import OpenAICompatibleProvider
from .providers.openrouter import OpenRouterProvider


def create_llm_provider(provider_type: str = "openai", **kwargs) -> LLMProvider:
    """Factory function to create LLM providers"""
    timeout = kwargs.get("timeout") or REQUEST_TIMEOUT

    if provider_type.lower() == "openai":
        api_key = kwargs.get("api_key") or os.getenv("OPENAI_API_KEY", OPENAI_API_KEY)
        endpoint = kwargs.get("api_endpoint") or API_ENDPOINT
        # Local OpenAI-compatible servers usually run without a key
        if not api_key and "api.openai.com" in endpoint:
            raise ConfigurationError(
                "OpenAI provider requires an API key. Set OPENAI_API_KEY or apiKey in the config file."
            )
        return OpenAICompatibleProvider(
            api_endpoint=endpoint,
            model=kwargs.get("model") or DEFAULT_MODEL,
            api_key=api_key or None,
            timeout=timeout
        )
    elif provider_type.lower() == "openrouter":
        api_key = kwargs.get("api_key") or os.getenv("OPENROUTER_API_KEY", OPENROUTER_API_KEY)
        if not api_key:
            raise ConfigurationError(
                "OpenRouter provider requires an API key. Set OPENROUTER_API_KEY or apiKey in the config file."
            )
        return OpenRouterProvider(
            api_key=api_key,
            model=kwargs.get("model") or OPENROUTER_MODEL,
            timeout=timeout
        )
    else:
        raise ConfigurationError(f"Unknown provider type: {provider_type}")

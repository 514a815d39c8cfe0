"""Unit tests for create_llm_provider."""

import pytest

from static_translator.core.exceptions import ConfigurationError
from static_translator.core.llm.factory import create_llm_provider
from static_translator.core.llm.providers.openai import OpenAICompatibleProvider
from static_translator.core.llm.providers.openrouter import OpenRouterProvider


class TestCreateLLMProvider:

    def test_openai_with_key(self):
        provider = create_llm_provider('openai', api_key='k', model='gpt-4o-mini')
        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider.api_key == 'k'
        assert provider.model == 'gpt-4o-mini'

    def test_openai_requires_key_for_official_endpoint(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', '')
        monkeypatch.setattr('static_translator.core.llm.factory.OPENAI_API_KEY', '')
        with pytest.raises(ConfigurationError):
            create_llm_provider('openai', api_endpoint='https://api.openai.com/v1/chat/completions')

    def test_local_endpoint_without_key(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', '')
        monkeypatch.setattr('static_translator.core.llm.factory.OPENAI_API_KEY', '')
        provider = create_llm_provider('openai', api_endpoint='http://localhost:1234/v1/chat/completions')
        assert provider.api_key is None

    def test_openrouter(self):
        provider = create_llm_provider('openrouter', api_key='or-key')
        assert isinstance(provider, OpenRouterProvider)

    def test_openrouter_requires_key(self, monkeypatch):
        monkeypatch.setenv('OPENROUTER_API_KEY', '')
        monkeypatch.setattr('static_translator.core.llm.factory.OPENROUTER_API_KEY', '')
        with pytest.raises(ConfigurationError):
            create_llm_provider('openrouter')

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            create_llm_provider('acme')

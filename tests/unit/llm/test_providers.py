"""Unit tests for the HTTP providers, using httpx.MockTransport."""

import json

import httpx
import pytest

from static_translator.core.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
)
from static_translator.core.llm.base import parse_retry_after
from static_translator.core.llm.providers.openai import OpenAICompatibleProvider
from static_translator.core.llm.providers.openrouter import OpenRouterProvider


def completion(content, prompt_tokens=12, completion_tokens=7):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
    }


def with_transport(provider, handler):
    provider._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return provider


class TestOpenAICompatibleProvider:
    """Test request building and error mapping."""

    @pytest.mark.asyncio
    async def test_request_and_response(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['auth'] = request.headers.get('authorization')
            seen['payload'] = json.loads(request.content)
            return httpx.Response(200, json=completion('{"translations": ["Hola"]}'))

        provider = with_transport(OpenAICompatibleProvider(
            api_endpoint='http://localhost:8000/v1/chat/completions', model='m', api_key='k'
        ), handler)
        response = await provider.generate('user text', system_prompt='system text', json_mode=True)
        await provider.close()

        assert response.content == '{"translations": ["Hola"]}'
        assert response.total_tokens == 19
        assert seen['url'] == 'http://localhost:8000/v1/chat/completions'
        assert seen['auth'] == 'Bearer k'
        assert seen['payload']['model'] == 'm'
        assert seen['payload']['messages'] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert seen['payload']['response_format'] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_no_key_no_authorization_header(self):
        seen = {}

        def handler(request):
            seen['auth'] = request.headers.get('authorization')
            return httpx.Response(200, json=completion('ok'))

        provider = with_transport(OpenAICompatibleProvider(api_endpoint='http://localhost/v1'), handler)
        await provider.generate('text')
        assert seen['auth'] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, error_type", [
        (401, LLMAuthenticationError),
        (403, LLMAuthenticationError),
        (500, LLMConnectionError),
        (404, LLMConnectionError),
    ])
    async def test_http_errors(self, status, error_type):
        provider = with_transport(OpenAICompatibleProvider(api_endpoint='http://localhost/v1'),
                                  lambda request: httpx.Response(status, text='nope'))
        with pytest.raises(error_type):
            await provider.generate('text')

    @pytest.mark.asyncio
    async def test_rate_limit_with_retry_after(self):
        provider = with_transport(
            OpenAICompatibleProvider(api_endpoint='http://localhost/v1'),
            lambda request: httpx.Response(429, headers={'Retry-After': '7'}, text='slow down')
        )
        with pytest.raises(LLMRateLimitError) as exc_info:
            await provider.generate('text')
        assert exc_info.value.retry_after == 7.0

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = with_transport(OpenAICompatibleProvider(api_endpoint='http://localhost/v1'), handler)
        with pytest.raises(LLMConnectionError):
            await provider.generate('text')

    @pytest.mark.asyncio
    async def test_body_without_choices(self):
        provider = with_transport(OpenAICompatibleProvider(api_endpoint='http://localhost/v1'),
                                  lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(LLMResponseError):
            await provider.generate('text')

    @pytest.mark.asyncio
    async def test_body_not_json(self):
        provider = with_transport(OpenAICompatibleProvider(api_endpoint='http://localhost/v1'),
                                  lambda request: httpx.Response(200, text='<html>'))
        with pytest.raises(LLMResponseError):
            await provider.generate('text')


class TestOpenRouterProvider:

    @pytest.mark.asyncio
    async def test_uses_openrouter_endpoint(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['auth'] = request.headers.get('authorization')
            return httpx.Response(200, json=completion('ok'))

        provider = with_transport(OpenRouterProvider(api_key='or-key', model='openai/gpt-4o-mini'), handler)
        response = await provider.generate('text')
        assert response.content == 'ok'
        assert seen['url'] == OpenRouterProvider.API_URL
        assert seen['auth'] == 'Bearer or-key'


class TestParseRetryAfter:

    def test_values(self):
        assert parse_retry_after('12') == 12.0
        assert parse_retry_after(None) is None
        assert parse_retry_after('Wed, 21 Oct 2015 07:28:00 GMT') is None

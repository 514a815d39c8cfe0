"""
Base classes and data structures for LLM providers.

This module defines the abstract base class that all LLM providers must implement,
the LLMResponse structure, and the mapping of HTTP failures onto the error
hierarchy. Providers never retry: retry policy belongs to the translation client.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx

from static_translator.config import REQUEST_TIMEOUT
from static_translator.core.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
)


@dataclass
class LLMResponse:
    """Response from LLM with token usage information"""
    content: str
    prompt_tokens: int = 0  # Number of tokens in the prompt
    completion_tokens: int = 0  # Number of tokens in the response

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header (delta-seconds form only)"""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    provider_name = "llm"

    def __init__(self, model: str, timeout: float = REQUEST_TIMEOUT):
        """
        Initialize the LLM provider.

        Args:
            model: Model name/identifier
            timeout: Request timeout in seconds
        """
        self.model = model
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create a persistent HTTP client with connection pooling"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                timeout=httpx.Timeout(self.timeout)
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        """
        Generate text from prompt.

        Args:
            prompt: The user prompt (content to process)
            system_prompt: Optional system prompt (role/instructions)
            json_mode: Ask the endpoint for a JSON object response

        Returns:
            LLMResponse object with content and token usage info

        Raises:
            LLMRateLimitError: HTTP 429
            LLMAuthenticationError: HTTP 401/403
            LLMConnectionError: Other HTTP errors, timeouts and transport errors
            LLMResponseError: Undecodable body or missing choices
        """
        pass

    @staticmethod
    def build_messages(prompt: str, system_prompt: Optional[str] = None) -> list:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def _post_chat_completion(self, url: str, headers: Dict[str, str],
                                    payload: Dict[str, Any]) -> LLMResponse:
        """POST a chat completion request and map failures onto LLM errors"""
        client = await self._get_client()
        name = self.provider_name
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            body = e.response.text[:500]
            context = {'status': status, 'provider': name}
            if status == 429:
                raise LLMRateLimitError(
                    f"{name} rate limit exceeded",
                    retry_after=parse_retry_after(e.response.headers.get('retry-after')),
                    context=context
                ) from e
            if status in (401, 403):
                raise LLMAuthenticationError(f"{name} authentication failed: {body}", context) from e
            raise LLMConnectionError(f"{name} HTTP error {status}: {body}", context) from e
        except httpx.TimeoutException as e:
            raise LLMConnectionError(f"{name} request timed out after {self.timeout}s",
                                     {'provider': name}) from e
        except httpx.HTTPError as e:
            raise LLMConnectionError(f"{name} request failed: {e}", {'provider': name}) from e

        try:
            result = response.json()
        except ValueError as e:
            raise LLMResponseError(f"{name} returned a body that is not JSON: {e}") from e

        choices = result.get("choices") if isinstance(result, dict) else None
        if not choices:
            raise LLMResponseError(f"{name} response has no choices",
                                   {'body': str(result)[:200]})

        message = choices[0].get("message") or {}
        content = message.get("content")
        if content is None:
            raise LLMResponseError(f"{name} response has no message content")

        usage = result.get("usage") or {}
        return LLMResponse(
            content=content,
            prompt_tokens=usage.get("prompt_tokens", 0) or 0,
            completion_tokens=usage.get("completion_tokens", 0) or 0
        )

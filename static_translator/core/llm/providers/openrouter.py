"""
OpenRouter provider implementation.

OpenRouter exposes many models (Claude, GPT, Llama, Mistral, ...) behind one
OpenAI-style chat completions endpoint.
"""

from typing import Optional

from static_translator.config import OPENROUTER_API_ENDPOINT, OPENROUTER_MODEL, REQUEST_TIMEOUT
from ..base import LLMProvider, LLMResponse


class OpenRouterProvider(LLMProvider):
    """
    Provider for OpenRouter API.

    Configuration:
        endpoint: https://openrouter.ai/api/v1/chat/completions
        model: Model identifier (e.g., "openai/gpt-4o-mini")
        api_key: OpenRouter API key
    """

    provider_name = "openrouter"
    API_URL = OPENROUTER_API_ENDPOINT

    def __init__(self, api_key: str, model: str = OPENROUTER_MODEL, timeout: float = REQUEST_TIMEOUT):
        """
        Initialize the OpenRouter provider.

        Args:
            api_key: OpenRouter API key
            model: Model identifier
            timeout: Request timeout in seconds
        """
        super().__init__(model, timeout)
        self.api_key = api_key

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "static-site-translator",
        }

        payload = {
            "model": self.model,
            "messages": self.build_messages(prompt, system_prompt),
            "temperature": 0.3,
            "stream": False,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        return await self._post_chat_completion(self.API_URL, headers, payload)

"""
OpenAI-compatible provider implementation.

This module provides the OpenAICompatibleProvider class for interacting with
the OpenAI API and compatible endpoints (vLLM, LM Studio, llama.cpp, etc.).
"""

from typing import Optional

from static_translator.config import API_ENDPOINT, REQUEST_TIMEOUT
from ..base import LLMProvider, LLMResponse


class OpenAICompatibleProvider(LLMProvider):
    """OpenAI-compatible chat completions provider"""

    provider_name = "openai"

    def __init__(self, api_endpoint: str = API_ENDPOINT, model: str = "gpt-4o-mini",
                 api_key: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        super().__init__(model, timeout)
        self.api_endpoint = api_endpoint
        self.api_key = api_key

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        """
        Generate text using an OpenAI compatible API.

        Args:
            prompt: The user prompt (content to translate)
            system_prompt: Optional system prompt (role/instructions)
            json_mode: Request a JSON object response

        Returns:
            LLMResponse with content and token usage info
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": self.build_messages(prompt, system_prompt),
            "temperature": 0.3,
            "stream": False,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        return await self._post_chat_completion(self.api_endpoint, headers, payload)

"""
Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and provides common fixtures
and configuration for all test modules.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from static_translator.core.llm.base import LLMProvider, LLMResponse


def prompt_texts(prompt: str) -> List[str]:
    """Texts embedded as a JSON array in a batch translation user prompt."""
    return json.loads(prompt[prompt.index('['):prompt.rindex(']') + 1])


class ScriptedProvider(LLMProvider):
    """Provider replaying a fixed sequence of responses or exceptions."""

    provider_name = "scripted"

    def __init__(self, outcomes):
        super().__init__(model="mock-model")
        self.outcomes = list(outcomes)
        self.calls = []

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        self.calls.append({'prompt': prompt, 'system_prompt': system_prompt, 'json_mode': json_mode})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, LLMResponse):
            return outcome
        if not isinstance(outcome, str):
            outcome = json.dumps(outcome)
        return LLMResponse(content=outcome, prompt_tokens=10, completion_tokens=5)


class DictionaryProvider(LLMProvider):
    """Provider translating each text through a lookup table (unknown texts echo back)."""

    provider_name = "dictionary"

    def __init__(self, translations: Dict[str, str], fail_on: Optional[str] = None):
        super().__init__(model="mock-model")
        self.translations = translations
        self.fail_on = fail_on
        self.calls = []

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        from static_translator.core.exceptions import LLMConnectionError

        texts = prompt_texts(prompt)
        self.calls.append(texts)
        if self.fail_on and any(self.fail_on in text for text in texts):
            raise LLMConnectionError("connection refused")
        payload = {"translations": [self.translations.get(text, text) for text in texts]}
        return LLMResponse(content=json.dumps(payload, ensure_ascii=False),
                           prompt_tokens=len(texts) * 10, completion_tokens=len(texts) * 5)


class ConcurrencyTrackingProvider(DictionaryProvider):
    """Dictionary provider recording the peak number of overlapping generate() calls."""

    def __init__(self, translations: Dict[str, str], delay: float = 0.01):
        super().__init__(translations)
        self.delay = delay
        self.in_flight = 0
        self.peak = 0

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       json_mode: bool = False) -> LLMResponse:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return await super().generate(prompt, system_prompt, json_mode)
        finally:
            self.in_flight -= 1


class RecordingSleep:
    """Async sleep replacement recording requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def sample_page_html():
    """Minimal document with a title, one paragraph and a script."""
    return ("<html><head><title>Hello</title></head>"
            "<body><p>World</p><script>var x=1;</script></body></html>")

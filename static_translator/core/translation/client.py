"""
Translation client

Sends one batch of texts to the LLM provider per call and returns a result
aligned one-to-one with the input. Rate limiting and malformed responses are
retried with exponential backoff; every other failure is surfaced at once.
"""
import json
import re
import time
from typing import Dict, List, Optional, Sequence, Tuple

from static_translator.core.exceptions import LLMResponseError
from static_translator.core.llm.base import LLMProvider
from static_translator.core.models import BatchResult
from static_translator.core.retry_manager import RetryConfig, RetryManager
from static_translator.prompts import generate_batch_translation_prompt
from static_translator.utils.unified_logger import LogType, get_logger

_THINK_BLOCK_PATTERN = re.compile(r'<think>.*?</think>', re.DOTALL | re.IGNORECASE)
_CODE_FENCE_PATTERN = re.compile(r'^```[a-zA-Z]*\s*\n?(.*?)\n?```$', re.DOTALL)


def clean_response_text(content: str) -> str:
    """Remove <think> blocks and a surrounding markdown code fence"""
    content = _THINK_BLOCK_PATTERN.sub('', content)
    # Unclosed think block: keep what follows the last closing tag, if any
    if '</think>' in content.lower():
        content = content[content.lower().rfind('</think>') + len('</think>'):]
    content = content.strip()
    fence = _CODE_FENCE_PATTERN.match(content)
    if fence:
        content = fence.group(1).strip()
    return content


def parse_translations_response(content: str) -> List[Optional[str]]:
    """
    Parse the structured translation response.

    Accepts {"translations": [...]} or a bare JSON array.

    Raises:
        LLMResponseError: If the response has any other shape
    """
    cleaned = clean_response_text(content)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = _parse_embedded_json(cleaned)

    if isinstance(data, dict) and isinstance(data.get('translations'), list):
        items = data['translations']
    elif isinstance(data, list):
        items = data
    else:
        raise LLMResponseError('Response missing "translations" array',
                               {'response': cleaned[:200]})

    for index, item in enumerate(items):
        if item is not None and not isinstance(item, str):
            raise LLMResponseError(f"Translation at index {index} is not a string",
                                   {'type': type(item).__name__})
    return items


def _parse_embedded_json(text: str):
    """Last resort: the outermost JSON object or array inside surrounding prose"""
    for opening, closing in (('{', '}'), ('[', ']')):
        start, end = text.find(opening), text.rfind(closing)
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                continue
    raise LLMResponseError("Response is not valid JSON", {'response': text[:200]})


def align_translations(texts: Sequence[str], items: List[Optional[str]]) -> Tuple[List[str], List[str]]:
    """
    Align parsed translations with the source texts.

    Returns:
        Tuple of (translations with len(texts) entries, diagnostics)
    """
    diagnostics = []
    expected, received = len(texts), len(items)
    if received < expected:
        diagnostics.append(f"Translation count mismatch: expected {expected}, got {received}; "
                           f"{expected - received} entr{'y' if expected - received == 1 else 'ies'} "
                           f"kept in the source language")
    elif received > expected:
        diagnostics.append(f"Translation count mismatch: expected {expected}, got {received}; "
                           f"extra entries dropped")

    aligned = []
    for index, source in enumerate(texts):
        translated = items[index] if index < received else None
        aligned.append(translated if translated else source)
    return aligned, diagnostics


class TranslationClient:
    """
    Batched translation over an LLM provider.

    Args:
        provider: LLM provider used for every request
        retry_config: Backoff policy for rate limiting and malformed responses
        glossary: language -> (term -> translation)
    """

    def __init__(self, provider: LLMProvider, retry_config: Optional[RetryConfig] = None,
                 glossary: Optional[Dict[str, Dict[str, str]]] = None,
                 retry_manager: Optional[RetryManager] = None):
        self.provider = provider
        self.glossary = glossary or {}
        self.retry_manager = retry_manager or RetryManager(retry_config)
        self.logger = get_logger()

    async def translate_batch(self, texts: Sequence[str], target_language: str,
                              context_hint: Optional[str] = None) -> BatchResult:
        """
        Translate one batch of texts.

        Args:
            texts: Source texts, order preserved in the result
            target_language: Target language code
            context_hint: "title", "meta" or None

        Returns:
            BatchResult with exactly len(texts) translations

        Raises:
            TranslationFailedError: When retries are exhausted or the failure
                is not retryable
        """
        texts = list(texts)
        if not texts:
            return BatchResult(translations=[], attempts=0)

        prompt = generate_batch_translation_prompt(
            texts, target_language, self.glossary.get(target_language), context_hint
        )
        usage = {'tokens': 0, 'attempts': 0}

        async def attempt() -> List[Optional[str]]:
            usage['attempts'] += 1
            self.logger.debug("Batch request", LogType.LLM_REQUEST, {
                'model': self.provider.model,
                'target_language': target_language,
                'count': len(texts),
                'system_prompt': prompt.system,
                'user_prompt': prompt.user,
            })
            start_time = time.time()
            response = await self.provider.generate(prompt.user, system_prompt=prompt.system, json_mode=True)
            usage['tokens'] += response.total_tokens
            self.logger.debug("Batch response", LogType.LLM_RESPONSE, {
                'execution_time': time.time() - start_time,
                'response': response.content,
            })
            return parse_translations_response(response.content)

        items = await self.retry_manager.execute_with_retry(
            attempt, operation_id=f"batch of {len(texts)} -> {target_language}"
        )

        translations, diagnostics = align_translations(texts, items)
        for diagnostic in diagnostics:
            self.logger.warning(diagnostic)

        return BatchResult(
            translations=translations,
            tokens_used=usage['tokens'],
            diagnostics=diagnostics,
            attempts=usage['attempts']
        )

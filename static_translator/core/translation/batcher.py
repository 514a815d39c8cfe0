"""
Translation batcher

Deduplicates units by literal text, slices them into bounded batches and
awaits the translation client once per batch, sequentially.
"""
from typing import Dict, List, Optional, Sequence

from static_translator.config import TRANSLATION_BATCH_SIZE
from static_translator.core.html.constants import META_KEY_PREFIXES, TITLE_KEY
from static_translator.core.models import TranslationOutcome, TranslationUnit
from .client import TranslationClient


def deduplicate_texts(units: Sequence[TranslationUnit]) -> List[str]:
    """Unique unit texts in first-occurrence order"""
    seen = set()
    texts = []
    for unit in units:
        if unit.text not in seen:
            seen.add(unit.text)
            texts.append(unit.text)
    return texts


def split_batches(texts: Sequence[str], batch_size: int) -> List[List[str]]:
    size = max(1, batch_size)
    return [list(texts[i:i + size]) for i in range(0, len(texts), size)]


def context_hint_for_batch(batch: Sequence[str], units: Sequence[TranslationUnit]) -> Optional[str]:
    """'title' when the batch carries the page title, 'meta' for metadata texts"""
    batch_texts = set(batch)
    keys = [unit.key for unit in units if unit.text in batch_texts]
    if TITLE_KEY in keys:
        return 'title'
    if any(key.startswith(META_KEY_PREFIXES) for key in keys):
        return 'meta'
    return None


class TranslationBatcher:
    """Translates every unit of one document for one language"""

    def __init__(self, client: TranslationClient, batch_size: int = TRANSLATION_BATCH_SIZE):
        self.client = client
        self.batch_size = batch_size

    async def translate_units(self, units: Sequence[TranslationUnit], target_language: str) -> TranslationOutcome:
        """
        Translate units, batch by batch.

        Args:
            units: Units of one extraction pass
            target_language: Target language code

        Returns:
            TranslationOutcome covering every unit key; a key without a
            translated entry keeps its original text

        Raises:
            TranslationFailedError: If any batch fails
        """
        outcome = TranslationOutcome()
        texts = deduplicate_texts(units)
        translated: Dict[str, str] = {}

        for batch in split_batches(texts, self.batch_size):
            result = await self.client.translate_batch(
                batch, target_language, context_hint_for_batch(batch, units)
            )
            translated.update(zip(batch, result.translations))
            outcome.tokens_used += result.tokens_used
            outcome.diagnostics.extend(result.diagnostics)
            outcome.batch_count += 1

        outcome.translations = {unit.key: translated.get(unit.text) or unit.text for unit in units}
        return outcome

"""
Document x language scheduling

Every (source document, target language) pair is one task. Tasks run
concurrently under a semaphore; inside a task the steps are sequential:
cache lookup, extraction, batched translation, reinjection, write.
A failing task is recorded in its result and never cancels its siblings.
"""
import asyncio
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from static_translator.config import TranslatorConfig, MAX_TRANSLATION_ATTEMPTS, RETRY_INITIAL_DELAY, RETRY_MAX_DELAY
from static_translator.core.exceptions import TranslationError
from static_translator.core.html.extractor import HtmlExtractor
from static_translator.core.html.reinjector import HtmlReinjector
from static_translator.core.llm.factory import create_llm_provider
from static_translator.core.models import (
    DocumentTranslation,
    ExtractionResult,
    FileTranslationResult,
    TranslationStats,
)
from static_translator.core.retry_manager import RetryConfig
from static_translator.core.translation.batcher import TranslationBatcher
from static_translator.core.translation.client import TranslationClient
from static_translator.persistence.translation_cache import TranslationCache, content_hash
from static_translator.utils.file_utils import get_output_path, read_text_file, write_text_file
from static_translator.utils.unified_logger import LogType, get_logger


class TranslationPipeline:
    """
    Translates a set of source documents into every configured language.

    Args:
        config: Validated project configuration
        batcher: Batcher wrapping the translation client
        cache: Optional cache collaborator
    """

    def __init__(self, config: TranslatorConfig, batcher: TranslationBatcher,
                 cache: Optional[TranslationCache] = None):
        self.config = config
        self.batcher = batcher
        self.cache = cache
        self.extractor = HtmlExtractor(config.safety)
        self.reinjector = HtmlReinjector(config.seo, config.target_languages, config.source_language)
        self.logger = get_logger()
        self._sources: Dict[str, asyncio.Future] = {}
        self._extractions: Dict[Tuple[str, str], ExtractionResult] = {}

    @classmethod
    def from_config(cls, config: TranslatorConfig) -> 'TranslationPipeline':
        """Build provider, client, batcher and cache from the configuration"""
        provider = create_llm_provider(
            config.provider,
            model=config.model,
            api_key=config.api_key,
            api_endpoint=config.api_endpoint
        )
        retry_config = RetryConfig(
            max_attempts=MAX_TRANSLATION_ATTEMPTS,
            initial_delay=RETRY_INITIAL_DELAY,
            max_delay=RETRY_MAX_DELAY,
            backoff_factor=2.0
        )
        client = TranslationClient(provider, retry_config, config.glossary)
        cache = TranslationCache(config.cache.directory, config.cache.enabled)
        return cls(config, TranslationBatcher(client, config.batch_size), cache)

    async def close(self):
        await self.batcher.client.provider.close()

    def _extraction_for(self, source_key: str, html: str, source_hash: str) -> ExtractionResult:
        key = (source_key, source_hash)
        if key not in self._extractions:
            self._extractions[key] = self.extractor.extract(html)
        return self._extractions[key]

    async def translate_document(self, source_key: str, html: str, language: str) -> DocumentTranslation:
        """
        Translate one document into one language.

        Args:
            source_key: Identity of the document (relative path)
            html: Source HTML
            language: Target language code

        Returns:
            DocumentTranslation with the final HTML
        """
        source_hash = content_hash(html)
        if self.cache is not None:
            cached = await self.cache.get(source_key, source_hash, language)
            if cached is not None:
                self.logger.debug(f"[CACHE] {source_key} -> {language}")
                return DocumentTranslation(html=cached, from_cache=True)

        extraction = self._extraction_for(source_key, html, source_hash)
        if extraction.is_empty:
            return DocumentTranslation(html=html, from_source_copy=True)

        outcome = await self.batcher.translate_units(extraction.units, language)
        final_html = self.reinjector.reinject(extraction, outcome.translations, language)

        if self.cache is not None:
            await self.cache.set(source_key, source_hash, language, final_html)

        return DocumentTranslation(
            html=final_html,
            tokens_used=outcome.tokens_used,
            diagnostics=outcome.diagnostics
        )

    async def _read_source(self, relative_path: str) -> str:
        """Read a source document once, shared by all of its language tasks"""
        future = self._sources.get(relative_path)
        if future is None:
            future = asyncio.ensure_future(read_text_file(Path(self.config.source_dir) / relative_path))
            self._sources[relative_path] = future
        return await future

    async def translate_file(self, relative_path: str, language: str) -> FileTranslationResult:
        """
        Translate one source file into outputDir/<language>/<relative_path>.

        Returns:
            FileTranslationResult; failures are captured, never raised
        """
        source_path = Path(self.config.source_dir) / relative_path
        target_path = get_output_path(self.config.output_dir, language, relative_path)

        try:
            html = await self._read_source(relative_path)
            document = await self.translate_document(relative_path, html, language)
            await write_text_file(target_path, document.html)
        except (TranslationError, OSError) as e:
            message = getattr(e, 'message', None) or str(e)
            self.logger.debug(f"{relative_path} -> {language} failed", LogType.ERROR_DETAIL,
                              {'details': str(e), 'source': relative_path, 'language': language})
            return FileTranslationResult(
                source=str(source_path),
                target=str(target_path),
                language=language,
                success=False,
                error=message
            )

        if document.from_source_copy:
            self.logger.debug(f"{relative_path} has no translatable content, copied unchanged to {language}")

        return FileTranslationResult(
            source=str(source_path),
            target=str(target_path),
            language=language,
            success=True,
            tokens_used=document.tokens_used,
            cached=document.from_cache,
            diagnostics=list(document.diagnostics)
        )

    async def run(self, files: Sequence[str]) -> Tuple[List[FileTranslationResult], TranslationStats]:
        """
        Translate every file into every target language.

        Args:
            files: Source paths relative to sourceDir

        Returns:
            Tuple of (results in file x language order, aggregated stats)
        """
        start_time = time.time()
        languages = list(self.config.target_languages)
        total = len(files) * len(languages)
        semaphore = asyncio.Semaphore(self.config.parallel.limit)
        completed = 0

        self.logger.info("Translation started", LogType.TRANSLATION_START, {
            'total_files': len(files),
            'total_tasks': total,
            'languages': languages,
            'model': self.batcher.client.provider.model,
        })

        async def worker(relative_path: str, language: str) -> FileTranslationResult:
            nonlocal completed
            async with semaphore:
                try:
                    result = await self.translate_file(relative_path, language)
                except Exception as e:
                    # Isolation: an unexpected error fails this task only
                    self.logger.error(f"Unexpected error translating {relative_path} -> {language}: {e}")
                    result = FileTranslationResult(
                        source=str(Path(self.config.source_dir) / relative_path),
                        target=str(get_output_path(self.config.output_dir, language, relative_path)),
                        language=language,
                        success=False,
                        error=str(e) or type(e).__name__
                    )
            completed += 1
            self.logger.info(f"{relative_path} → {language}", LogType.PROGRESS, {
                'current': completed,
                'total': total,
                'success': result.success,
                'error': result.error,
            })
            return result

        results = await asyncio.gather(*[worker(relative_path, language)
                                         for relative_path in files for language in languages])

        stats = TranslationStats()
        for result in results:
            stats.record(result)
        stats.duration = time.time() - start_time
        self._sources.clear()
        self._extractions.clear()
        return list(results), stats

"""
On-disk translation cache keyed by source document and language.
"""

import hashlib
import json
import shutil
import time
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from static_translator.utils.unified_logger import get_logger


def content_hash(content: str) -> str:
    """md5 hex digest of a whole source document"""
    return hashlib.md5(content.encode('utf-8')).hexdigest()


class TranslationCache:
    """
    Stores one translated document per (source, language) pair.

    An entry is a JSON file named after md5("<source_key>-<language>")
    holding {hash, translations: {language: html}, timestamp}. A hit requires
    the stored hash to equal the hash of the current source content, so any
    edit to a source invalidates its entries for every language.
    Read and write failures are logged and treated as a miss / no-op.
    """

    def __init__(self, directory: str = ".translator-cache", enabled: bool = True):
        """
        Initialize the cache.

        Args:
            directory: Directory holding the cache entries
            enabled: When False every lookup misses and writes are skipped
        """
        self.directory = Path(directory)
        self.enabled = enabled
        self.logger = get_logger()
        if self.enabled:
            self.directory.mkdir(parents=True, exist_ok=True)

    def _entry_path(self, source_key: str, language: str) -> Path:
        name = hashlib.md5(f"{source_key}-{language}".encode('utf-8')).hexdigest()
        return self.directory / f"{name}.json"

    async def _read_entry(self, path: Path) -> Optional[Dict[str, Any]]:
        async with aiofiles.open(path, 'r', encoding='utf-8') as f:
            entry = json.loads(await f.read())
        return entry if isinstance(entry, dict) else None

    async def get(self, source_key: str, current_hash: str, language: str) -> Optional[str]:
        """
        Look up a translated document.

        Args:
            source_key: Identity of the source document (its path)
            current_hash: content_hash() of the current source content
            language: Target language code

        Returns:
            Translated document, or None on a miss
        """
        if not self.enabled:
            return None

        path = self._entry_path(source_key, language)
        if not path.exists():
            return None

        try:
            entry = await self._read_entry(path)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Cache read error for {source_key}: {e}")
            return None

        if not entry or entry.get('hash') != current_hash:
            return None
        translation = (entry.get('translations') or {}).get(language)
        return translation if isinstance(translation, str) else None

    async def set(self, source_key: str, current_hash: str, language: str, translated: str) -> None:
        """Store a translated document for the given source content hash"""
        if not self.enabled:
            return

        path = self._entry_path(source_key, language)
        entry = None
        if path.exists():
            try:
                entry = await self._read_entry(path)
            except (OSError, ValueError) as e:
                self.logger.warning(f"Cache entry for {source_key} is unreadable, replacing it: {e}")

        if not entry or entry.get('hash') != current_hash:
            entry = {'hash': current_hash, 'translations': {}}
        entry.setdefault('translations', {})[language] = translated
        entry['timestamp'] = int(time.time() * 1000)

        try:
            async with aiofiles.open(path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(entry, ensure_ascii=False))
        except OSError as e:
            self.logger.warning(f"Cache write error for {source_key}: {e}")

    def clear(self) -> None:
        """Delete every cache entry"""
        if self.directory.exists():
            shutil.rmtree(self.directory)
        if self.enabled:
            self.directory.mkdir(parents=True, exist_ok=True)

    def get_stats(self) -> Dict[str, int]:
        """Number of entries and their total size in bytes"""
        if not self.directory.exists():
            return {'entries': 0, 'size_bytes': 0}
        files = list(self.directory.glob('*.json'))
        return {'entries': len(files), 'size_bytes': sum(f.stat().st_size for f in files)}

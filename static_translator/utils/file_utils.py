"""
File utilities for translation operations
"""
import json
import os
from datetime import datetime, timezone
from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, List, Sequence

import aiofiles

from static_translator.config import COST_PER_MILLION_TOKENS, REPORT_FILE_NAME
from static_translator.core.exceptions import FileWriteError, SourceUnreadableError
from static_translator.core.models import FileTranslationResult, TranslationStats

HTML_EXTENSIONS = ('.html', '.htm')

# Rough per-document token estimate used by dry runs
ESTIMATED_TOKENS_PER_DOCUMENT = 500


def is_ignored(relative_path: str, ignore_paths: Sequence[str]) -> bool:
    """
    Check a relative POSIX path against glob patterns.

    A pattern ending in "/**" also matches the directory prefix itself,
    so "drafts/**" ignores everything below drafts/.
    """
    for pattern in ignore_paths:
        if fnmatch(relative_path, pattern):
            return True
        if pattern.endswith('/**'):
            prefix = pattern[:-3]
            if fnmatch(relative_path, prefix + '/*') or relative_path.startswith(prefix + '/'):
                return True
    return False


def discover_html_files(source_dir: str, ignore_paths: Sequence[str] = ()) -> List[str]:
    """
    Find every HTML document below source_dir.

    Args:
        source_dir: Root directory of the static site
        ignore_paths: Glob patterns relative to source_dir

    Returns:
        Sorted relative POSIX paths
    """
    root = Path(source_dir)
    if not root.is_dir():
        return []

    files = []
    for path in root.rglob('*'):
        if not path.is_file() or path.suffix.lower() not in HTML_EXTENSIONS:
            continue
        relative = path.relative_to(root).as_posix()
        if not is_ignored(relative, ignore_paths):
            files.append(relative)
    return sorted(files)


def get_output_path(output_dir: str, language: str, relative_path: str) -> Path:
    """outputDir/<language>/<relative_path>"""
    return Path(output_dir) / language / relative_path


async def read_text_file(path: Path) -> str:
    """Read a UTF-8 source document"""
    try:
        async with aiofiles.open(path, 'r', encoding='utf-8') as f:
            return await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadableError(f"Cannot read {path}: {e}", path=str(path)) from e


async def write_text_file(path: Path, content: str) -> None:
    """Write a UTF-8 document, creating parent directories"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, 'w', encoding='utf-8') as f:
            await f.write(content)
    except OSError as e:
        raise FileWriteError(f"Cannot write {path}: {e}", {'path': str(path)}) from e


def _relative_to_cwd(path: str) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        return path


def build_report(results: Sequence[FileTranslationResult], stats: TranslationStats) -> Dict:
    entries = []
    for result in results:
        entry = result.to_dict()
        entry['source'] = _relative_to_cwd(result.source)
        entry['target'] = _relative_to_cwd(result.target)
        entries.append(entry)
    return {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'stats': stats.to_dict(),
        'results': entries,
    }


async def write_report(results: Sequence[FileTranslationResult], stats: TranslationStats,
                       output_dir: str) -> Path:
    """Save translation-report.json in the output directory and return its path"""
    report_path = Path(output_dir) / REPORT_FILE_NAME
    report = build_report(results, stats)
    await write_text_file(report_path, json.dumps(report, indent=2, ensure_ascii=False))
    return report_path


def estimate_dry_run(files: Sequence[str], languages: Sequence[str]) -> Dict:
    """Rough token and cost estimate without calling any API"""
    operations = len(files) * len(languages)
    tokens = operations * ESTIMATED_TOKENS_PER_DOCUMENT
    return {
        'files': len(files),
        'languages': list(languages),
        'operations': operations,
        'estimated_tokens': tokens,
        'estimated_cost': tokens / 1_000_000 * COST_PER_MILLION_TOKENS,
    }

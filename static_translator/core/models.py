"""
Data structures shared by the extraction, translation and scheduling stages.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from static_translator.config import COST_PER_MILLION_TOKENS


@dataclass(frozen=True)
class TranslationUnit:
    """One addressable piece of translatable text.

    Attributes:
        key: Document-scoped identifier (e.g. TITLE, ALT#0, BLOCK#3)
        text: Original text or inner markup
    """
    key: str
    text: str


@dataclass(frozen=True)
class PlaceholderEntry:
    """A protected subtree captured verbatim."""
    token: str
    raw_markup: str


@dataclass
class ExtractionResult:
    """Output of one extraction pass over one document.

    The skeleton carries no language-specific content, so one result is
    reused for every target language of the document.

    Attributes:
        units: Translatable units in construction order
        mapping: key -> original text, aligned with units
        skeleton: Serialized document with placeholders and key tags
        placeholders: Protected fragments, in token order
    """
    units: List[TranslationUnit] = field(default_factory=list)
    mapping: Dict[str, str] = field(default_factory=dict)
    skeleton: str = ""
    placeholders: List[PlaceholderEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.units


@dataclass
class BatchResult:
    """Result of one Translation Client call, aligned with its input."""
    translations: List[str]
    tokens_used: int = 0
    diagnostics: List[str] = field(default_factory=list)
    attempts: int = 1


@dataclass
class TranslationOutcome:
    """Per document x language translation of every unit key."""
    translations: Dict[str, str] = field(default_factory=dict)
    tokens_used: int = 0
    diagnostics: List[str] = field(default_factory=list)
    batch_count: int = 0


@dataclass
class DocumentTranslation:
    html: str
    tokens_used: int = 0
    from_cache: bool = False
    from_source_copy: bool = False
    diagnostics: List[str] = field(default_factory=list)


@dataclass
class FileTranslationResult:
    """Success/failure record for one document x language task."""
    source: str
    target: str
    language: str
    success: bool
    error: Optional[str] = None
    tokens_used: int = 0
    cached: bool = False
    diagnostics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        data = {
            'source': self.source,
            'target': self.target,
            'language': self.language,
            'success': self.success,
            'tokensUsed': self.tokens_used,
            'cached': self.cached,
        }
        if self.error:
            data['error'] = self.error
        if self.diagnostics:
            data['diagnostics'] = list(self.diagnostics)
        return data


@dataclass
class TranslationStats:
    total_files: int = 0
    successful_files: int = 0
    failed_files: int = 0
    cached_files: int = 0
    total_tokens: int = 0
    duration: float = 0.0

    @property
    def estimated_cost(self) -> float:
        return self.total_tokens / 1_000_000 * COST_PER_MILLION_TOKENS

    def record(self, result: FileTranslationResult) -> None:
        self.total_files += 1
        if result.success:
            self.successful_files += 1
        else:
            self.failed_files += 1
        if result.cached:
            self.cached_files += 1
        self.total_tokens += result.tokens_used

    def to_dict(self) -> Dict:
        return {
            'total_files': self.total_files,
            'successful_files': self.successful_files,
            'failed_files': self.failed_files,
            'cached_files': self.cached_files,
            'total_tokens': self.total_tokens,
            'estimated_cost': round(self.estimated_cost, 6),
            'duration': round(self.duration, 3),
        }

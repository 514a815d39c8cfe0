"""
Centralized configuration

Two layers:
- environment constants (``.env`` loaded with python-dotenv, then process env)
- the project file ``translator.config.json`` loaded into TranslatorConfig
"""
import os
import re
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any
from dotenv import load_dotenv

from static_translator.core.exceptions import ConfigurationError

# Setup debug logger for configuration
_config_logger = logging.getLogger('config')

# Check for DEBUG_MODE early (before .env is loaded, check environment)
_debug_mode = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
if _debug_mode:
    logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    _config_logger.setLevel(logging.DEBUG)

_env_file = Path.cwd() / '.env'
_dotenv_result = load_dotenv(_env_file)
if _debug_mode:
    _config_logger.debug(f"Looking for .env at: {_env_file.absolute()} (loaded: {_dotenv_result})")

# Load from environment variables with defaults
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'openai')  # 'openai' or 'openrouter'
API_ENDPOINT = os.getenv('API_ENDPOINT', 'https://api.openai.com/v1/chat/completions')
DEFAULT_MODEL = os.getenv('DEFAULT_MODEL', 'gpt-4o-mini')
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')

# OpenRouter configuration
OPENROUTER_API_KEY = os.getenv('OPENROUTER_API_KEY', '')
OPENROUTER_MODEL = os.getenv('OPENROUTER_MODEL', 'openai/gpt-4o-mini')
OPENROUTER_API_ENDPOINT = 'https://openrouter.ai/api/v1/chat/completions'

REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '120'))
MAX_TRANSLATION_ATTEMPTS = int(os.getenv('MAX_TRANSLATION_ATTEMPTS', '3'))
RETRY_INITIAL_DELAY = float(os.getenv('RETRY_INITIAL_DELAY', '1'))
RETRY_MAX_DELAY = float(os.getenv('RETRY_MAX_DELAY', '10'))
TRANSLATION_BATCH_SIZE = int(os.getenv('TRANSLATION_BATCH_SIZE', '20'))

DEBUG_MODE = _debug_mode or os.getenv('DEBUG_MODE', 'false').lower() == 'true'

DEFAULT_CONFIG_FILE = 'translator.config.json'
REPORT_FILE_NAME = 'translation-report.json'

# Rough price used for cost estimates (USD per 1M tokens)
COST_PER_MILLION_TOKENS = 0.15

LANGUAGE_CODE_PATTERN = re.compile(r'^[a-z]{2}(-[A-Z]{2})?$')
MIN_PARALLEL_LIMIT = 1
MAX_PARALLEL_LIMIT = 20


@dataclass
class SafetyConfig:
    """Which protected-content classes are kept out of translation"""
    preserve_code_blocks: bool = True
    preserve_scripts: bool = True
    preserve_styles: bool = True


@dataclass
class SeoConfig:
    inject_hreflang: bool = True
    base_url: Optional[str] = None


@dataclass
class ParallelConfig:
    limit: int = 5


@dataclass
class CacheConfig:
    enabled: bool = True
    directory: str = '.translator-cache'


@dataclass
class TranslatorConfig:
    """Validated project configuration handed to the translation core"""
    source_dir: str = './public'
    output_dir: str = './dist'
    target_languages: List[str] = field(default_factory=lambda: ['fr'])
    source_language: str = 'en'
    provider: str = LLM_PROVIDER
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    api_endpoint: str = API_ENDPOINT
    glossary: Dict[str, Dict[str, str]] = field(default_factory=dict)
    ignore_paths: List[str] = field(default_factory=list)
    batch_size: int = TRANSLATION_BATCH_SIZE
    cache: CacheConfig = field(default_factory=CacheConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    seo: SeoConfig = field(default_factory=SeoConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TranslatorConfig':
        """Build a config from the camelCase JSON structure (not validated)"""
        cache = data.get('cache') or {}
        parallel = data.get('parallel') or {}
        seo = data.get('seo') or {}
        safety = data.get('safety') or {}
        defaults = cls()
        return cls(
            source_dir=data.get('sourceDir', defaults.source_dir),
            output_dir=data.get('outputDir', defaults.output_dir),
            target_languages=list(data.get('targetLanguages', defaults.target_languages) or []),
            source_language=data.get('sourceLanguage', defaults.source_language),
            provider=data.get('provider', defaults.provider),
            model=data.get('model', defaults.model),
            api_key=data.get('apiKey') or None,
            api_endpoint=data.get('apiEndpoint', defaults.api_endpoint),
            glossary=data.get('glossary') or {},
            ignore_paths=list(data.get('ignorePaths') or []),
            batch_size=data.get('batchSize', defaults.batch_size),
            cache=CacheConfig(
                enabled=cache.get('enabled', True),
                directory=cache.get('directory', '.translator-cache')
            ),
            parallel=ParallelConfig(limit=parallel.get('limit', 5)),
            seo=SeoConfig(
                inject_hreflang=seo.get('injectHreflang', True),
                base_url=seo.get('baseUrl')
            ),
            safety=SafetyConfig(
                preserve_code_blocks=safety.get('preserveCodeBlocks', True),
                preserve_scripts=safety.get('preserveScripts', True),
                preserve_styles=safety.get('preserveStyles', True)
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase JSON structure (API key omitted)"""
        return {
            'sourceDir': self.source_dir,
            'outputDir': self.output_dir,
            'targetLanguages': list(self.target_languages),
            'sourceLanguage': self.source_language,
            'provider': self.provider,
            'model': self.model,
            'apiEndpoint': self.api_endpoint,
            'glossary': self.glossary,
            'ignorePaths': list(self.ignore_paths),
            'batchSize': self.batch_size,
            'cache': {'enabled': self.cache.enabled, 'directory': self.cache.directory},
            'parallel': {'limit': self.parallel.limit},
            'seo': {'injectHreflang': self.seo.inject_hreflang, 'baseUrl': self.seo.base_url},
            'safety': {
                'preserveCodeBlocks': self.safety.preserve_code_blocks,
                'preserveScripts': self.safety.preserve_scripts,
                'preserveStyles': self.safety.preserve_styles
            }
        }

    def resolve_api_key(self) -> Optional[str]:
        """API key from the config file, falling back to the environment"""
        if self.api_key:
            return self.api_key
        if self.provider.lower() == 'openrouter':
            return os.getenv('OPENROUTER_API_KEY', OPENROUTER_API_KEY) or None
        return os.getenv('OPENAI_API_KEY', OPENAI_API_KEY) or None

    def validate(self) -> List[str]:
        """
        Collect every configuration problem.

        Returns:
            List of human-readable problems (empty when valid)
        """
        errors = []

        if not self.source_dir:
            errors.append("sourceDir is required")
        if not self.output_dir:
            errors.append("outputDir is required")

        if not isinstance(self.target_languages, list) or not self.target_languages:
            errors.append("targetLanguages must contain at least one language")
        else:
            for lang in self.target_languages:
                if not isinstance(lang, str) or not LANGUAGE_CODE_PATTERN.match(lang):
                    errors.append(f"Invalid language code: {lang!r} (expected e.g. 'fr' or 'pt-BR')")

        if not isinstance(self.source_language, str) or not LANGUAGE_CODE_PATTERN.match(self.source_language):
            errors.append(f"Invalid sourceLanguage: {self.source_language!r}")

        if self.provider.lower() not in ('openai', 'openrouter'):
            errors.append(f"Unknown provider: {self.provider!r} (expected 'openai' or 'openrouter')")

        if not isinstance(self.batch_size, int) or isinstance(self.batch_size, bool) or self.batch_size < 1:
            errors.append(f"batchSize must be a positive integer, got {self.batch_size!r}")

        limit = self.parallel.limit
        if (not isinstance(limit, int) or isinstance(limit, bool)
                or not MIN_PARALLEL_LIMIT <= limit <= MAX_PARALLEL_LIMIT):
            errors.append(f"parallel.limit must be between {MIN_PARALLEL_LIMIT} and "
                          f"{MAX_PARALLEL_LIMIT}, got {limit!r}")

        if not isinstance(self.glossary, dict) or not all(
                isinstance(terms, dict) for terms in self.glossary.values()):
            errors.append("glossary must map a language code to a {term: translation} object")

        if not isinstance(self.ignore_paths, list):
            errors.append("ignorePaths must be a list of glob patterns")

        return errors


def load_config(config_path: str = DEFAULT_CONFIG_FILE) -> TranslatorConfig:
    """
    Load and validate the project configuration file.

    Args:
        config_path: Path to translator.config.json

    Returns:
        Validated TranslatorConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {path}. Run 'static-translator init' to create one.",
            context={'path': str(path)}
        )

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read configuration file {path}: {e}",
                                 context={'path': str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")

    config = TranslatorConfig.from_dict(data)
    config.api_key = config.resolve_api_key()

    errors = config.validate()
    if errors:
        bullet_list = "\n".join(f"  - {error}" for error in errors)
        raise ConfigurationError(f"Invalid configuration:\n{bullet_list}",
                                 context={'path': str(path)})

    _config_logger.debug(f"Loaded configuration from {path}: {len(config.target_languages)} target language(s)")
    return config


def save_config(config: TranslatorConfig, config_path: str = DEFAULT_CONFIG_FILE) -> Path:
    """Write the configuration as camelCase JSON and return its path"""
    path = Path(config_path)
    path.write_text(json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding='utf-8')
    return path

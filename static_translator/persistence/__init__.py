"""
Persistence module for the translation cache.
"""

from .translation_cache import TranslationCache, content_hash

__all__ = ['TranslationCache', 'content_hash']

"""
Batched translation of extracted units.
"""

from .client import TranslationClient
from .batcher import TranslationBatcher

__all__ = ['TranslationClient', 'TranslationBatcher']

"""
HTML extraction and reinjection

Modules:
    - dom: tagged-variant node model, parsing and serialization
    - placeholder_vault: protected markup table
    - extractor: translatable unit extraction and skeleton
    - reinjector: translated skeleton rehydration and hreflang links
"""

__all__ = []

"""
Translation core: extraction, batching, LLM access and reinjection.

Import submodules directly (static_translator.core.pipeline, ...);
nothing is re-exported here so that static_translator.config can import
static_translator.core.exceptions without a cycle.
"""

__all__ = []

"""
LLM Provider Implementations

Providers:
    - openai: OpenAI-compatible APIs
    - openrouter: OpenRouter aggregator
"""

__all__ = []

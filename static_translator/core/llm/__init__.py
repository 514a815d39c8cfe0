"""
LLM access layer (the external translation capability)
"""

__all__ = []

"""
Static site translator: translate HTML documents into multiple languages
with an LLM while keeping scripts, styles, code and markup intact.
"""

__version__ = "1.0.0"

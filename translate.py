"""
Command-line entry point for static site translation

Usage:
    python translate.py [translate] [-c translator.config.json] [--dry-run] [--clear-cache] [-v]
    python translate.py init [--force]
"""
import sys

from static_translator.cli import main


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line interface for static site translation
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from static_translator import __version__
from static_translator.config import (
    DEFAULT_CONFIG_FILE,
    TranslatorConfig,
    load_config,
    save_config,
)
from static_translator.core.exceptions import ConfigurationError
from static_translator.core.pipeline import TranslationPipeline
from static_translator.persistence.translation_cache import TranslationCache
from static_translator.utils.file_utils import discover_html_files, estimate_dry_run, write_report
from static_translator.utils.unified_logger import LogType, setup_cli_logger

COMMANDS = ('translate', 'init')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="static-translator",
        description="Translate a static HTML site into multiple languages using an LLM."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    translate = subparsers.add_parser("translate", help="Translate the site described by the configuration (default).")
    translate.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE,
                           help=f"Path to the configuration file (default: {DEFAULT_CONFIG_FILE}).")
    translate.add_argument("-d", "--dry-run", action="store_true",
                           help="Show what would be translated without making API calls.")
    translate.add_argument("--clear-cache", action="store_true", help="Clear the translation cache before starting.")
    translate.add_argument("-v", "--verbose", action="store_true", help="Show detailed output.")
    translate.add_argument("--no-color", action="store_true", help="Disable colored output.")

    init = subparsers.add_parser("init", help="Write a default configuration file.")
    init.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE,
                      help=f"Path of the configuration file to create (default: {DEFAULT_CONFIG_FILE}).")
    init.add_argument("--force", action="store_true", help="Overwrite an existing configuration file.")
    init.add_argument("--no-color", action="store_true", help="Disable colored output.")
    return parser


def init_command(args) -> int:
    logger = setup_cli_logger(enable_colors=not args.no_color)
    path = Path(args.config)
    if path.exists() and not args.force:
        logger.error(f"{path} already exists. Use --force to overwrite it.")
        return 1
    save_config(TranslatorConfig(), str(path))
    logger.info(f"Configuration written to {path}")
    logger.info("Set OPENAI_API_KEY (or OPENROUTER_API_KEY) in your environment or .env file before translating.")
    return 0


async def translate_command(args) -> int:
    logger = setup_cli_logger(enable_colors=not args.no_color, verbose=args.verbose)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(e.message)
        return 1
    logger.info("Configuration loaded")

    if args.clear_cache:
        TranslationCache(config.cache.directory, enabled=False).clear()
        logger.info("Cache cleared")

    files = discover_html_files(config.source_dir, config.ignore_paths)
    if not files:
        logger.warning(f"No HTML files found in {config.source_dir}")
        return 0
    logger.info(f"Found {len(files)} HTML files")

    if args.dry_run:
        estimate = estimate_dry_run(files, config.target_languages)
        logger.info(f"DRY RUN: {estimate['files']} files x {len(estimate['languages'])} languages "
                    f"= {estimate['operations']} operations")
        logger.info(f"Estimated tokens: ~{estimate['estimated_tokens']:,}  "
                    f"Estimated cost: ~${estimate['estimated_cost']:.2f}")
        for relative_path in files:
            logger.info(f"  - {relative_path}")
        return 0

    try:
        pipeline = TranslationPipeline.from_config(config)
    except ConfigurationError as e:
        logger.error(e.message)
        return 1

    try:
        results, stats = await pipeline.run(files)
    finally:
        await pipeline.close()

    report_path = await write_report(results, stats, config.output_dir)
    summary = stats.to_dict()
    summary['estimated_cost'] = stats.estimated_cost
    logger.info("Translation complete", LogType.TRANSLATION_END,
                {'stats': summary, 'report_path': str(report_path)})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    # translate is the default command
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ('-h', '--help', '--version')):
        argv.insert(0, 'translate')

    args = build_parser().parse_args(argv)
    if args.command == 'init':
        return init_command(args)
    return asyncio.run(translate_command(args))


if __name__ == "__main__":
    sys.exit(main())

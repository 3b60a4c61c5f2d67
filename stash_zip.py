#!/usr/bin/env python3
"""
stash-zip: archive a hand-picked subset of a directory and remove the originals.

Usage:
    python3 stash_zip.py                 # work on the current directory
    python3 stash_zip.py ~/Downloads --name old-installers --filter extension --ext .dmg
    python3 stash_zip.py ./project --dry-run
"""

import logging
import sys
from typing import List, Optional

from cli_args import CommandLineArgs
from colored_logger import get_colored_logger, level_from_name, setup_colored_logging
from pipeline import FAILED_STATES, PipelineOptions, StashPipeline, resolve_source_dir
from prompts import ConsoleSelector
from settings import SettingsError, load_settings

logger = get_colored_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _configure_logging(cli_args: CommandLineArgs, log_level: str, color: bool) -> None:
    if cli_args.verbose:
        level = logging.DEBUG
    elif cli_args.quiet:
        level = logging.WARNING
    else:
        level = level_from_name(log_level)
    setup_colored_logging(level=level, use_color=color and not cli_args.no_color)


def main(argv: Optional[List[str]] = None, selector=None) -> int:
    """
    Orchestrates a run:
    1. Parse CLI args and load settings
    2. Resolve and check the source directory
    3. Ask for the folder name (unless given)
    4. Run the pipeline and map its outcome to an exit code

    Returns:
        0 for every completed or early-exited run, 1 when the source directory
        is missing, the staging folder cannot be used or the configuration is
        unusable, 2 for a bad folder name.
    """
    cli_args = CommandLineArgs(argv)
    _configure_logging(cli_args, "INFO", True)

    try:
        settings = load_settings(cli_args.config)
    except SettingsError as e:
        logger.critical("%s", e)
        return EXIT_FAILURE
    _configure_logging(cli_args, settings.log_level, settings.color)

    source_dir = resolve_source_dir(cli_args.source)
    if not source_dir.is_dir():
        logger.error("Error: Directory %s does not exist.", source_dir)
        return EXIT_FAILURE

    if selector is None:
        selector = ConsoleSelector(cli_args.filter_mode, cli_args.extension)

    options = PipelineOptions.from_settings(
        settings, dry_run=cli_args.dry_run, assume_yes=cli_args.assume_yes
    )

    try:
        folder_name = cli_args.name or selector.ask_folder_name(
            settings.default_folder_name
        )
        pipeline = StashPipeline(source_dir, folder_name, selector, options)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_USAGE

    report = pipeline.run()
    return EXIT_FAILURE if report.state in FAILED_STATES else EXIT_OK


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    run()

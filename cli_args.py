import argparse
from typing import List, Optional

from filters import FILTER_MODES


class CommandLineArgs:
    """
    Parses the stash-zip command line.

    The only positional argument is the source directory, which defaults to
    the current working directory when omitted.
    """

    def __init__(self, argv: Optional[List[str]] = None) -> None:
        self.parser = argparse.ArgumentParser(
            prog="stash-zip",
            description=(
                "Pick files and folders from a directory, zip them into "
                "<name>.zip next to them, then delete the originals."
            ),
        )
        self.parser.add_argument(
            "source",
            nargs="?",
            default=None,
            help="Directory to pick items from (default: current directory).",
        )
        self.parser.add_argument(
            "--name",
            "-n",
            default=None,
            help="Name of the staging folder and archive (skips the prompt).",
        )
        self.parser.add_argument(
            "--config",
            "-c",
            default=None,
            help="Path to a YAML configuration file.",
        )
        self.parser.add_argument(
            "--filter",
            "-f",
            choices=FILTER_MODES,
            default=None,
            help="Filter mode to use instead of asking.",
        )
        self.parser.add_argument(
            "--ext",
            default=None,
            help='Extension for "--filter extension", e.g. ".txt".',
        )
        self.parser.add_argument(
            "--yes",
            "-y",
            action="store_true",
            help="Do not ask for confirmation before deleting originals.",
        )
        self.parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would happen without changing anything.",
        )
        verbosity = self.parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "--verbose", "-v", action="store_true", help="Log debug details."
        )
        verbosity.add_argument(
            "--quiet", "-q", action="store_true", help="Only log warnings and errors."
        )
        self.parser.add_argument(
            "--no-color", action="store_true", help="Disable colored log output."
        )

        self.args = self.parser.parse_args(argv)

        if self.args.filter == "extension" and not self.args.ext:
            self.parser.error('--filter extension requires --ext')
        if self.args.ext and self.args.filter not in (None, "extension"):
            self.parser.error("--ext only applies to --filter extension")

        self.source: Optional[str] = self.args.source
        self.name: Optional[str] = self.args.name
        self.config: Optional[str] = self.args.config
        self.filter_mode: Optional[str] = self.args.filter or (
            "extension" if self.args.ext else None
        )
        self.extension: Optional[str] = self.args.ext
        self.assume_yes: bool = self.args.yes
        self.dry_run: bool = self.args.dry_run
        self.verbose: bool = self.args.verbose
        self.quiet: bool = self.args.quiet
        self.no_color: bool = self.args.no_color

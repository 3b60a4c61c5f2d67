"""
Interactive console prompts for choosing what to archive.

Menus are printed as numbered lists and answered on stdin. Invalid answers
are reported and asked again; end of input is treated as an empty answer.
"""

import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from colored_logger import get_colored_logger
from filters import MODE_EXTENSION, MODE_LABELS, available_modes, normalize_extension
from io_ops.file_scanner import DirectoryEntry
from io_ops.path_utils import ArchivePathGenerator

logger = get_colored_logger(__name__)

SELECT_ALL_TOKENS = ("*", "all")


def parse_selection(answer: str, count: int) -> List[int]:
    """
    Turn an answer like "1,3-5" into zero-based indexes, keeping the order
    given and dropping repeats.

    :param answer: Comma-separated numbers and ranges, "*"/"all", or blank.
    :param count: How many choices were offered.
    :raises ValueError: if a token is not a number or range within 1..count.
    """
    answer = answer.strip().lower()
    if not answer:
        return []
    if answer in SELECT_ALL_TOKENS:
        return list(range(count))

    indexes: List[int] = []
    for token in answer.replace(" ", ",").split(","):
        if not token:
            continue
        if "-" in token:
            start_text, _, end_text = token.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Range {token} runs backwards")
            numbers = range(start, end + 1)
        else:
            numbers = [int(token)]

        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is not between 1 and {count}")
            if number - 1 not in indexes:
                indexes.append(number - 1)

    return indexes


class ConsoleSelector:
    """
    Asks the operator for the folder name, filter and items on the console.

    ``preset_mode``/``preset_extension`` answer the filter questions up
    front, e.g. from command-line flags.
    """

    def __init__(
        self,
        preset_mode: Optional[str] = None,
        preset_extension: Optional[str] = None,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
    ) -> None:
        self.preset_mode = preset_mode
        self.preset_extension = preset_extension
        self._input = input_func
        self._output = output

    def _print(self, text: str = "") -> None:
        print(text, file=self._output or sys.stdout)

    def _ask(self, message: str) -> str:
        try:
            return self._input(message).strip()
        except EOFError:
            return ""

    def _menu(self, message: str, labels: Sequence[str]) -> int:
        """Show a numbered menu and return the zero-based index chosen."""
        self._print(message)
        for number, label in enumerate(labels, 1):
            self._print(f"  {number}) {label}")

        while True:
            answer = self._ask(f"Choose 1-{len(labels)} [1]: ")
            if not answer:
                return 0
            if answer.isdigit() and 1 <= int(answer) <= len(labels):
                return int(answer) - 1
            logger.error("Invalid choice '%s'. Try again.", answer)

    def ask_folder_name(self, default: str) -> str:
        """Ask for the staging folder name; a blank answer keeps ``default``."""
        generator = ArchivePathGenerator()
        while True:
            answer = self._ask(f"Enter a name for the shared folder [{default}]: ")
            try:
                return generator.sanitize_folder_name(answer or default)
            except ValueError as e:
                logger.error("%s. Try again.", e)

    def choose_filter(
        self, entries: Sequence[DirectoryEntry], extensions: Sequence[str]
    ) -> Tuple[str, Optional[str]]:
        if self.preset_mode:
            return self.preset_mode, normalize_extension(self.preset_extension)

        modes = available_modes(entries)
        index = self._menu(
            "How would you like to filter the items?", [MODE_LABELS[m] for m in modes]
        )
        mode = modes[index]
        if mode != MODE_EXTENSION:
            return mode, None

        ext_index = self._menu("Select file extension to filter by:", list(extensions))
        return mode, extensions[ext_index]

    def choose_items(
        self, entries: Sequence[DirectoryEntry], folder_name: str, source_dir: Path
    ) -> List[str]:
        self._print(f"Select files and folders to move to {folder_name} ({source_dir}):")
        for number, entry in enumerate(entries, 1):
            self._print(f"  {number:>3}) {entry.label()}")

        while True:
            answer = self._ask("Items (e.g. 1,3-5, * for all, blank for none): ")
            try:
                return [entries[i].name for i in parse_selection(answer, len(entries))]
            except ValueError as e:
                logger.error("Invalid selection: %s. Try again.", e)

    def confirm(self, message: str) -> bool:
        answer = self._ask(f"{message} [y/N]: ")
        return answer.lower() in ("y", "yes")

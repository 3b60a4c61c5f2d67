from typing import Iterable, List, Optional
from colored_logger import get_colored_logger
from io_ops.file_scanner import DirectoryEntry

logger = get_colored_logger(__name__)

MODE_ALL = "all"
MODE_DIRECTORIES = "directories"
MODE_EXTENSION = "extension"

FILTER_MODES = (MODE_ALL, MODE_DIRECTORIES, MODE_EXTENSION)

MODE_LABELS = {
    MODE_ALL: "Show all items",
    MODE_DIRECTORIES: "Show only directories",
    MODE_EXTENSION: "Filter by file extension",
}


def normalize_extension(extension: Optional[str]) -> Optional[str]:
    """
    Lowercase an extension and give it a leading dot, so "TXT", "txt" and
    ".txt" all compare equal to the listing's ".txt".
    """
    if extension is None:
        return None
    ext = extension.strip().lower()
    if not ext:
        return None
    return ext if ext.startswith(".") else f".{ext}"


def distinct_extensions(entries: Iterable[DirectoryEntry]) -> List[str]:
    """Sorted, de-duplicated extensions present in ``entries``."""
    return sorted({entry.extension for entry in entries if entry.extension})


def available_modes(entries: Iterable[DirectoryEntry]) -> List[str]:
    """
    Filter modes worth offering for ``entries``. Extension filtering is left
    out when no entry has an extension.
    """
    if distinct_extensions(entries):
        return list(FILTER_MODES)
    return [MODE_ALL, MODE_DIRECTORIES]


def filter_by_mode(
    entries: Iterable[DirectoryEntry],
    mode: str,
    extension: Optional[str] = None,
) -> List[DirectoryEntry]:
    """
    Narrow a directory listing.

    :param entries: The listing to filter.
    :param mode: "all", "directories" or "extension".
    :param extension: Required for "extension" mode; matched exactly against
        each entry's lowercased extension.
    :return: The matching entries in their original order. An empty result is
        not an error.
    """
    entries = list(entries)

    if mode == MODE_ALL:
        return entries

    if mode == MODE_DIRECTORIES:
        return [entry for entry in entries if entry.is_directory]

    if mode == MODE_EXTENSION:
        wanted = normalize_extension(extension)
        if wanted is None:
            raise ValueError("Extension filtering requires an extension")
        matched = [entry for entry in entries if entry.extension == wanted]
        logger.debug("Extension %s matched %d of %d entries", wanted, len(matched), len(entries))
        return matched

    raise ValueError(f"Unknown filter mode: {mode}")

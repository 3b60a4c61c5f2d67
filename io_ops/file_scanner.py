"""
Directory listing and tree scanning.

This module lists the immediate children of a source directory for the
selection step, and walks staging trees to collect the files that go into
an archive.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from colored_logger import get_colored_logger
from .errors import NotFoundError

logger = get_colored_logger(__name__)

ENTRY_TYPE_FILE = "file"
ENTRY_TYPE_DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One immediate child of a listed directory.

    ``extension`` is the lowercased suffix with its leading dot, or None for
    directories and names without a suffix.
    """

    name: str
    is_directory: bool
    extension: Optional[str] = None

    @property
    def type(self) -> str:
        return ENTRY_TYPE_DIRECTORY if self.is_directory else ENTRY_TYPE_FILE

    def label(self) -> str:
        return f"{self.name} ({self.type})"


def extension_of(name: str) -> Optional[str]:
    """Lowercased suffix of a file name; dotfiles like ".env" have none."""
    _, ext = os.path.splitext(name)
    return ext.lower() or None


def list_directory(directory: str) -> List[DirectoryEntry]:
    """
    List the immediate children of ``directory`` in filesystem order.

    Symbolic links are reported as files and never followed.

    Raises:
        NotFoundError: if the directory is missing, not a directory or
            cannot be read.
    """
    try:
        with os.scandir(directory) as it:
            entries = []
            for dirent in it:
                is_dir = dirent.is_dir(follow_symlinks=False)
                entries.append(
                    DirectoryEntry(
                        name=dirent.name,
                        is_directory=is_dir,
                        extension=None if is_dir else extension_of(dirent.name),
                    )
                )
            return entries
    except FileNotFoundError as e:
        raise NotFoundError(f"Directory not found: {directory}", directory) from e
    except NotADirectoryError as e:
        raise NotFoundError(f"Not a directory: {directory}", directory) from e
    except PermissionError as e:
        raise NotFoundError(f"Directory not readable: {directory}", directory) from e
    except OSError as e:
        raise NotFoundError(
            f"Cannot read directory {directory}: {e.strerror or e}", directory
        ) from e


class FileStats:
    """Counters collected while scanning a tree."""

    def __init__(self):
        self.total_files = 0
        self.total_size = 0

    def add_file(self, file_size: int) -> None:
        self.total_files += 1
        self.total_size += file_size


def _raise_walk_error(error: OSError) -> None:
    raise error


class FileScanner:
    """Walks a directory tree and names every file relative to its root."""

    def generate_archive_name(self, file_path: Path, source_path: Path) -> str:
        """Entry name for ``file_path``: relative to the root, "/"-separated."""
        return file_path.relative_to(source_path).as_posix()

    def scan_directory(self, source_path: Path) -> Tuple[List[Tuple[Path, str]], FileStats]:
        """
        Collect ``(file_path, archive_name)`` pairs for every file under
        ``source_path``, sorted by archive name.

        Unreadable subdirectories raise instead of being skipped, so an
        archive never silently misses part of the tree.
        """
        files = []
        stats = FileStats()

        for dirpath, dirnames, filenames in os.walk(
            source_path, onerror=_raise_walk_error
        ):
            for filename in filenames:
                file_path = Path(dirpath) / filename
                files.append(
                    (file_path, self.generate_archive_name(file_path, source_path))
                )
                stats.add_file(file_path.stat(follow_symlinks=False).st_size)

        files.sort(key=lambda item: item[1])
        logger.debug(
            "Scanned %s: %d files, %d bytes",
            source_path,
            stats.total_files,
            stats.total_size,
        )
        return files, stats

    def measure(self, path: Path) -> int:
        """Total size in bytes of a file or of every file under a directory."""
        if not path.is_dir() or path.is_symlink():
            return path.lstat().st_size
        _, stats = self.scan_directory(path)
        return stats.total_size

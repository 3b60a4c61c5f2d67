"""
Path utilities for staging and archive operations.

This module derives the staging folder and archive paths from the
operator's folder name, and handles temporary archive files.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import psutil

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

DEFAULT_FOLDER_NAME = "shared-folder"
ARCHIVE_EXTENSION = "zip"


@dataclass(frozen=True)
class StagingPaths:
    """Where a run stages its copies and where the archive ends up."""

    source_dir: Path
    folder_name: str
    staging_dir: Path
    archive_file: Path

    def reserved_names(self) -> Tuple[str, str]:
        """Listing names that belong to the run itself and are never selectable."""
        return self.staging_dir.name, self.archive_file.name


class ArchivePathGenerator:
    """Validates folder names and builds the paths a run works with."""

    def sanitize_folder_name(self, folder_name: str) -> str:
        """
        Strip surrounding whitespace and reject names that are not a single
        path component.
        """
        name = (folder_name or "").strip()
        if not name:
            return DEFAULT_FOLDER_NAME

        if name in (".", "..") or "/" in name or (os.sep in name) or (
            os.altsep and os.altsep in name
        ):
            raise ValueError(f"Folder name must be a single path component: {name!r}")

        return name

    def ensure_extension(self, path: str) -> str:
        if not path.endswith(f".{ARCHIVE_EXTENSION}"):
            return f"{path}.{ARCHIVE_EXTENSION}"
        return path

    def generate_paths(self, source_dir, folder_name: str) -> StagingPaths:
        source_path = Path(source_dir)
        name = self.sanitize_folder_name(folder_name)
        return StagingPaths(
            source_dir=source_path,
            folder_name=name,
            staging_dir=source_path / name,
            archive_file=source_path / self.ensure_extension(name),
        )


def has_free_space(directory, required_bytes: int) -> Tuple[bool, int]:
    """
    Check whether the volume holding ``directory`` has ``required_bytes`` free.

    Returns:
        (enough, free_bytes)
    """
    free_bytes = psutil.disk_usage(str(directory)).free
    return free_bytes >= required_bytes, free_bytes


class TempFileManager:
    """Manages temporary file creation and cleanup."""

    @staticmethod
    def generate_temp_path(base_path: str, suffix: str = "tmp") -> str:
        return f"{base_path}.{suffix}.{os.getpid()}"

    @staticmethod
    def cleanup_temp_file(temp_path: str) -> None:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.debug("Failed to cleanup temp file %s: %s", temp_path, e)

    @staticmethod
    def atomic_move(src_path: str, dest_path: str) -> None:
        """Move ``src_path`` over ``dest_path``, replacing an existing file."""
        try:
            os.replace(src_path, dest_path)
        except OSError as e:
            logger.error("Failed to move %s to %s: %s", src_path, dest_path, e)
            raise

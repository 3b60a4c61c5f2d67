"""
ZIP archive creation for staging folders.

The creator packs every file below a directory into one archive whose entry
names are relative to that directory. The archive is written to a temporary
sibling, flushed to disk and only then moved to its final name, so a
returned path always points at a complete file.
"""

import os
import zipfile
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from colored_logger import get_colored_logger
from .errors import ArchiveError
from .file_scanner import FileScanner
from .path_utils import TempFileManager

logger = get_colored_logger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_COMPRESSION_LEVEL = 9


class ProgressReporter:
    """Decides when to emit progress so long runs report about 20 times."""

    def should_report_progress(self, current_index: int, total_files: int) -> bool:
        return (
            current_index % max(1, total_files // 20) == 0
            or current_index == total_files - 1
        )

    def report(
        self, progress_callback: Optional[ProgressCallback], current: int, total: int
    ) -> None:
        if progress_callback:
            progress_callback(current, total)


class ZipArchiveCreator:
    """Creates deflate-compressed ZIP archives of a directory's contents."""

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL):
        if not 0 <= compression_level <= 9:
            raise ValueError(
                f"ZIP compression level must be between 0 and 9, got {compression_level}"
            )
        self.compression_level = compression_level
        self.scanner = FileScanner()
        self.progress_reporter = ProgressReporter()

    def _create_zipfile_instance(self, fileobj) -> zipfile.ZipFile:
        return zipfile.ZipFile(
            fileobj,
            "w",
            zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
            allowZip64=True,
        )

    def _write_entries(
        self,
        fileobj,
        files: List[Tuple[Path, str]],
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        with self._create_zipfile_instance(fileobj) as zipf:
            for i, (file_path, archive_name) in enumerate(files):
                zipf.write(file_path, archive_name)
                logger.debug("Added %s", archive_name)

                if self.progress_reporter.should_report_progress(i, len(files)):
                    self.progress_reporter.report(progress_callback, i + 1, len(files))

    def create_archive(
        self,
        source_dir,
        out_file,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Pack every file under ``source_dir`` into ``out_file``.

        ``source_dir`` itself is not part of any entry name. The call returns
        once the archive has been closed, fsync-ed and renamed into place.

        Returns:
            Size of the finished archive in bytes.

        Raises:
            ArchiveError: if the source cannot be read or the archive cannot
                be written. ``out_file`` must then be treated as unusable.
        """
        source_path = Path(source_dir)
        out_path = str(out_file)

        if not source_path.is_dir():
            raise ArchiveError(f"Source directory not found: {source_path}")

        try:
            files, stats = self.scanner.scan_directory(source_path)
        except OSError as e:
            raise ArchiveError(f"Cannot read {source_path}: {e}") from e

        logger.debug(
            "Packing %d files (%d bytes) from %s",
            stats.total_files,
            stats.total_size,
            source_path,
        )

        temp_path = TempFileManager.generate_temp_path(out_path)
        try:
            with open(temp_path, "wb") as fileobj:
                self._write_entries(fileobj, files, progress_callback)
                fileobj.flush()
                os.fsync(fileobj.fileno())
            TempFileManager.atomic_move(temp_path, out_path)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            TempFileManager.cleanup_temp_file(temp_path)
            raise ArchiveError(f"Cannot write archive {out_path}: {e}") from e

        byte_count = os.path.getsize(out_path)
        logger.info("Zipped %d total bytes.", byte_count)
        return byte_count


def zip_directory(
    source_dir,
    out_file,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """Convenience wrapper around ZipArchiveCreator.create_archive."""
    creator = ZipArchiveCreator(compression_level)
    return creator.create_archive(source_dir, out_file, progress_callback)

"""
Archive integrity verification.

Used after a staging folder has been packed: the archive is re-opened, every
member's CRC is checked and the entry names are compared with the files
that were staged.
"""

import zipfile
from typing import Any, Dict, Iterable, List
from colored_logger import get_colored_logger
from .errors import ArchiveError

logger = get_colored_logger(__name__)


class ZipArchiveVerifier:
    """Verifies ZIP archive integrity."""

    def list_entries(self, archive_path: str) -> List[str]:
        """Names of the file entries in the archive, directory entries excluded."""
        try:
            with zipfile.ZipFile(archive_path, "r") as zipf:
                return [info.filename for info in zipf.infolist() if not info.is_dir()]
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Cannot read archive {archive_path}: {e}") from e

    def verify_integrity(self, archive_path: str) -> bool:
        """Return True when every member decompresses with a matching CRC."""
        try:
            with zipfile.ZipFile(archive_path, "r") as zipf:
                bad_file = zipf.testzip()
                if bad_file is not None:
                    logger.debug("ZIP integrity check failed on file: %s", bad_file)
                    return False
                return True
        except (OSError, zipfile.BadZipFile) as e:
            logger.debug("ZIP integrity verification failed: %s", e)
            return False

    def verify_contents(self, archive_path: str, expected_names: Iterable[str]) -> None:
        """
        Check integrity and that the archive holds exactly ``expected_names``.

        Raises:
            ArchiveError: describing the first problem found.
        """
        if not self.verify_integrity(archive_path):
            raise ArchiveError(f"Archive failed integrity check: {archive_path}")

        actual = set(self.list_entries(archive_path))
        expected = set(expected_names)
        missing = sorted(expected - actual)
        unexpected = sorted(actual - expected)
        if missing or unexpected:
            raise ArchiveError(
                f"Archive {archive_path} does not match staged files "
                f"(missing: {missing[:5]}, unexpected: {unexpected[:5]})"
            )

    def get_archive_info(self, archive_path: str) -> Dict[str, Any]:
        """Entry count and sizes of a ZIP archive."""
        try:
            with zipfile.ZipFile(archive_path, "r") as zipf:
                file_list = zipf.infolist()
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Cannot read archive {archive_path}: {e}") from e

        compressed = sum(f.compress_size for f in file_list)
        uncompressed = sum(f.file_size for f in file_list)
        return {
            "file_count": len(file_list),
            "compressed_size": compressed,
            "uncompressed_size": uncompressed,
            "compression_ratio": (
                (1 - compressed / uncompressed) * 100 if uncompressed > 0 else 0
            ),
        }

from .errors import (
    StashError,
    NotFoundError,
    FileOperationError,
    ArchiveError,
    EmptyResultError,
)
from .file_scanner import (
    DirectoryEntry,
    FileScanner,
    FileStats,
    extension_of,
    list_directory,
)
from .file_manager import FileManager, copy_path, remove_path
from .path_utils import (
    DEFAULT_FOLDER_NAME,
    ArchivePathGenerator,
    StagingPaths,
    TempFileManager,
    has_free_space,
)
from .archive_creators import ZipArchiveCreator, ProgressReporter, zip_directory
from .archive_verifier import ZipArchiveVerifier

__all__ = [
    # Errors
    "StashError",
    "NotFoundError",
    "FileOperationError",
    "ArchiveError",
    "EmptyResultError",
    # Listing and scanning
    "DirectoryEntry",
    "FileScanner",
    "FileStats",
    "extension_of",
    "list_directory",
    # Copy and remove
    "FileManager",
    "copy_path",
    "remove_path",
    # Paths
    "DEFAULT_FOLDER_NAME",
    "ArchivePathGenerator",
    "StagingPaths",
    "TempFileManager",
    "has_free_space",
    # Archives
    "ZipArchiveCreator",
    "ProgressReporter",
    "zip_directory",
    "ZipArchiveVerifier",
]

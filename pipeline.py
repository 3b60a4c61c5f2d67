"""
Selective staging-and-archive pipeline.

A run lists a source directory, lets the operator narrow and pick entries,
copies the picks into a staging folder, zips that folder next to it, then
removes the staging folder and the picked originals. Every item is attempted
independently: one failure is logged and recorded, never fatal to the rest.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from colored_logger import get_colored_logger
from filters import MODE_ALL, distinct_extensions, filter_by_mode
from io_ops.archive_creators import ZipArchiveCreator
from io_ops.archive_verifier import ZipArchiveVerifier
from io_ops.errors import EmptyResultError, FileOperationError, NotFoundError, StashError
from io_ops.file_manager import FileManager
from io_ops.file_scanner import DirectoryEntry, FileScanner, list_directory
from io_ops.path_utils import ArchivePathGenerator, StagingPaths, has_free_space

logger = get_colored_logger(__name__)

# Pipeline states
INIT = "INIT"
ENUMERATE = "ENUMERATE"
FILTER = "FILTER"
AWAIT_SELECTION = "AWAIT_SELECTION"
STAGE = "STAGE"
ARCHIVE = "ARCHIVE"
CLEAN_STAGING = "CLEAN_STAGING"
DELETE_ORIGINALS = "DELETE_ORIGINALS"
DONE = "DONE"

# Early exits, all reached before anything is copied
NO_SOURCE = "NO_SOURCE"
EMPTY_LISTING = "EMPTY_LISTING"
EMPTY_FILTER = "EMPTY_FILTER"
EMPTY_SELECTION = "EMPTY_SELECTION"
STAGING_UNAVAILABLE = "STAGING_UNAVAILABLE"

EARLY_EXIT_STATES = (
    NO_SOURCE,
    EMPTY_LISTING,
    EMPTY_FILTER,
    EMPTY_SELECTION,
    STAGING_UNAVAILABLE,
)

# Early exits that mean the run could not do what was asked
FAILED_STATES = (NO_SOURCE, STAGING_UNAVAILABLE)


class Selector(Protocol):
    """The operator-facing side of a run."""

    def choose_filter(
        self, entries: Sequence[DirectoryEntry], extensions: Sequence[str]
    ) -> Tuple[str, Optional[str]]:
        """Return (mode, extension); extension only matters for "extension"."""
        ...

    def choose_items(
        self, entries: Sequence[DirectoryEntry], folder_name: str, source_dir: Path
    ) -> List[str]:
        """Return the names to archive, in the order they should be handled."""
        ...

    def confirm(self, message: str) -> bool:
        ...


@dataclass
class StageOutcome:
    stage: str
    item: str
    ok: bool
    message: str = ""


@dataclass
class RunReport:
    """What a run did, item by item."""

    state: str
    source_dir: Path
    folder_name: str
    selected: List[str] = field(default_factory=list)
    archive_file: Optional[Path] = None
    archive_bytes: Optional[int] = None
    outcomes: List[StageOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[StageOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def outcomes_for(self, stage: str) -> List[StageOutcome]:
        return [outcome for outcome in self.outcomes if outcome.stage == stage]

    def stage_succeeded(self, stage: str) -> bool:
        outcomes = self.outcomes_for(stage)
        return bool(outcomes) and all(outcome.ok for outcome in outcomes)

    @property
    def early_exit(self) -> bool:
        return self.state in EARLY_EXIT_STATES


@dataclass
class PipelineOptions:
    compression_level: int = 9
    verify_archive: bool = True
    keep_originals_on_archive_failure: bool = False
    check_free_space: bool = True
    confirm_before_delete: bool = False
    dry_run: bool = False

    @classmethod
    def from_settings(
        cls, settings, dry_run: bool = False, assume_yes: bool = False
    ) -> "PipelineOptions":
        return cls(
            compression_level=settings.compression_level,
            verify_archive=settings.verify_archive,
            keep_originals_on_archive_failure=settings.keep_originals_on_archive_failure,
            check_free_space=settings.check_free_space,
            confirm_before_delete=settings.confirm_before_delete and not assume_yes,
            dry_run=dry_run,
        )


def _log_archive_progress(current: int, total: int) -> None:
    logger.progress(
        "Archiving progress: %d/%d files (%.1f%%)", current, total, current / total * 100
    )


class StashPipeline:
    """
    Runs one selection-to-archive pass over ``source_dir``.

    The source directory and folder name are passed in rather than read from
    the process, so a run needs no working-directory setup.
    """

    def __init__(
        self,
        source_dir,
        folder_name: str,
        selector: Selector,
        options: Optional[PipelineOptions] = None,
        archive_creator: Optional[ZipArchiveCreator] = None,
        verifier: Optional[ZipArchiveVerifier] = None,
    ):
        self.options = options or PipelineOptions()
        self.paths: StagingPaths = ArchivePathGenerator().generate_paths(
            Path(source_dir).resolve(), folder_name
        )
        self.selector = selector
        self.archive_creator = archive_creator or ZipArchiveCreator(
            self.options.compression_level
        )
        self.verifier = verifier or ZipArchiveVerifier()
        self.scanner = FileScanner()
        self.state = INIT
        self.report = RunReport(
            state=INIT,
            source_dir=self.paths.source_dir,
            folder_name=self.paths.folder_name,
        )

    def _enter(self, state: str) -> None:
        logger.debug("Pipeline state %s -> %s", self.state, state)
        self.state = state
        self.report.state = state

    def _record(self, stage: str, item: str, ok: bool, message: str = "") -> None:
        self.report.outcomes.append(StageOutcome(stage, item, ok, message))

    # Selection -------------------------------------------------------------

    def _enumerate(self) -> List[DirectoryEntry]:
        self._enter(ENUMERATE)
        source_dir = self.paths.source_dir
        if not source_dir.is_dir():
            raise NotFoundError(f"Directory {source_dir} does not exist.", str(source_dir))

        reserved = self.paths.reserved_names()
        entries = [
            entry for entry in list_directory(str(source_dir)) if entry.name not in reserved
        ]
        if not entries:
            raise EmptyResultError(
                "No files or directories found to select from.", EMPTY_LISTING
            )
        logger.debug("Found %d entries in %s", len(entries), source_dir)
        return entries

    def _filter(self, entries: List[DirectoryEntry]) -> List[DirectoryEntry]:
        self._enter(FILTER)
        mode, extension = self.selector.choose_filter(
            entries, distinct_extensions(entries)
        )
        try:
            filtered = filter_by_mode(entries, mode or MODE_ALL, extension)
        except ValueError as e:
            logger.warning("%s", e)
            filtered = []
        if not filtered:
            raise EmptyResultError("No items match your filter criteria.", EMPTY_FILTER)
        return filtered

    def _select(self, entries: List[DirectoryEntry]) -> List[str]:
        self._enter(AWAIT_SELECTION)
        offered = {entry.name for entry in entries}
        chosen = self.selector.choose_items(
            entries, self.paths.folder_name, self.paths.source_dir
        )

        selected: List[str] = []
        for name in chosen or []:
            if name not in offered:
                logger.warning("Ignoring unknown selection: %s", name)
            elif name not in selected:
                selected.append(name)

        if not selected:
            raise EmptyResultError("No items selected. Exiting...", EMPTY_SELECTION)

        if self.options.confirm_before_delete and not self.options.dry_run:
            question = (
                f"Archive {len(selected)} item(s) into {self.paths.archive_file.name} "
                f"and delete the originals?"
            )
            if not self.selector.confirm(question):
                raise EmptyResultError("Cancelled. Nothing was changed.", EMPTY_SELECTION)

        return selected

    # Checks ----------------------------------------------------------------

    def _staging_is_usable(self) -> bool:
        staging_dir = self.paths.staging_dir
        return staging_dir.is_dir() and not staging_dir.is_symlink()

    def _preflight(self, selected: List[str]) -> None:
        """
        Raises:
            FileOperationError: if something other than a real directory
                already sits at the staging folder's path.
        """
        staging_dir = self.paths.staging_dir
        if os.path.lexists(staging_dir) and not self._staging_is_usable():
            raise FileOperationError(
                f"{staging_dir} already exists and is not a directory; "
                f"choose another folder name.",
                str(staging_dir),
            )
        if self._staging_is_usable():
            logger.notice(
                "%s already exists; its current contents will be archived and removed too.",
                self.paths.staging_dir,
            )
        if self.paths.archive_file.exists():
            logger.notice("%s already exists and will be replaced.", self.paths.archive_file)

        if not self.options.check_free_space:
            return

        required = 0
        for name in selected:
            try:
                required += self.scanner.measure(self.paths.source_dir / name)
            except OSError as e:
                logger.debug("Cannot measure %s: %s", name, e)

        # Staged copy plus an archive that may not compress at all
        required *= 2
        try:
            enough, free_bytes = has_free_space(self.paths.source_dir, required)
        except OSError as e:
            logger.debug("Cannot read free space for %s: %s", self.paths.source_dir, e)
            return
        if not enough:
            logger.warning(
                "Only %.1f MB free but up to %.1f MB may be needed for staging and archiving.",
                free_bytes / (1024 * 1024),
                required / (1024 * 1024),
            )

    def _log_plan(self, selected: List[str]) -> None:
        logger.notice("Dry run: nothing will be changed.")
        for name in selected:
            logger.info("Would copy %s to %s", name, self.paths.staging_dir)
        logger.info("Would create %s", self.paths.archive_file)
        logger.info("Would remove %s", self.paths.staging_dir)
        for name in selected:
            logger.info("Would delete %s", self.paths.source_dir / name)

    # Stages ----------------------------------------------------------------

    def _stage(self, selected: List[str]) -> None:
        """
        Copy each selected item into the staging folder.

        Raises:
            FileOperationError: if the staging folder cannot be created. No
                item has been copied at that point.
        """
        self._enter(STAGE)
        logger.progress("Moving selected items to %s...", self.paths.folder_name)

        FileManager.ensure_dir_exists(self.paths.staging_dir)

        for name in selected:
            try:
                FileManager.copy_path(
                    self.paths.source_dir / name, self.paths.staging_dir / name
                )
                logger.success("Copied: %s", name)
                self._record(STAGE, name, True)
            except (StashError, OSError) as e:
                logger.failure("Failed to copy %s: %s", name, e)
                self._record(STAGE, name, False, str(e))

    def _archive(self) -> None:
        self._enter(ARCHIVE)
        folder_name = self.paths.folder_name
        archive_file = self.paths.archive_file
        logger.progress("Zipping the %s...", folder_name)

        try:
            byte_count = self.archive_creator.create_archive(
                self.paths.staging_dir, archive_file, _log_archive_progress
            )
            if self.options.verify_archive:
                staged, _ = self.scanner.scan_directory(self.paths.staging_dir)
                self.verifier.verify_contents(
                    str(archive_file), [archive_name for _, archive_name in staged]
                )
                logger.debug("Archive contents verified")
            info = self.verifier.get_archive_info(str(archive_file))
            self.report.archive_file = archive_file
            self.report.archive_bytes = byte_count
            logger.success(
                "Zipped successfully: %s (%d files, %.1f%% smaller)",
                archive_file,
                info["file_count"],
                info["compression_ratio"],
            )
            self._record(ARCHIVE, archive_file.name, True)
        except (StashError, OSError) as e:
            logger.failure("Failed to zip the %s: %s", folder_name, e)
            self._record(ARCHIVE, archive_file.name, False, str(e))

    def _clean_staging(self) -> None:
        self._enter(CLEAN_STAGING)
        folder_name = self.paths.folder_name
        logger.progress("Cleaning up %s...", folder_name)

        if not self._staging_is_usable():
            message = f"{self.paths.staging_dir} is no longer a directory; left in place"
            logger.failure("Failed to clean up %s: %s", folder_name, message)
            self._record(CLEAN_STAGING, folder_name, False, message)
            return

        try:
            FileManager.remove_path(self.paths.staging_dir)
            logger.success("%s cleaned up.", folder_name)
            self._record(CLEAN_STAGING, folder_name, True)
        except (StashError, OSError) as e:
            logger.failure("Failed to clean up %s: %s", folder_name, e)
            self._record(CLEAN_STAGING, folder_name, False, str(e))

    def _delete_originals(self, selected: List[str]) -> None:
        self._enter(DELETE_ORIGINALS)

        if self.options.keep_originals_on_archive_failure and not self.report.stage_succeeded(
            ARCHIVE
        ):
            logger.notice("Archive was not created; keeping the original selected items.")
            return

        logger.progress("Deleting original selected items...")
        for name in selected:
            try:
                FileManager.remove_path(self.paths.source_dir / name)
                logger.success("Deleted: %s", name)
                self._record(DELETE_ORIGINALS, name, True)
            except (StashError, OSError) as e:
                logger.failure("Failed to delete %s: %s", name, e)
                self._record(DELETE_ORIGINALS, name, False, str(e))

    def _summarize(self) -> None:
        failures = self.report.failures
        logger.notice(
            "Done! %d action(s) succeeded, %d failed.",
            len(self.report.outcomes) - len(failures),
            len(failures),
        )
        for outcome in failures:
            logger.debug("  %s %s: %s", outcome.stage, outcome.item, outcome.message)

    # Entry -----------------------------------------------------------------

    def run(self) -> RunReport:
        """
        Drive the run to DONE or to one of the early-exit states.

        A run ends early during selection, or when the staging folder cannot
        be used or created. Nothing has been copied or deleted at either
        point. Once copying starts, every later stage is attempted.
        """
        try:
            entries = self._enumerate()
            filtered = self._filter(entries)
            selected = self._select(filtered)
        except NotFoundError as e:
            logger.error("Error: %s", e)
            self._enter(NO_SOURCE)
            return self.report
        except EmptyResultError as e:
            logger.info("%s", e)
            self._enter(e.state)
            return self.report

        self.report.selected = selected
        try:
            self._preflight(selected)
            if self.options.dry_run:
                self._log_plan(selected)
                self._enter(DONE)
                return self.report
            self._stage(selected)
        except FileOperationError as e:
            logger.error("Error: %s", e)
            self._enter(STAGING_UNAVAILABLE)
            return self.report

        self._archive()
        self._clean_staging()
        self._delete_originals(selected)

        self._enter(DONE)
        self._summarize()
        return self.report


def run_pipeline(
    source_dir,
    folder_name: str,
    selector: Selector,
    options: Optional[PipelineOptions] = None,
) -> RunReport:
    return StashPipeline(source_dir, folder_name, selector, options).run()


def resolve_source_dir(argument: Optional[str]) -> Path:
    """The source directory a run works on: the argument, or the working directory."""
    return Path(argument).expanduser().resolve() if argument else Path(os.getcwd()).resolve()

import os
import shutil
from pathlib import Path
from typing import Iterator, List, Tuple, Union
from colored_logger import get_colored_logger
from .errors import FileOperationError, NotFoundError

logger = get_colored_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _children(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return list(it)


def _describe(error: OSError) -> str:
    return error.strerror or str(error)


class FileManager:
    @staticmethod
    def ensure_dir_exists(directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(
                f"Cannot create directory {directory}: {_describe(e)}", str(directory)
            ) from e

    @staticmethod
    def copy_file(src: Path, dest: Path) -> None:
        """Copy the bytes of ``src`` to ``dest``, replacing ``dest`` if present."""
        try:
            shutil.copyfile(src, dest)
        except OSError as e:
            raise FileOperationError(
                f"Cannot copy {src}: {_describe(e)}", str(src)
            ) from e

    @staticmethod
    def copy_path(src: PathLike, dest: PathLike) -> None:
        """
        Materialize ``src`` (a file or a directory tree) at ``dest``.

        Directories are created, with any missing ancestors, before their
        children are copied. Children are handled in listing order. A failure
        part-way leaves ``dest`` partially populated; ``src`` is never
        modified.

        Raises:
            NotFoundError: if ``src`` does not exist.
            FileOperationError: naming the path that could not be copied.
        """
        src, dest = Path(src), Path(dest)
        if not os.path.lexists(src):
            raise NotFoundError(f"Source not found: {src}", str(src))

        if not src.is_dir() or src.is_symlink():
            FileManager.copy_file(src, dest)
            return

        FileManager.ensure_dir_exists(dest)
        stack: List[Tuple[Path, Path, Iterator[os.DirEntry]]] = [
            (src, dest, iter(FileManager._list(src)))
        ]
        while stack:
            src_dir, dest_dir, remaining = stack[-1]
            child = next(remaining, None)
            if child is None:
                stack.pop()
                continue

            child_src = src_dir / child.name
            child_dest = dest_dir / child.name
            if child.is_dir(follow_symlinks=False):
                FileManager.ensure_dir_exists(child_dest)
                stack.append((child_src, child_dest, iter(FileManager._list(child_src))))
            else:
                FileManager.copy_file(child_src, child_dest)

        logger.debug("Copied tree %s -> %s", src, dest)

    @staticmethod
    def remove_path(path: PathLike) -> None:
        """
        Delete a file, or a directory tree depth-first.

        A directory is removed only once all of its children are gone. The
        first child that cannot be removed stops the walk, so no ancestor of
        a surviving child is ever touched.

        Raises:
            NotFoundError: if ``path`` does not exist.
            FileOperationError: naming the path that could not be removed.
        """
        path = Path(path)
        if not os.path.lexists(path):
            raise NotFoundError(f"Path not found: {path}", str(path))

        if not path.is_dir() or path.is_symlink():
            FileManager._unlink(path)
            return

        stack: List[Tuple[Path, Iterator[os.DirEntry]]] = [
            (path, iter(FileManager._list(path)))
        ]
        while stack:
            directory, remaining = stack[-1]
            child = next(remaining, None)
            if child is None:
                FileManager._rmdir(directory)
                stack.pop()
                continue

            child_path = directory / child.name
            if child.is_dir(follow_symlinks=False):
                stack.append((child_path, iter(FileManager._list(child_path))))
            else:
                FileManager._unlink(child_path)

        logger.debug("Removed tree %s", path)

    @staticmethod
    def _list(directory: Path) -> List[os.DirEntry]:
        try:
            return _children(directory)
        except OSError as e:
            raise FileOperationError(
                f"Cannot read directory {directory}: {_describe(e)}", str(directory)
            ) from e

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            os.unlink(path)
        except OSError as e:
            raise FileOperationError(
                f"Cannot remove {path}: {_describe(e)}", str(path)
            ) from e

    @staticmethod
    def _rmdir(directory: Path) -> None:
        try:
            os.rmdir(directory)
        except OSError as e:
            raise FileOperationError(
                f"Cannot remove directory {directory}: {_describe(e)}", str(directory)
            ) from e


def copy_path(src: PathLike, dest: PathLike) -> None:
    FileManager.copy_path(src, dest)


def remove_path(path: PathLike) -> None:
    FileManager.remove_path(path)

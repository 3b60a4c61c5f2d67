"""
Tests for recursive copy and recursive remove.
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from io_ops import FileManager, FileOperationError, NotFoundError, copy_path, remove_path
from test_utils import TempDirTestCase, running_as_root


class TestCopyPath(TempDirTestCase):
    def setUp(self):
        super().setUp()
        self.src = self.root / "src"
        self.make_tree(
            {
                "a.txt": "alpha",
                "sub/b.txt": "beta",
                "sub/deeper/c.bin": "gamma",
                "empty/": "",
            },
            base=self.src,
        )

    def test_copies_directory_tree(self):
        dest = self.root / "out" / "nested" / "copy"

        copy_path(self.src, dest)

        self.assertEqual(self.read_tree(dest), self.read_tree(self.src))
        self.assertTrue((dest / "empty").is_dir())

    def test_copies_single_file_and_overwrites(self):
        dest = self.root / "copy.txt"
        dest.write_text("old content that is longer", encoding="utf-8")

        copy_path(self.src / "a.txt", dest)

        self.assertEqual(dest.read_text(encoding="utf-8"), "alpha")

    def test_copying_twice_is_idempotent(self):
        dest = self.root / "copy"

        copy_path(self.src, dest)
        (self.src / "a.txt").write_text("alpha v2", encoding="utf-8")
        copy_path(self.src, dest)

        self.assertEqual(self.read_tree(dest), self.read_tree(self.src))

    def test_source_is_never_modified(self):
        before = self.read_tree(self.src)

        copy_path(self.src, self.root / "copy")

        self.assertEqual(self.read_tree(self.src), before)

    def test_missing_source_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            copy_path(self.root / "missing", self.root / "copy")

    def test_failure_names_the_path_and_leaves_partial_copy(self):
        dest = self.root / "copy"
        failing = self.src / "sub" / "b.txt"
        real_copy = FileManager.copy_file

        def flaky_copy(src, target):
            if Path(src) == failing:
                raise FileOperationError(f"Cannot copy {src}: Permission denied", str(src))
            real_copy(src, target)

        with patch.object(FileManager, "copy_file", side_effect=flaky_copy):
            with self.assertRaises(FileOperationError) as ctx:
                copy_path(self.src, dest)

        self.assertEqual(ctx.exception.path, str(failing))
        self.assertTrue(dest.is_dir())

    @unittest.skipIf(running_as_root(), "root can read files without permission")
    def test_unreadable_file_raises_file_operation_error(self):
        secret = self.src / "a.txt"
        os.chmod(secret, 0)

        with self.assertRaises(FileOperationError) as ctx:
            copy_path(secret, self.root / "copy.txt")

        self.assertIn("a.txt", str(ctx.exception))
        self.assertIsInstance(ctx.exception, OSError)


class TestRemovePath(TempDirTestCase):
    def test_removes_directory_tree(self):
        target = self.make_tree(
            {"a.txt": "a", "sub/b.txt": "b", "sub/deeper/c.txt": "c", "e/": ""},
            base=self.root / "victim",
        )

        remove_path(target)

        self.assertFalse(target.exists())

    def test_removes_single_file(self):
        self.make_tree({"a.txt": "a", "b.txt": "b"})

        remove_path(self.root / "a.txt")

        self.assertFalse((self.root / "a.txt").exists())
        self.assertTrue((self.root / "b.txt").exists())

    def test_absent_path_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            remove_path(self.root / "never-existed")

    def test_second_remove_raises_not_found(self):
        self.make_tree({"a.txt": "a"})
        remove_path(self.root / "a.txt")

        with self.assertRaises(NotFoundError):
            remove_path(self.root / "a.txt")

    def test_parent_survives_when_child_cannot_be_removed(self):
        target = self.make_tree(
            {"keep/stuck.txt": "s", "keep/other.txt": "o"}, base=self.root / "victim"
        )
        stuck = target / "keep" / "stuck.txt"
        real_unlink = os.unlink

        def flaky_unlink(path, *args, **kwargs):
            if Path(path) == stuck:
                raise PermissionError(13, "Permission denied", str(path))
            real_unlink(path, *args, **kwargs)

        with patch("io_ops.file_manager.os.unlink", side_effect=flaky_unlink):
            with self.assertRaises(FileOperationError) as ctx:
                remove_path(target)

        self.assertEqual(ctx.exception.path, str(stuck))
        self.assertTrue(stuck.exists())
        self.assertTrue((target / "keep").is_dir())
        self.assertTrue(target.is_dir())

    @unittest.skipIf(running_as_root(), "root ignores directory permissions")
    def test_read_only_directory_blocks_removal(self):
        target = self.make_tree({"locked/inner.txt": "i"}, base=self.root / "victim")
        os.chmod(target / "locked", 0o500)

        with self.assertRaises(FileOperationError):
            remove_path(target)

        self.assertTrue((target / "locked" / "inner.txt").exists())
        self.assertTrue(target.exists())

    def test_symlink_is_removed_not_followed(self):
        outside = self.make_tree({"precious.txt": "p"}, base=self.root / "outside")
        victim = self.root / "victim"
        victim.mkdir()
        try:
            os.symlink(outside, victim / "link", target_is_directory=True)
        except (OSError, NotImplementedError):
            self.skipTest("symlinks not supported")

        remove_path(victim)

        self.assertFalse(victim.exists())
        self.assertTrue((outside / "precious.txt").exists())


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from jsonconfig import LocalFileStore


class LocalFileStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp_dir.name)
        self.files = LocalFileStore()

    def tearDown(self) -> None:
        self.tmp_dir.cleanup()

    def test_write_is_atomic_and_readable(self) -> None:
        path = self.root / "a" / "b" / "config.json"
        self.files.ensure_parent_dir(path)
        self.files.write_text(path, '{"x": 1}')
        self.files.write_text(path, '{"x": 2}')
        self.assertEqual(self.files.read_text(path), '{"x": 2}')
        self.assertEqual(sorted(p.name for p in path.parent.iterdir()), ["config.json"])

    def test_exists_only_for_files(self) -> None:
        self.assertFalse(self.files.exists(self.root))
        path = self.root / "config.json"
        self.assertFalse(self.files.exists(path))
        path.write_text("{}", encoding="utf-8")
        self.assertTrue(self.files.exists(path))

    def test_delete_tolerates_missing_file(self) -> None:
        path = self.root / "config.json"
        path.write_text("{}", encoding="utf-8")
        self.files.delete(path)
        self.files.delete(path)
        self.assertFalse(path.exists())

    def test_failed_write_leaves_no_temp_file(self) -> None:
        target = self.root / "target"
        target.mkdir()
        (target / "keep.txt").write_text("x", encoding="utf-8")
        with self.assertRaises(OSError):
            self.files.write_text(target, "{}")
        self.assertFalse((self.root / "target.tmp").exists())


if __name__ == "__main__":
    unittest.main()

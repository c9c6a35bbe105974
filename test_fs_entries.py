"""
Tests for fs_entries.py
"""

import os
import shutil
import stat
import tempfile
import unittest
from pathlib import Path

from fs_entries import LocalEntry, as_entry


class TestLocalEntry(unittest.TestCase):
    """Tests for LocalEntry against a temporary directory."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.dir_path = self.test_dir / 'dir'
        self.dir_path.mkdir()
        self.file_path = self.dir_path / 'file.txt'
        self.file_path.write_text('data')

    def tearDown(self):
        """Clean up test fixtures."""
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def _symlink(self, target, link, is_dir):
        try:
            os.symlink(target, link, target_is_directory=is_dir)
        except (OSError, NotImplementedError) as e:
            self.skipTest(f"symlinks not available: {e}")

    def test_kinds(self):
        self.assertTrue(LocalEntry(self.dir_path).is_directory())
        self.assertFalse(LocalEntry(self.dir_path).is_link())
        self.assertFalse(LocalEntry(self.file_path).is_directory())
        self.assertFalse(LocalEntry(self.test_dir / 'missing').exists())
        self.assertFalse(LocalEntry(self.test_dir / 'missing').is_link())

    def test_children(self):
        names = sorted(child.path.name for child in LocalEntry(self.dir_path).children())
        self.assertEqual(names, ['file.txt'])

    def test_directory_link(self):
        link = self.test_dir / 'link'
        self._symlink(self.dir_path, link, True)
        entry = LocalEntry(link)
        self.assertTrue(entry.is_link())
        self.assertFalse(entry.is_directory())
        entry.delete()
        self.assertFalse(os.path.lexists(link))
        self.assertTrue(self.file_path.exists())

    def test_dangling_link_exists(self):
        link = self.test_dir / 'dangling'
        self._symlink(self.test_dir / 'nowhere', link, False)
        self.assertTrue(LocalEntry(link).exists())

    def test_reset_attributes(self):
        os.chmod(self.file_path, stat.S_IREAD)
        LocalEntry(self.file_path).reset_attributes()
        self.assertTrue(stat.S_IMODE(self.file_path.stat().st_mode) & stat.S_IWRITE)

    def test_unlock_children(self):
        os.chmod(self.dir_path, stat.S_IREAD | stat.S_IEXEC)
        LocalEntry(self.dir_path).unlock_children()
        mode = stat.S_IMODE(self.dir_path.stat().st_mode)
        self.assertEqual(mode & stat.S_IRWXU, stat.S_IRWXU)

    def test_reset_missing_raises_not_found(self):
        with self.assertRaises(FileNotFoundError):
            LocalEntry(self.test_dir / 'missing').reset_attributes()

    def test_delete_file_and_directory(self):
        LocalEntry(self.file_path).delete()
        self.assertFalse(self.file_path.exists())
        LocalEntry(self.dir_path).delete()
        self.assertFalse(self.dir_path.exists())

    def test_delete_non_empty_directory_fails(self):
        with self.assertRaises(OSError):
            LocalEntry(self.dir_path).delete()

    def test_as_entry(self):
        entry = LocalEntry(self.file_path)
        self.assertIs(as_entry(entry), entry)
        self.assertEqual(as_entry(str(self.file_path)).path, self.file_path)
        with self.assertRaises(ValueError):
            as_entry(None)


if __name__ == '__main__':
    unittest.main()

"""
File system entries used by the recursive deleter.

``FileSystemEntry`` is the capability the deleter works against: existence,
kind, children, attribute reset and self-delete. ``LocalEntry`` implements
it on top of the real file system; tests can substitute their own entries.
Nothing is cached, every query goes to the platform.
"""

import os
import stat
from pathlib import Path
from typing import List, Union

FILE_ATTRIBUTE_REPARSE_POINT = getattr(stat, 'FILE_ATTRIBUTE_REPARSE_POINT', 0x400)


class FileSystemEntry:
    """A file, directory or link identified by a path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self):
        return f"{type(self).__name__}({str(self.path)!r})"

    def exists(self) -> bool:
        raise NotImplementedError

    def is_directory(self) -> bool:
        """True for real directories; links to directories are links."""
        raise NotImplementedError

    def is_link(self) -> bool:
        """True for symlinks, junctions and other reparse points."""
        raise NotImplementedError

    def children(self) -> List['FileSystemEntry']:
        raise NotImplementedError

    def unlock_children(self) -> None:
        """Allow the children of a directory to be listed and removed."""

    def reset_attributes(self) -> None:
        """Clear attributes that could block deletion (read-only)."""
        raise NotImplementedError

    def delete(self) -> None:
        """Delete this entry only. Directories must already be empty."""
        raise NotImplementedError


class LocalEntry(FileSystemEntry):
    """Entry on the local platform file system."""

    def exists(self) -> bool:
        # lexists: a dangling link still exists as an entry
        return os.path.lexists(self.path)

    def is_link(self) -> bool:
        if self.path.is_symlink():
            return True
        is_junction = getattr(self.path, 'is_junction', None)
        if is_junction is not None and is_junction():
            return True
        try:
            attributes = getattr(os.lstat(self.path), 'st_file_attributes', 0)
        except FileNotFoundError:
            return False
        return bool(attributes & FILE_ATTRIBUTE_REPARSE_POINT)

    def is_directory(self) -> bool:
        return self.path.is_dir() and not self.is_link()

    def children(self) -> List['LocalEntry']:
        with os.scandir(self.path) as it:
            return [LocalEntry(entry.path) for entry in it]

    def unlock_children(self) -> None:
        # Removing a child needs write and search permission on its parent
        mode = stat.S_IMODE(os.stat(self.path).st_mode)
        if mode & stat.S_IRWXU != stat.S_IRWXU:
            os.chmod(self.path, mode | stat.S_IRWXU)

    def reset_attributes(self) -> None:
        if self.is_link():
            # chmod would follow the link to its target
            return
        mode = stat.S_IMODE(os.stat(self.path).st_mode)
        if self.is_directory():
            new_mode = mode | stat.S_IRWXU
        else:
            new_mode = mode | stat.S_IWRITE
        if new_mode != mode:
            os.chmod(self.path, new_mode)

    def delete(self) -> None:
        if self.is_link():
            try:
                os.unlink(self.path)
            except (IsADirectoryError, PermissionError):
                # Windows directory symlinks and junctions are removed with rmdir
                if not os.path.isdir(self.path):
                    raise
                os.rmdir(self.path)
        elif self.path.is_dir():
            os.rmdir(self.path)
        else:
            os.unlink(self.path)


def as_entry(target: Union[str, Path, FileSystemEntry]) -> FileSystemEntry:
    """Accept a path or an entry and return an entry."""
    if target is None:
        raise ValueError("target must not be None")
    if isinstance(target, FileSystemEntry):
        return target
    return LocalEntry(target)

"""
Path helpers: parent directory creation, read-only removal and path comparison.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def ensure_parent_directory(file_path: PathLike) -> None:
    """
    Make sure a directory exists for a given file path.

    A path ending in a separator names the directory itself, so "a/b/"
    creates "a/b".

    Args:
        file_path: The file path. Not to be confused with the directory path.
    """
    if file_path is None:
        raise ValueError("file_path must not be None")

    raw = os.fspath(file_path)
    path = Path(raw)
    if not path.is_absolute():
        path = Path(os.path.abspath(path))

    separators = tuple(s for s in (os.sep, os.altsep) if s)
    if raw.endswith(separators):
        parent = path
    else:
        parent = path.parent
    if parent == parent.parent:
        # Root of a drive or file system, nothing to create
        return

    if not parent.is_dir():
        logger.debug(f"Creating directory {parent}")
    parent.mkdir(parents=True, exist_ok=True)


def clear_read_only(path: PathLike) -> None:
    """Remove the read-only mark from a file if it exists and has one."""
    if path is None:
        raise ValueError("path must not be None")

    path = Path(path)
    if not path.is_file():
        return

    mode = stat.S_IMODE(path.stat().st_mode)
    if not mode & stat.S_IWRITE:
        path.chmod(mode | stat.S_IWRITE)
        logger.debug(f"Cleared read-only flag on {path}")


def _normalize(path: PathLike) -> str:
    return os.path.normcase(os.path.abspath(os.fspath(path)))


def are_paths_equal(path1: PathLike, path2: PathLike) -> bool:
    """Compare two paths as file URIs, using the platform's case rules."""
    if path1 is None or path2 is None:
        raise ValueError("paths must not be None")

    uri1 = Path(_normalize(path1)).as_uri()
    uri2 = Path(_normalize(path2)).as_uri()
    return uri1 == uri2


def is_child_path_of(parent: PathLike, child: PathLike) -> bool:
    """True if ``child`` is ``parent`` itself or lies beneath it."""
    if parent is None or child is None:
        raise ValueError("paths must not be None")

    parent_parts = Path(_normalize(parent)).parts
    child_parts = Path(_normalize(child)).parts
    return child_parts[:len(parent_parts)] == parent_parts


def make_relative_path(root: PathLike, path: PathLike) -> str:
    """
    Path of ``path`` relative to ``root``.

    ``root`` is always treated as a directory, with or without a trailing
    separator: make_relative_path("/a/b", "/a/b/c.txt") is "c.txt".
    """
    if root is None or path is None:
        raise ValueError("paths must not be None")

    return os.path.relpath(os.path.abspath(os.fspath(path)), os.path.abspath(os.fspath(root)))

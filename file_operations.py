"""
File operations module for handling file system operations.

Recursive delete that tolerates files briefly locked by other processes
(indexers, antivirus scanners, editors), and a non-overwriting recursive
directory copy.
"""

import asyncio
import errno
import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from dotenv import load_dotenv

from fs_entries import FileSystemEntry, as_entry
from io_errors import is_not_found
from retry_policy import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    RetryPolicy,
    WaitSteps,
    run_blocking,
    run_suspending,
)

logger = logging.getLogger(__name__)

Target = Union[str, Path, FileSystemEntry]

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


def _parse_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _parse_float(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")


def _parse_bool(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


class FileOperations:
    """Handles file system operations."""

    def __init__(self, retry_policy: Optional[RetryPolicy] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """Initialize file operations."""
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep
        self.async_sleep = async_sleep

    @classmethod
    def from_config(cls, config_path: str = "config.json") -> 'FileOperations':
        """
        Create file operations from a JSON config file and the environment.

        The config file is optional. Environment variables (also read from a
        .env file) override it:
            FILE_OPS_RETRY_ATTEMPTS, FILE_OPS_RETRY_DELAY_MS, FILE_OPS_REPORT_LOCKERS
        """
        config = {}
        if Path(config_path).is_file():
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        else:
            logger.debug(f"Config file {config_path} not found, using defaults")

        load_dotenv()

        attempts = os.getenv('FILE_OPS_RETRY_ATTEMPTS', config.get('retry_attempts', DEFAULT_RETRY_ATTEMPTS))
        delay_ms = os.getenv('FILE_OPS_RETRY_DELAY_MS', config.get('retry_delay_ms', DEFAULT_RETRY_DELAY * 1000))
        report_lockers = os.getenv('FILE_OPS_REPORT_LOCKERS', config.get('report_lockers', True))

        retry_policy = RetryPolicy(
            max_attempts=_parse_int(attempts, 'retry_attempts'),
            delay=_parse_float(delay_ms, 'retry_delay_ms') / 1000.0,
            report_lockers=_parse_bool(report_lockers, 'report_lockers'),
        )
        logger.debug(f"Retry policy: {retry_policy.max_attempts} attempts, {retry_policy.delay}s delay")
        return cls(retry_policy)

    def delete(self, target: Target) -> None:
        """
        Delete a file or a directory tree.

        Missing targets are a no-op. Links inside the tree are removed without
        following them. Sharing violations are retried; any other error
        propagates unchanged and may leave the tree partially deleted.
        """
        entry = as_entry(target)
        logger.info(f"Deleting {entry.path}")
        run_blocking(self._delete_steps(entry, report_lockers=True), self.sleep)
        logger.info(f"Deleted {entry.path}")

    async def delete_async(self, target: Target) -> None:
        """
        Same as ``delete`` but suspends instead of blocking between retries.

        Lock holders are not scanned for when retries run out, the process
        scan would block the event loop.
        """
        entry = as_entry(target)
        logger.info(f"Deleting {entry.path}")
        await run_suspending(self._delete_steps(entry, report_lockers=False), self.async_sleep)
        logger.info(f"Deleted {entry.path}")

    def _delete_steps(self, entry: FileSystemEntry, report_lockers: bool) -> WaitSteps:
        if not entry.exists():
            return

        if entry.is_directory():
            try:
                yield from self.retry_policy.attempts(entry.unlock_children, entry.path, report_lockers)
            except OSError as e:
                if not is_not_found(e):
                    raise
                logger.debug(f"Already removed: {entry.path}")
                return

            for child in entry.children():
                if child.is_link():
                    try:
                        yield from self.retry_policy.attempts(child.delete, child.path, report_lockers)
                    except OSError as e:
                        if not is_not_found(e):
                            raise
                        logger.debug(f"Link already removed: {child.path}")
                else:
                    yield from self._delete_steps(child, report_lockers)

        try:
            yield from self.retry_policy.attempts(entry.reset_attributes, entry.path, report_lockers)
            yield from self.retry_policy.attempts(entry.delete, entry.path, report_lockers)
        except OSError as e:
            if not is_not_found(e):
                raise
            logger.debug(f"Already removed: {entry.path}")

    def copy_directory(self, source: Union[str, Path], destination: Union[str, Path]) -> None:
        """
        Recursively copy a directory tree.

        Existing destination files are never overwritten: a name collision
        raises FileExistsError.
        """
        source = Path(source)
        destination = Path(destination)
        logger.info(f"Copying {source} to {destination}")
        self._copy_tree(source, destination)
        logger.info(f"Copied {source} to {destination}")

    def _copy_tree(self, source: Path, destination: Path):
        if not source.is_dir():
            raise FileNotFoundError(errno.ENOENT,
                                    "Source directory does not exist or could not be found",
                                    str(source))

        destination.mkdir(parents=True, exist_ok=True)

        with os.scandir(source) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            if entry.is_file():
                self._copy_file(Path(entry.path), destination / entry.name)

        for entry in entries:
            if entry.is_dir():
                self._copy_tree(Path(entry.path), destination / entry.name)

    def _copy_file(self, source: Path, destination: Path):
        # 'xb' fails with FileExistsError instead of overwriting
        with open(source, 'rb') as fsrc, open(destination, 'xb') as fdst:
            shutil.copyfileobj(fsrc, fdst)
        shutil.copystat(source, destination)
        logger.debug(f"Copied file {source.name}")


def delete(target: Target) -> None:
    """Delete a file or directory tree with the default retry policy."""
    FileOperations().delete(target)


async def delete_async(target: Target) -> None:
    """Asynchronously delete a file or directory tree with the default retry policy."""
    await FileOperations().delete_async(target)


def copy_directory(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """Recursively copy a directory without overwriting existing files."""
    FileOperations().copy_directory(source, destination)

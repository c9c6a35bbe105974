"""
I/O error classification for file system operations.

Maps an ``OSError`` to the categories the retry loop cares about:
sharing violations (transient locks held by another process), not-found
conditions (entry removed concurrently) and everything else.
"""

import errno
from enum import Enum
from typing import Callable, Iterable, Optional


# 0x80070020 ERROR_SHARING_VIOLATION
ERROR_SHARING_VIOLATION = 32
ERROR_FILE_NOT_FOUND = 2
ERROR_PATH_NOT_FOUND = 3

SHARING_VIOLATION_WINERRORS = (ERROR_SHARING_VIOLATION,)
SHARING_VIOLATION_ERRNOS = (errno.EBUSY,)
NOT_FOUND_WINERRORS = (ERROR_FILE_NOT_FOUND, ERROR_PATH_NOT_FOUND)


def is_sharing_violation(error: OSError,
                         winerrors: Iterable[int] = SHARING_VIOLATION_WINERRORS,
                         errnos: Iterable[int] = SHARING_VIOLATION_ERRNOS) -> bool:
    """
    Check whether an I/O error means the target is in use by another process.

    Errors raised by the Windows API carry ``winerror`` and are matched on it
    alone; other platforms are matched on ``errno``.

    Args:
        error: The I/O error. May not be None.
        winerrors: Windows error codes treated as sharing violations
        errnos: errno values treated as sharing violations elsewhere

    Returns:
        True if the error is a sharing violation
    """
    if error is None:
        raise ValueError("error must not be None")

    winerror = getattr(error, 'winerror', None)
    if winerror is not None:
        return winerror in tuple(winerrors)
    return error.errno in tuple(errnos)


def is_not_found(error: OSError) -> bool:
    """Check whether an I/O error means the file or directory no longer exists."""
    if error is None:
        raise ValueError("error must not be None")

    if isinstance(error, FileNotFoundError):
        return True
    if getattr(error, 'winerror', None) in NOT_FOUND_WINERRORS:
        return True
    return error.errno == errno.ENOENT


class OperationStatus(Enum):
    """Outcome of a single attempt of a mutating operation."""
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


class OperationResult:
    """Result of one attempt: a status plus the error that caused it, if any."""

    def __init__(self, status: OperationStatus, error: Optional[OSError] = None):
        self.status = status
        self.error = error

    def __repr__(self):
        return f"OperationResult({self.status.value}, {self.error!r})"


def run_operation(action: Callable[[], None],
                  classifier: Callable[[OSError], bool] = is_sharing_violation) -> OperationResult:
    """
    Run a mutating operation once and classify the outcome.

    Only ``OSError`` is classified. Any other exception propagates to the
    caller unchanged.
    """
    try:
        action()
    except OSError as e:
        if classifier(e):
            return OperationResult(OperationStatus.RETRYABLE, e)
        return OperationResult(OperationStatus.FATAL, e)
    return OperationResult(OperationStatus.SUCCESS)

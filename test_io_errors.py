"""
Tests for io_errors.py
Classification of OSError instances into retryable, not-found and fatal.
"""

import errno
import unittest
from unittest.mock import Mock

from io_errors import (
    ERROR_PATH_NOT_FOUND,
    ERROR_SHARING_VIOLATION,
    OperationStatus,
    is_not_found,
    is_sharing_violation,
    run_operation,
)


def _windows_error(winerror: int, err: int = errno.EACCES) -> OSError:
    error = OSError(err, "windows error")
    error.winerror = winerror
    return error


class TestIsSharingViolation(unittest.TestCase):
    """Tests for is_sharing_violation."""

    def test_none_rejected(self):
        """A missing error is an invalid argument."""
        with self.assertRaises(ValueError):
            is_sharing_violation(None)

    def test_busy_errno(self):
        self.assertTrue(is_sharing_violation(OSError(errno.EBUSY, "Device or resource busy")))

    def test_other_errors(self):
        """Only the designated code counts, every other I/O error does not."""
        self.assertFalse(is_sharing_violation(OSError(errno.EACCES, "Permission denied")))
        self.assertFalse(is_sharing_violation(FileNotFoundError(errno.ENOENT, "missing")))
        self.assertFalse(is_sharing_violation(OSError(errno.ENOSPC, "No space left")))
        self.assertFalse(is_sharing_violation(OSError("no errno")))

    def test_windows_code(self):
        self.assertTrue(is_sharing_violation(_windows_error(ERROR_SHARING_VIOLATION)))
        self.assertFalse(is_sharing_violation(_windows_error(5)))

    def test_windows_code_takes_precedence_over_errno(self):
        self.assertFalse(is_sharing_violation(_windows_error(5, errno.EBUSY)))

    def test_custom_codes(self):
        error = OSError(errno.ETXTBSY, "Text file busy")
        self.assertFalse(is_sharing_violation(error))
        self.assertTrue(is_sharing_violation(error, errnos=(errno.EBUSY, errno.ETXTBSY)))


class TestIsNotFound(unittest.TestCase):
    """Tests for is_not_found."""

    def test_file_not_found(self):
        self.assertTrue(is_not_found(FileNotFoundError(errno.ENOENT, "gone")))

    def test_windows_path_not_found(self):
        self.assertTrue(is_not_found(_windows_error(ERROR_PATH_NOT_FOUND)))

    def test_other_errors(self):
        self.assertFalse(is_not_found(OSError(errno.EACCES, "Permission denied")))
        self.assertFalse(is_not_found(OSError(errno.EBUSY, "busy")))

    def test_none_rejected(self):
        with self.assertRaises(ValueError):
            is_not_found(None)


class TestRunOperation(unittest.TestCase):
    """Tests for run_operation result classification."""

    def test_success(self):
        action = Mock()
        result = run_operation(action)
        self.assertIs(result.status, OperationStatus.SUCCESS)
        self.assertIsNone(result.error)
        action.assert_called_once_with()

    def test_retryable(self):
        error = OSError(errno.EBUSY, "busy")
        result = run_operation(Mock(side_effect=error))
        self.assertIs(result.status, OperationStatus.RETRYABLE)
        self.assertIs(result.error, error)

    def test_fatal(self):
        error = PermissionError(errno.EACCES, "denied")
        result = run_operation(Mock(side_effect=error))
        self.assertIs(result.status, OperationStatus.FATAL)
        self.assertIs(result.error, error)

    def test_non_os_error_propagates(self):
        with self.assertRaises(RuntimeError):
            run_operation(Mock(side_effect=RuntimeError("boom")))


if __name__ == '__main__':
    unittest.main()

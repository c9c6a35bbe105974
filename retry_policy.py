"""
Retry-on-sharing-violation policy.

The retry loop is written once as a generator that yields the delay it
wants to wait before the next attempt. ``run_blocking`` drives it with a
blocking sleep, ``run_suspending`` with an awaitable one, so the sync and
async callers share the exact same attempt/give-up rules.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Generator, Optional, Union

from io_errors import OperationStatus, is_sharing_violation, run_operation
from lock_diagnostics import describe_lockers

logger = logging.getLogger(__name__)

DEFAULT_RETRY_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 0.05  # seconds

# Generator protocol shared by the retry loop and the recursive deleter
WaitSteps = Generator[float, None, None]


def run_blocking(steps: WaitSteps, sleep: Callable[[float], None] = time.sleep) -> None:
    """Drive a wait-step generator to completion, blocking on every wait."""
    for delay in steps:
        sleep(delay)


async def run_suspending(steps: WaitSteps,
                         sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
    """Drive a wait-step generator to completion, suspending on every wait."""
    for delay in steps:
        await sleep(delay)


class RetryPolicy:
    """Bounded retry of a single mutating operation on sharing violations."""

    def __init__(self, max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
                 delay: float = DEFAULT_RETRY_DELAY,
                 report_lockers: bool = True,
                 classifier: Callable[[OSError], bool] = is_sharing_violation):
        """Initialize retry policy."""
        if not isinstance(max_attempts, int) or isinstance(max_attempts, bool) or max_attempts < 1:
            raise ValueError("retry_attempts must be a positive integer")
        if delay < 0:
            raise ValueError("retry_delay must not be negative")
        self.max_attempts = max_attempts
        self.delay = delay
        self.report_lockers = report_lockers
        self.classifier = classifier

    def attempts(self, action: Callable[[], None],
                 path: Optional[Union[str, Path]] = None,
                 report_lockers: bool = True) -> WaitSteps:
        """
        Attempt ``action`` until it succeeds, yielding ``self.delay`` between
        attempts that failed with a sharing violation.

        Non-retryable errors are raised immediately. After the last allowed
        attempt the final sharing-violation error is raised; no wait follows
        the final attempt.

        Args:
            action: Zero-argument callable performing one mutation
            path: Path the action touches, used only for log output
            report_lockers: Scan for lock holders on exhaustion, if the
                policy allows it. The scan blocks the calling thread.
        """
        for attempt in range(1, self.max_attempts + 1):
            result = run_operation(action, self.classifier)

            if result.status is OperationStatus.SUCCESS:
                return
            if result.status is OperationStatus.FATAL:
                raise result.error

            if attempt == self.max_attempts:
                self._log_exhausted(path, result.error, report_lockers)
                raise result.error

            logger.debug(f"Sharing violation on {path or 'operation'} "
                         f"(attempt {attempt}/{self.max_attempts}), retrying in {self.delay}s")
            yield self.delay

    def run(self, action: Callable[[], None], path: Optional[Union[str, Path]] = None,
            sleep: Callable[[float], None] = time.sleep) -> None:
        """Run ``action`` with retries, blocking between attempts."""
        run_blocking(self.attempts(action, path), sleep)

    async def run_async(self, action: Callable[[], None], path: Optional[Union[str, Path]] = None,
                        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
        """Run ``action`` with retries, suspending between attempts. Lock holders are not scanned for."""
        await run_suspending(self.attempts(action, path, report_lockers=False), sleep)

    def _log_exhausted(self, path: Optional[Union[str, Path]], error: OSError, report_lockers: bool):
        if path is not None and report_lockers and self.report_lockers:
            lockers = describe_lockers(path)
            logger.warning(f"Still locked after {self.max_attempts} attempts: {path} "
                           f"(held by: {lockers}): {error}")
        else:
            logger.warning(f"Still locked after {self.max_attempts} attempts: "
                           f"{path or 'operation'}: {error}")

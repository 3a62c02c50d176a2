"""Error sinks for unrecoverable Magento API failures.

Reporters never raise and never block the caller:
- LoggingErrorReporter writes straight to the logging module
- QueueErrorReporter buffers reports and forwards them from a background task
"""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .config import settings
from .errors import ApiError, ExhaustedRetryError

logger = logging.getLogger(__name__)


def describe_cause(cause: Optional[BaseException]) -> str:
    """One-line description of a failure cause, safe for logs."""
    if cause is None:
        return "no cause"
    if isinstance(cause, (ApiError, ExhaustedRetryError)):
        status = cause.status_code if cause.status_code is not None else "n/a"
        return f"{type(cause).__name__} (status={status}): {cause}"
    return f"{type(cause).__name__}: {cause}"


class ErrorReporter(ABC):
    """Structured sink for failures that were converted to sentinels."""

    @abstractmethod
    def report(self, message: str, cause: Optional[BaseException] = None) -> None:
        """Record a failure. Must not raise."""
        pass


class LoggingErrorReporter(ErrorReporter):
    """Reports failures at ERROR level."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def report(self, message: str, cause: Optional[BaseException] = None) -> None:
        try:
            self._log.error(f"{message}: {describe_cause(cause)}")
        except Exception:
            pass


class QueueErrorReporter(ErrorReporter):
    """Buffers reports and forwards them to another reporter.

    Usage:
        reporter = QueueErrorReporter(LoggingErrorReporter())
        reporter.start()
        ...
        await reporter.stop()
    """

    def __init__(self, sink: Optional[ErrorReporter] = None, maxsize: Optional[int] = None):
        self.sink = sink or LoggingErrorReporter()
        self._queue: asyncio.Queue = asyncio.Queue(
            maxsize=settings.error_queue_size if maxsize is None else maxsize
        )
        self._task: Optional[asyncio.Task] = None
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def report(self, message: str, cause: Optional[BaseException] = None) -> None:
        try:
            self._queue.put_nowait((message, cause))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Error queue full, dropped report: {message}")

    def start(self) -> None:
        """Start forwarding in the background. Requires a running loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    def _forward(self, message: str, cause: Optional[BaseException]) -> None:
        try:
            self.sink.report(message, cause)
        except Exception:
            logger.exception(f"Error sink failed while reporting: {message}")
        finally:
            self._queue.task_done()

    async def _drain(self) -> None:
        while True:
            message, cause = await self._queue.get()
            self._forward(message, cause)

    def flush(self) -> int:
        """Forward everything pending synchronously. Returns the count."""
        count = 0
        while True:
            try:
                message, cause = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return count
            self._forward(message, cause)
            count += 1

    async def stop(self) -> None:
        """Drain pending reports and stop the background task."""
        if self._task is None:
            self.flush()
            return

        if not self._task.done():
            await self._queue.join()
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self.flush()

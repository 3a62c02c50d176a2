"""Retry policy for Magento API calls.

Provides retry on eventual-consistency lag with:
- 404-only retry decisions
- Fixed delay by default, optional exponential growth
- Cooperative waits that yield to the event loop
- Explicit cancellation tokens
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional

from ..config import settings
from ..errors import ApiError
from ..models import RetryState

logger = logging.getLogger(__name__)


# Status codes treated as upstream lag rather than a real fault
RETRYABLE_STATUS_CODES = frozenset({404})


class CancellationToken:
    """Cooperative cancellation for a retry chain.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(client.get_order(42, cancel_token=token))
        token.cancel()
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait_for(self, seconds: float) -> bool:
        """Wait up to ``seconds``; return True if cancelled in that time."""
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


@dataclass
class RetryPolicy:
    """Decides whether and when a failed call is attempted again."""

    max_retry: int = settings.max_retry
    wait_ms: int = settings.wait_ms
    backoff_multiplier: float = settings.backoff_multiplier
    max_wait_ms: int = settings.max_wait_ms
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self):
        if self.backoff_multiplier < 1.0:
            raise ValueError(
                f"backoff_multiplier must be >= 1.0, got {self.backoff_multiplier}"
            )
        if self.max_wait_ms < 0:
            raise ValueError(f"max_wait_ms must be >= 0, got {self.max_wait_ms}")

    def initial_state(
        self,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
    ) -> RetryState:
        """Fresh state for one logical operation, defaulting to this policy."""
        return RetryState(
            attempts=attempts,
            max_retry=self.max_retry if max_retry is None else max_retry,
            wait_ms=self.wait_ms if wait_ms is None else wait_ms,
        )

    def should_retry(self, error: Exception, state: RetryState) -> bool:
        """Determine if a failed attempt should be retried.

        Args:
            error: The error raised by the attempt
            state: Current retry state

        Returns:
            True if another attempt is permitted
        """
        if not isinstance(error, ApiError):
            return False
        return error.status_code in RETRYABLE_STATUS_CODES and state.attempts < state.max_retry

    def next_state(self, state: RetryState) -> RetryState:
        return replace(state, attempts=state.attempts + 1)

    def delay_for(self, state: RetryState) -> int:
        """Delay in milliseconds before the next attempt."""
        # wait_ms * (backoff_multiplier ^ attempts); multiplier 1.0 keeps it fixed
        delay = state.wait_ms * (self.backoff_multiplier**state.attempts)
        if self.backoff_multiplier > 1.0:
            delay = min(delay, self.max_wait_ms)
        return int(delay)

    async def wait(
        self,
        state: RetryState,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Suspend before the next attempt.

        Returns:
            False if the chain was cancelled during the wait
        """
        seconds = self.delay_for(state) / 1000
        if cancel_token is None:
            await self.sleep(seconds)
            return True
        return not await cancel_token.wait_for(seconds)

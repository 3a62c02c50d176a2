"""Resilience layer for NS8 switches.

This module provides:
- 404-aware retry policy with fixed or growing delays
- Cooperative cancellation of retry chains
"""

from .retry import RETRYABLE_STATUS_CODES, CancellationToken, RetryPolicy

__all__ = [
    "RetryPolicy",
    "CancellationToken",
    "RETRYABLE_STATUS_CODES",
]

"""Tests for resilience module."""

import pytest


def test_resilience_imports():
    """Test that resilience module can be imported."""
    from ns8_switches.resilience import (
        RetryPolicy,
        CancellationToken,
        RETRYABLE_STATUS_CODES,
    )

    assert RetryPolicy is not None
    assert CancellationToken is not None
    assert 404 in RETRYABLE_STATUS_CODES

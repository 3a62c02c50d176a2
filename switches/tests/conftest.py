"""Pytest configuration and fixtures for NS8 switches tests."""

import pytest
from unittest.mock import Mock, AsyncMock
from typing import Dict, Any

from ns8_switches.models import Credentials, SwitchContext
from ns8_switches.reporting import ErrorReporter
from ns8_switches.resilience import RetryPolicy


@pytest.fixture(autouse=True)
def use_test_environment(monkeypatch):
    """Ensure settings overrides from the shell don't leak into tests."""
    for name in ("NS8_MAX_RETRY", "NS8_WAIT_MS", "NS8_REST_PATH", "NS8_SIGNATURE_METHOD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def magento_integration() -> Dict[str, Any]:
    """Magento service integration as sent by the switchboard."""
    return {
        "type": "MAGENTO",
        "identityToken": "test-consumer-key",
        "identitySecret": "test-consumer-secret",
        "token": "test-access-token",
        "secret": "test-access-secret",
    }


@pytest.fixture
def mock_event(magento_integration) -> Dict[str, Any]:
    """Raw switchboard event for a score update."""
    return {
        "merchant": {
            "storefrontUrl": "https://shop.example.com",
            "serviceIntegrations": [
                {"type": "PROTECT", "token": "protect-token"},
                magento_integration,
            ],
        },
        "data": {"platformId": 42, "score": 87},
    }


@pytest.fixture
def switch_context(mock_event) -> SwitchContext:
    return SwitchContext.from_event(mock_event)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        consumer_key="test-consumer-key",
        consumer_secret="test-consumer-secret",
        access_token="test-access-token",
        access_token_secret="test-access-secret",
    )


@pytest.fixture
def mock_sleep():
    """Stand-in for asyncio.sleep that returns immediately."""
    return AsyncMock(return_value=None)


@pytest.fixture
def retry_policy(mock_sleep) -> RetryPolicy:
    """Default policy (5 retries, 2000ms) with an instant sleep."""
    return RetryPolicy(max_retry=5, wait_ms=2000, sleep=mock_sleep)


@pytest.fixture
def mock_reporter():
    """Error reporter recording report() calls."""
    return Mock(spec=ErrorReporter)


@pytest.fixture
def mock_transport():
    """Transport whose send() is scripted per test."""
    transport = Mock()
    transport.send = AsyncMock()
    transport.aclose = AsyncMock()
    return transport


@pytest.fixture
def mock_order() -> Dict[str, Any]:
    return {
        "entity_id": 42,
        "increment_id": "000000042",
        "state": "processing",
        "status": "processing",
        "grand_total": 99.5,
        "customer_id": 7,
    }


@pytest.fixture
def mock_customer() -> Dict[str, Any]:
    return {
        "id": 7,
        "email": "jane@example.com",
        "firstname": "Jane",
        "lastname": "Doe",
    }

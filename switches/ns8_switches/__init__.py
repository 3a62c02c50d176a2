"""NS8 Protect switches: resilient Magento API access for workflow steps."""

__version__ = "0.1.0"

from .client import MagentoClient, ResourceClient
from .errors import ApiError, ConfigurationError, ExhaustedRetryError
from .reporting import ErrorReporter, LoggingErrorReporter, QueueErrorReporter
from .resilience import CancellationToken, RetryPolicy
from .session import SessionHelper, resolve_credentials
from .steps import EventOperator, EventStep, UpdateEQ8ScoreEventStep

__all__ = [
    "MagentoClient",
    "ResourceClient",
    "ApiError",
    "ConfigurationError",
    "ExhaustedRetryError",
    "ErrorReporter",
    "LoggingErrorReporter",
    "QueueErrorReporter",
    "RetryPolicy",
    "CancellationToken",
    "SessionHelper",
    "resolve_credentials",
    "EventOperator",
    "EventStep",
    "UpdateEQ8ScoreEventStep",
]

"""Exceptions raised by the Magento client layer."""

from typing import Any, Optional


class SwitchError(Exception):
    """Base exception for NS8 switches."""

    pass


class ConfigurationError(SwitchError):
    """Merchant configuration is missing or invalid.

    Raised at client construction and never retried.
    """

    pass


class ApiError(SwitchError):
    """A single Magento API call failed.

    Args:
        status_code: HTTP status, or None for a transport-level fault
        message: Human readable error message
        cause: Underlying exception or response, if any
    """

    def __init__(
        self,
        status_code: Optional[int],
        message: str = "",
        cause: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.cause = cause

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def __str__(self) -> str:
        if self.status_code is None:
            return f"Transport error: {self.message}"
        return f"HTTP {self.status_code}: {self.message}"


class UnconfirmedActionError(ApiError):
    """Magento answered an order action with an explicit ``false``."""

    def __init__(self, message: str = "", cause: Optional[Any] = None):
        super().__init__(None, message, cause)

    def __str__(self) -> str:
        return f"Action not confirmed: {self.message}"


class ExhaustedRetryError(SwitchError):
    """The retry budget was consumed without a successful attempt."""

    def __init__(self, attempts: int, last_error: ApiError):
        super().__init__(f"Retry budget exhausted after {attempts} retries: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
        self.status_code = last_error.status_code

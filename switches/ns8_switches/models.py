"""Data model shared by the session, client and step layers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ApiError


@dataclass(frozen=True)
class Credentials:
    """OAuth1 credential set for one merchant's Magento integration."""

    consumer_key: str
    consumer_secret: str = field(repr=False)
    access_token: str = field(repr=False)
    access_token_secret: str = field(repr=False)


@dataclass(frozen=True)
class ServiceIntegration:
    """A merchant's stored credential set for one external system type."""

    type: str
    identity_token: Optional[str] = None
    identity_secret: Optional[str] = field(default=None, repr=False)
    token: Optional[str] = field(default=None, repr=False)
    secret: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceIntegration":
        """Build from the switchboard payload (camelCase keys)."""
        return cls(
            type=data.get("type", ""),
            identity_token=data.get("identityToken", data.get("identity_token")),
            identity_secret=data.get("identitySecret", data.get("identity_secret")),
            token=data.get("token"),
            secret=data.get("secret"),
        )

    def is_complete(self) -> bool:
        return all((self.identity_token, self.identity_secret, self.token, self.secret))

    def to_credentials(self) -> Credentials:
        return Credentials(
            consumer_key=self.identity_token or "",
            consumer_secret=self.identity_secret or "",
            access_token=self.token or "",
            access_token_secret=self.secret or "",
        )


@dataclass
class Merchant:
    """The subset of a Protect merchant the switches rely on."""

    storefront_url: str = ""
    service_integrations: List[ServiceIntegration] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Merchant":
        integrations = data.get("serviceIntegrations", data.get("service_integrations")) or []
        return cls(
            storefront_url=data.get("storefrontUrl", data.get("storefront_url")) or "",
            service_integrations=[
                i if isinstance(i, ServiceIntegration) else ServiceIntegration.from_dict(i)
                for i in integrations
            ],
        )


@dataclass
class SwitchContext:
    """Context handed to every event step."""

    merchant: Merchant
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "SwitchContext":
        """Build a context from a raw switchboard event."""
        merchant = event.get("merchant") or {}
        if not isinstance(merchant, Merchant):
            merchant = Merchant.from_dict(merchant)
        return cls(merchant=merchant, data=dict(event.get("data") or {}))


@dataclass(frozen=True)
class RetryState:
    """Retry bookkeeping for one logical operation."""

    attempts: int = 0
    max_retry: int = 5
    wait_ms: int = 2000

    def __post_init__(self):
        if self.attempts < 0:
            raise ValueError(f"attempts must be >= 0, got {self.attempts}")
        if self.max_retry < 0:
            raise ValueError(f"max_retry must be >= 0, got {self.max_retry}")
        if self.wait_ms < 0:
            raise ValueError(f"wait_ms must be >= 0, got {self.wait_ms}")

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_retry


class ErrorKind(str, Enum):
    """Why a logical operation did not succeed."""

    NONE = "none"
    API_ERROR = "api_error"
    RETRIES_EXHAUSTED = "retries_exhausted"
    CANCELLED = "cancelled"


@dataclass
class Result:
    """Outcome of one logical operation against the Magento API."""

    value: Any = None
    error: Optional[Exception] = None
    kind: ErrorKind = ErrorKind.NONE
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.kind == ErrorKind.NONE

    @classmethod
    def success(cls, value: Any, attempts: int = 0) -> "Result":
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        error: Optional[Exception] = None,
        attempts: int = 0,
    ) -> "Result":
        return cls(error=error, kind=kind, attempts=attempts)

    @property
    def status_code(self) -> Optional[int]:
        if isinstance(self.error, ApiError):
            return self.error.status_code
        return getattr(self.error, "status_code", None)


@dataclass
class Session:
    """Browser session attached to a Protect order."""

    accept_language: str = ""
    id: str = ""
    screen_height: int = 0
    screen_width: int = 0
    ip: str = ""
    user_agent: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the Protect API's camelCase shape."""
        return {
            "acceptLanguage": self.accept_language,
            "id": self.id,
            "screenHeight": self.screen_height,
            "screenWidth": self.screen_width,
            "ip": self.ip,
            "userAgent": self.user_agent,
        }

"""Signed HTTP transport for the Magento 2 REST API.

Issues exactly one request per call:
- OAuth1 request signing via oauthlib
- JSON decoding of 2xx responses
- Non-2xx responses and connection faults surfaced as ApiError
"""

import logging
import re
from typing import Any, Dict, Generator, Optional, Union

import httpx
from oauthlib import oauth1

from .config import settings
from .errors import ApiError
from .models import Credentials

logger = logging.getLogger(__name__)


class Operation:
    """Operation names understood by Transport.send."""

    GET_ORDER = "orders.get"
    CANCEL_ORDER = "orders.cancel"
    HOLD_ORDER = "orders.hold"
    UNHOLD_ORDER = "orders.unhold"
    GET_CUSTOMER = "customers.get"
    GET_TRANSACTION = "transactions.getByTransactionId"


# operation -> (HTTP method, path template)
ROUTES: Dict[str, tuple[str, str]] = {
    Operation.GET_ORDER: ("GET", "/V1/orders/{id}"),
    Operation.CANCEL_ORDER: ("POST", "/V1/orders/{id}/cancel"),
    Operation.HOLD_ORDER: ("POST", "/V1/orders/{id}/hold"),
    Operation.UNHOLD_ORDER: ("POST", "/V1/orders/{id}/unhold"),
    Operation.GET_CUSTOMER: ("GET", "/V1/customers/{id}"),
    Operation.GET_TRANSACTION: ("GET", "/V1/transactions"),
}

_PLACEHOLDER = re.compile(r"%(\w+)")


def transaction_search_params(transaction_id: str) -> Dict[str, str]:
    """searchCriteria query selecting a transaction by its gateway txn_id."""
    prefix = "searchCriteria[filter_groups][0][filters][0]"
    return {
        f"{prefix}[field]": "txn_id",
        f"{prefix}[value]": str(transaction_id),
        f"{prefix}[condition_type]": "eq",
    }


def format_magento_message(body: Any) -> Optional[str]:
    """Render a Magento error body into a plain message.

    Magento returns ``{"message": "...%1...", "parameters": [...]}`` where
    placeholders are positional (``%1``) or named (``%fieldName``).
    """
    if not isinstance(body, dict) or not body.get("message"):
        return None

    message = str(body["message"])
    parameters = body.get("parameters")

    if isinstance(parameters, list):
        lookup = {str(i + 1): value for i, value in enumerate(parameters)}
    elif isinstance(parameters, dict):
        lookup = {str(k): value for k, value in parameters.items()}
    else:
        return message

    return _PLACEHOLDER.sub(
        lambda m: str(lookup[m.group(1)]) if m.group(1) in lookup else m.group(0),
        message,
    )


class OAuth1Auth(httpx.Auth):
    """httpx auth flow that signs each request with OAuth1."""

    def __init__(self, credentials: Credentials, signature_method: Optional[str] = None):
        self._signer = oauth1.Client(
            credentials.consumer_key,
            client_secret=credentials.consumer_secret,
            resource_owner_key=credentials.access_token,
            resource_owner_secret=credentials.access_token_secret,
            signature_method=signature_method or settings.signature_method,
        )

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        _, headers, _ = self._signer.sign(str(request.url), http_method=request.method)
        request.headers["Authorization"] = headers["Authorization"]
        yield request


class Transport:
    """Single request/response exchange against a Magento storefront."""

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        timeout: Optional[float] = None,
        signature_method: Optional[str] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize transport.

        No network I/O happens here; OAuth signing takes place per request.

        Args:
            base_url: REST root, e.g. "https://shop.example/index.php/rest"
            credentials: OAuth1 credential set
            timeout: Request timeout in seconds
            signature_method: OAuth1 signature method
            http_transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=OAuth1Auth(credentials, signature_method),
            timeout=timeout if timeout is not None else settings.request_timeout,
            headers={"Accept": "application/json"},
            transport=http_transport,
        )

    async def send(
        self,
        operation: str,
        resource_id: Optional[Union[int, str]] = None,
        payload: Optional[Any] = None,
    ) -> Any:
        """Issue one API call.

        Args:
            operation: One of the Operation names
            resource_id: Identifier of the addressed resource
            payload: Optional JSON body

        Returns:
            Decoded JSON response (None for an empty body)

        Raises:
            ApiError: On a non-2xx response or a transport-level fault
            ValueError: On an unknown operation or a missing identifier
        """
        if operation not in ROUTES:
            raise ValueError(f"Unsupported operation: {operation}")
        if resource_id is None or resource_id == "":
            raise ValueError(f"{operation} requires a resource id")

        method, template = ROUTES[operation]
        params = None
        if operation == Operation.GET_TRANSACTION:
            path = template
            params = transaction_search_params(str(resource_id))
        else:
            path = template.format(id=resource_id)

        logger.debug(f"{method} {path} ({operation})")

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=payload,
            )
        except httpx.TransportError as e:
            raise ApiError(None, f"{method} {path} failed: {e}", cause=e) from e

        if not response.is_success:
            raise ApiError(
                response.status_code,
                self._error_message(response),
                cause=response,
            )

        body = self._decode(response)
        if operation == Operation.GET_TRANSACTION:
            items = body.get("items") if isinstance(body, dict) else None
            return items[0] if items else None
        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                response.status_code,
                "Response body is not valid JSON",
                cause=e,
            ) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            message = format_magento_message(response.json())
        except ValueError:
            message = None
        return message or response.reason_phrase or f"HTTP {response.status_code}"

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

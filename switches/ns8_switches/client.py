"""Resilient Magento REST client for NS8 switches."""

import logging
from typing import Any, Dict, Optional, Union

from .config import settings
from .errors import ApiError, ConfigurationError, ExhaustedRetryError, UnconfirmedActionError
from .models import Credentials, ErrorKind, Result, SwitchContext
from .reporting import ErrorReporter, LoggingErrorReporter
from .resilience import CancellationToken, RetryPolicy
from .session import resolve_credentials
from .transport import ROUTES, Operation, Transport

logger = logging.getLogger(__name__)

ResourceId = Union[int, str]

# Messages reported when an operation ends in failure
FAILURE_MESSAGES: Dict[str, str] = {
    Operation.GET_ORDER: "Failed to get Order Id:{id} from Magento",
    Operation.CANCEL_ORDER: "Failed to cancel Order Id:{id} in Magento API",
    Operation.HOLD_ORDER: "Failed to hold Order Id:{id} in Magento API",
    Operation.UNHOLD_ORDER: "Failed to unhold Order Id:{id} in Magento API",
    Operation.GET_CUSTOMER: "Failed to get Customer Id:{id} from Magento",
    Operation.GET_TRANSACTION: "Failed to get Transaction Id:{id} from Magento",
}

# Operations answered with a boolean rather than an entity
ACTION_OPERATIONS = frozenset(
    {Operation.CANCEL_ORDER, Operation.HOLD_ORDER, Operation.UNHOLD_ORDER}
)


class ResourceClient:
    """Typed, retrying access to Magento orders, customers and transactions.

    Every operation returns a sentinel (None or False) on failure instead of
    raising, so it is safe to call from fire-and-forget workflow steps.
    Failures are handed to the error reporter exactly once per operation.
    Negative attempts, max_retry or wait_ms raise ValueError before any
    request is made.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str,
        policy: Optional[RetryPolicy] = None,
        reporter: Optional[ErrorReporter] = None,
        transport: Optional[Transport] = None,
        timeout: Optional[float] = None,
        signature_method: Optional[str] = None,
    ):
        """Initialize the client. Performs no network I/O.

        Args:
            credentials: OAuth1 credentials for the storefront
            base_url: REST root of the storefront
            policy: Retry policy (defaults from settings)
            reporter: Sink for unrecoverable failures
            transport: Pre-built transport (mainly for tests)
            timeout: Request timeout in seconds
            signature_method: OAuth1 signature method
        """
        if not base_url:
            raise ConfigurationError("No storefront URL configured for this merchant")

        self.credentials = credentials
        self.base_url = base_url
        self.policy = policy or RetryPolicy()
        self.reporter = reporter or LoggingErrorReporter()
        self.transport = transport or Transport(
            base_url,
            credentials,
            timeout=timeout,
            signature_method=signature_method,
        )

    async def execute(
        self,
        operation: str,
        resource_id: ResourceId,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result:
        """Run one logical operation to completion.

        Retries 404 responses while the budget lasts; any other failure ends
        the operation immediately.

        Args:
            operation: One of the transport Operation names
            resource_id: Identifier of the addressed resource
            attempts: Retries already consumed
            max_retry: Retry budget (defaults to the policy's)
            wait_ms: Delay between attempts (defaults to the policy's)
            cancel_token: Optional token that stops the chain between attempts

        Returns:
            Result describing the outcome; never raises for API failures

        Raises:
            ValueError: On an unknown operation, or a negative attempts,
                max_retry or wait_ms. These are caller bugs, not API failures.
        """
        if operation not in ROUTES:
            raise ValueError(f"Unsupported operation: {operation}")

        state = self.policy.initial_state(attempts, max_retry, wait_ms)

        while True:
            if cancel_token is not None and cancel_token.cancelled:
                return self._cancelled(operation, resource_id, state.attempts)

            try:
                value = await self.transport.send(operation, resource_id)
                error = self._check_confirmation(operation, resource_id, value)
            except ApiError as e:
                error = e
            except Exception as e:
                error = ApiError(None, f"Unexpected error: {e}", cause=e)

            if error is None:
                if state.attempts:
                    logger.info(
                        f"{operation} {resource_id} succeeded after {state.attempts} retries"
                    )
                return Result.success(value, attempts=state.attempts)

            if self.policy.should_retry(error, state):
                logger.warning(
                    f"{operation} {resource_id} not found "
                    f"(retry {state.attempts + 1}/{state.max_retry}), "
                    f"retrying in {self.policy.delay_for(state)}ms"
                )
                if not await self.policy.wait(state, cancel_token):
                    return self._cancelled(operation, resource_id, state.attempts)
                state = self.policy.next_state(state)
                continue

            if error.is_not_found and state.max_retry > 0:
                kind = ErrorKind.RETRIES_EXHAUSTED
                cause: Exception = ExhaustedRetryError(state.attempts, error)
            else:
                kind = ErrorKind.API_ERROR
                cause = error

            self._report(FAILURE_MESSAGES[operation].format(id=resource_id), cause)
            return Result.failure(kind, cause, attempts=state.attempts)

    @staticmethod
    def _check_confirmation(operation: str, resource_id: ResourceId, value: Any) -> Optional[ApiError]:
        # Magento answers cancel/hold/unhold with a bare JSON boolean
        if operation in ACTION_OPERATIONS and value is False:
            return UnconfirmedActionError(f"Magento did not confirm {operation} for {resource_id}")
        return None

    def _cancelled(self, operation: str, resource_id: ResourceId, attempts: int) -> Result:
        logger.info(f"{operation} {resource_id} cancelled after {attempts} retries")
        return Result.failure(ErrorKind.CANCELLED, attempts=attempts)

    def _report(self, message: str, cause: Exception) -> None:
        try:
            self.reporter.report(message, cause)
        except Exception:
            logger.exception(f"Error reporter failed while reporting: {message}")

    async def _entity(self, operation: str, resource_id: ResourceId, **retry) -> Optional[Any]:
        result = await self.execute(operation, resource_id, **retry)
        return result.value if result.ok else None

    async def _action(self, operation: str, resource_id: ResourceId, **retry) -> bool:
        result = await self.execute(operation, resource_id, **retry)
        return result.ok

    async def get_order(
        self,
        order_id: int,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get a Magento order by id.

        Returns:
            Decoded order, or None on failure

        Raises:
            ValueError: If attempts, max_retry or wait_ms is negative
        """
        return await self._entity(
            Operation.GET_ORDER,
            order_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def cancel_order(
        self,
        order_id: int,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Attempt to cancel an order. Returns True if Magento accepted it.

        Raises:
            ValueError: If attempts, max_retry or wait_ms is negative
        """
        return await self._action(
            Operation.CANCEL_ORDER,
            order_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def hold_order(
        self,
        order_id: int,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Attempt to place an order on hold.

        Raises:
            ValueError: If attempts, max_retry or wait_ms is negative
        """
        return await self._action(
            Operation.HOLD_ORDER,
            order_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def unhold_order(
        self,
        order_id: int,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Release an order that is on hold.

        Raises:
            ValueError: If attempts, max_retry or wait_ms is negative
        """
        return await self._action(
            Operation.UNHOLD_ORDER,
            order_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def get_customer(
        self,
        customer_id: int,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Dict[str, Any]]:
        return await self._entity(
            Operation.GET_CUSTOMER,
            customer_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def get_transaction(
        self,
        transaction_id: str,
        attempts: int = 0,
        max_retry: Optional[int] = None,
        wait_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get a Magento payment transaction by its gateway transaction id.

        Returns:
            The first matching transaction, or None if there is none

        Raises:
            ValueError: If attempts, max_retry or wait_ms is negative
        """
        return await self._entity(
            Operation.GET_TRANSACTION,
            transaction_id,
            attempts=attempts,
            max_retry=max_retry,
            wait_ms=wait_ms,
            cancel_token=cancel_token,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "ResourceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class MagentoClient(ResourceClient):
    """ResourceClient bound to a merchant's Magento storefront."""

    @classmethod
    def from_context(cls, context: SwitchContext, **kwargs) -> "MagentoClient":
        """Build a client from a switch context.

        Raises:
            ConfigurationError: If the merchant has no usable Magento
                integration or storefront URL
        """
        merchant = context.merchant
        credentials = resolve_credentials(
            merchant.service_integrations,
            settings.magento_integration_type,
        )
        if not merchant.storefront_url:
            raise ConfigurationError("No storefront URL defined on this merchant")

        base_url = f"{merchant.storefront_url.rstrip('/')}{settings.rest_path}"
        return cls(credentials, base_url, **kwargs)

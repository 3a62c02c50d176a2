"""Credential resolution from a merchant's service integrations."""

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Union

from .errors import ConfigurationError
from .models import Credentials, ServiceIntegration, Session, SwitchContext

if TYPE_CHECKING:
    from .client import MagentoClient

logger = logging.getLogger(__name__)


def select_integration(
    integrations: Iterable[Union[ServiceIntegration, Dict[str, Any]]],
    required_type: str,
) -> ServiceIntegration:
    """Select the first integration of the given type.

    Args:
        integrations: Merchant service integrations (objects or raw dicts)
        required_type: Type tag to match, e.g. "MAGENTO"

    Returns:
        The matching integration

    Raises:
        ConfigurationError: If no integration of that type exists
    """
    for integration in integrations or ():
        if not isinstance(integration, ServiceIntegration):
            integration = ServiceIntegration.from_dict(integration)
        if integration.type == required_type:
            return integration

    raise ConfigurationError(
        f"No {required_type.title()} Service Integration defined on this merchant"
    )


def resolve_credentials(
    integrations: Iterable[Union[ServiceIntegration, Dict[str, Any]]],
    required_type: str,
) -> Credentials:
    """Resolve OAuth1 credentials for the integration of the given type.

    Performs no network I/O.

    Raises:
        ConfigurationError: If the integration is missing or incomplete
    """
    integration = select_integration(integrations, required_type)
    if not integration.is_complete():
        raise ConfigurationError(
            f"{required_type.title()} Service Integration is missing credentials"
        )

    logger.debug(f"Resolved credentials for {required_type} integration")
    return integration.to_credentials()


class SessionHelper:
    """Builds Protect session data for an order event."""

    def __init__(self, context: SwitchContext, client: Optional["MagentoClient"] = None):
        self.context = context
        self.client = client

    def to_session(self) -> Session:
        # TODO: populate from Magento once the storefront ships browser session data
        return Session()

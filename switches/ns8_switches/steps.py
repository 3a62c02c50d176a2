"""Event steps run by the NS8 switchboard."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from .client import MagentoClient
from .models import SwitchContext

logger = logging.getLogger(__name__)


class EventStep(ABC):
    """A single step of a switchboard event flow."""

    @abstractmethod
    async def handle(self, context: SwitchContext) -> Any:
        pass


class EventOperator:
    """Runs a sequence of event steps against one switch context."""

    def __init__(self, steps: Optional[List[EventStep]] = None):
        """Initialize operator.

        Args:
            steps: Steps to run, in order
        """
        self.steps: List[EventStep] = list(steps or [])

    def add_step(self, step: EventStep) -> None:
        self.steps.append(step)

    async def handle(self, event: Union[SwitchContext, Dict[str, Any]]) -> Any:
        """Run all steps sequentially.

        Args:
            event: A switch context, or the raw switchboard event

        Returns:
            Result of the last step (None when there are no steps)

        Raises:
            ConfigurationError: If a step cannot build its API client
        """
        context = event if isinstance(event, SwitchContext) else SwitchContext.from_event(event)

        result = None
        for step in self.steps:
            logger.debug(f"Running {type(step).__name__}")
            result = await step.handle(context)
        return result


class UpdateEQ8ScoreEventStep(EventStep):
    """Loads the Magento order behind a Protect score update."""

    def __init__(self, client: Optional[MagentoClient] = None):
        self.client = client

    async def handle(self, context: SwitchContext) -> Dict[str, Any]:
        protect_data = context.data
        platform_id = protect_data.get("platformId")

        if platform_id is None:
            logger.warning("Score update event has no platformId; skipping order lookup")
            return {"result": None, "protectData": protect_data}

        if self.client is not None:
            order = await self.client.get_order(platform_id)
        else:
            async with MagentoClient.from_context(context) as client:
                order = await client.get_order(platform_id)

        return {"result": order, "protectData": protect_data}

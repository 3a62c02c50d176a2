"""Example script demonstrating the resilient Magento client."""

import asyncio
import logging
import os

from ns8_switches import EventOperator, MagentoClient, QueueErrorReporter, UpdateEQ8ScoreEventStep
from ns8_switches.models import SwitchContext

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_event() -> dict:
    """Switchboard-style event built from environment variables."""
    return {
        "merchant": {
            "storefrontUrl": os.getenv("MAGENTO_URL", "http://localhost"),
            "serviceIntegrations": [
                {
                    "type": "MAGENTO",
                    "identityToken": os.getenv("MAGENTO_CONSUMER_KEY", "consumer-key"),
                    "identitySecret": os.getenv("MAGENTO_CONSUMER_SECRET", "consumer-secret"),
                    "token": os.getenv("MAGENTO_ACCESS_TOKEN", "access-token"),
                    "secret": os.getenv("MAGENTO_ACCESS_TOKEN_SECRET", "access-secret"),
                }
            ],
        },
        "data": {"platformId": int(os.getenv("MAGENTO_ORDER_ID", "1"))},
    }


async def main():
    """Fetch a few resources concurrently, then run a score update step."""
    event = build_event()
    context = SwitchContext.from_event(event)

    reporter = QueueErrorReporter()
    reporter.start()

    async with MagentoClient.from_context(context, reporter=reporter) as client:
        order_id = context.data["platformId"]
        order, customer = await asyncio.gather(
            client.get_order(order_id, max_retry=2, wait_ms=500),
            client.get_customer(order_id, max_retry=2, wait_ms=500),
        )
        logger.info(f"Order found: {order is not None}")
        logger.info(f"Customer found: {customer is not None}")

    operator = EventOperator([UpdateEQ8ScoreEventStep()])
    result = await operator.handle(event)
    logger.info(f"Score update step returned order: {result['result'] is not None}")

    await reporter.stop()
    logger.info(f"Reports dropped: {reporter.dropped}")


if __name__ == "__main__":
    asyncio.run(main())

import asyncio
import logging
import os
import sys

# 1. Fix Path
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, ".."))
sys.path.insert(0, project_root)

# 2. Setup Logger
from swapclient.core.logger import setup_logging
from swapclient.core.settings import ClientConfig

config = ClientConfig()
setup_logging(config)

from swapclient.client import SwapClient

logger = logging.getLogger("WatchOrder")


async def main(order_id: str):
    async with SwapClient(config) as client:
        subscription = client.watch_order_fill_amounts(order_id)

        logger.info(f"👀 Watching {order_id} every {config.POLL_INTERVAL_MS}ms...")
        try:
            async for fill in subscription:
                logger.info(f"💰 Filled {fill.amount} @ {fill.price}")
        except Exception as e:
            logger.error(f"❌ Watch ended with error: {e}")
            return

        logger.info(f"🏁 Final status: {subscription.status}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/watch_order.py <block_order_id>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))

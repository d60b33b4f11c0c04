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

logger = logging.getLogger("CancelAll")


async def main(market: str):
    async with SwapClient(config) as client:
        try:
            results = await client.cancel_all(market)
        except Exception as e:
            logger.error(f"❌ Cancel-all failed on {market}: {e}")
            return

        logger.info(f"✅ {len(results)} orders cancelled on {market}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/cancel_all.py <market>  (e.g. BTC/LTC)")
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))

import asyncio
import logging
from typing import Any, Dict, List, Optional

from swapclient.adapters.core import OrderService
from swapclient.schemas.orders import OrderStatus

logger = logging.getLogger("BulkCancel")


class BulkCancelCoordinator:
    def __init__(self, orders: OrderService, deadline: Optional[float] = None):
        self.orders = orders
        self.deadline = deadline

    async def cancel_all(self, market: str) -> List[Dict[str, Any]]:
        """
        Cancels every ACTIVE order on `market` concurrently.

        All-or-nothing: if any cancellation fails, the first error is raised,
        but only after every request has settled.
        """
        block_orders = await self.orders.get_orders(market, deadline=self.deadline)
        active = [order for order in block_orders if order.status == OrderStatus.ACTIVE.value]

        if not active:
            logger.info(f"🧹 No active orders on {market}")
            return []

        logger.warning(f"🧹 Cancelling {len(active)} active orders on {market}...")
        results = await asyncio.gather(
            *(self.orders.cancel_order(order.block_order_id, deadline=self.deadline) for order in active),
            return_exceptions=True,
        )

        failures = [(order, r) for order, r in zip(active, results) if isinstance(r, BaseException)]
        if failures:
            for order, error in failures:
                logger.error(f"❌ Cancel failed for {order.block_order_id}: {error}")
            raise failures[0][1]

        logger.info(f"✅ Cancelled {len(active)} orders on {market}")
        return list(results)

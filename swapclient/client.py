import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

import httpx

from swapclient.adapters.broker import BrokerGateway
from swapclient.adapters.core import OrderService, WalletService
from swapclient.core.settings import ClientConfig
from swapclient.schemas.orders import BlockOrder, OrderStatus, Side, TimeInForce
from swapclient.services.bulk_cancel import BulkCancelCoordinator
from swapclient.services.capacity import CapacityPlanner, parse_price, parse_side
from swapclient.services.watcher import Listener, OrderLifecycleWatcher, WatchSubscription

logger = logging.getLogger("SwapClient")

Amount = Union[str, int, Decimal]


class SwapClient:
    """
    Client for a broker daemon's order and wallet services.

    Construct one per broker with an explicit ClientConfig; there is no
    shared default instance. Use it as an async context manager, or call
    `close()` when done.

    `orders`/`wallet` default to a BrokerGateway built from the config and
    can be swapped for any OrderService/WalletService implementation.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        orders: Optional[OrderService] = None,
        wallet: Optional[WalletService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ClientConfig()
        deadline = self.config.RPC_DEADLINE_SECONDS

        self._gateway: Optional[BrokerGateway] = None
        if orders is None or wallet is None:
            self._gateway = BrokerGateway(self.config, transport=transport)

        self.orders: OrderService = orders or self._gateway
        self.wallet: WalletService = wallet or self._gateway

        self.planner = CapacityPlanner(self.wallet, deadline=deadline)
        self.watcher = OrderLifecycleWatcher(self.orders, deadline=deadline)
        self.bulk_cancel = BulkCancelCoordinator(self.orders, deadline=deadline)

    async def __aenter__(self) -> "SwapClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self.watcher.close()
        if self._gateway is not None:
            await self._gateway.close()

    # --- Orders ---

    async def place(self, market: str, side: Union[str, Side], price: Amount, amount: Amount) -> str:
        """Places a GTC limit order. Returns the broker's block order id."""
        side = parse_side(side)
        price = parse_price(price)

        logger.info(f"📤 Placing {side.value} {amount} {market} @ {price}")
        order_id = await self.orders.create_order(
            market,
            side,
            amount=str(amount),
            limit_price=str(price),
            time_in_force=TimeInForce.GTC,
            deadline=self.config.RPC_DEADLINE_SECONDS,
        )
        logger.info(f"✅ Order placed: {order_id}")
        return order_id

    async def get_order(self, order_id: str) -> BlockOrder:
        return await self.orders.get_order(order_id, deadline=self.config.RPC_DEADLINE_SECONDS)

    async def get_orders(self, market: str) -> List[BlockOrder]:
        return await self.orders.get_orders(market, deadline=self.config.RPC_DEADLINE_SECONDS)

    async def cancel_order(self, order_id: str) -> Dict[str, Any]:
        logger.info(f"🗑️ Cancelling {order_id}")
        return await self.orders.cancel_order(order_id, deadline=self.config.RPC_DEADLINE_SECONDS)

    async def cancel_all(self, market: str) -> List[Dict[str, Any]]:
        return await self.bulk_cancel.cancel_all(market)

    # --- Capacity ---

    async def max_order_size(self, market: str, side: Union[str, Side], price: Amount) -> str:
        """Largest order (in base units, 8 decimals) current capacity allows."""
        return await self.planner.max_order_size(market, side, price)

    # --- Lifecycle ---

    async def watch_order(
        self, order_id: str, interval: Optional[int] = None, on_fill: Optional[Listener] = None
    ) -> Optional[OrderStatus]:
        """Waits for a terminal state. Raises OrderFailed if the order FAILED."""
        interval = self.config.POLL_INTERVAL_MS if interval is None else interval
        return await self.watcher.watch(order_id, interval, on_fill=on_fill)

    def watch_order_fill_amounts(self, order_id: str, interval: Optional[int] = None) -> WatchSubscription:
        """Starts a background watch emitting `fill`, `done` and `error` notifications."""
        interval = self.config.POLL_INTERVAL_MS if interval is None else interval
        return self.watcher.stream(order_id, interval)

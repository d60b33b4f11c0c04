from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from swapclient.schemas.orders import BlockOrder, Side, TimeInForce, TradingCapacities


class OrderService(ABC):
    """
    Remote order-management contract of the broker.
    Services interact ONLY with this interface, never transport details.
    Every call accepts a deadline in seconds; None means the adapter default.
    """

    @abstractmethod
    async def get_orders(self, market: str, deadline: Optional[float] = None) -> List[BlockOrder]:
        """List every order the broker tracks for a market."""
        pass

    @abstractmethod
    async def get_order(self, order_id: str, deadline: Optional[float] = None) -> BlockOrder:
        """Fetch a single order by id."""
        pass

    @abstractmethod
    async def create_order(
        self,
        market: str,
        side: Side,
        amount: Union[str, Decimal],
        limit_price: Union[str, Decimal],
        time_in_force: TimeInForce = TimeInForce.GTC,
        deadline: Optional[float] = None,
    ) -> str:
        """Submit an order. Returns the broker-assigned order id."""
        pass

    @abstractmethod
    async def cancel_order(self, order_id: str, deadline: Optional[float] = None) -> Dict[str, Any]:
        """Cancel an open order."""
        pass


class WalletService(ABC):
    """Remote capacity contract of the broker."""

    @abstractmethod
    async def get_trading_capacities(self, market: str, deadline: Optional[float] = None) -> TradingCapacities:
        """Fetch available send/receive capacity for both symbols of a market."""
        pass

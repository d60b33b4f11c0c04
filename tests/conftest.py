from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from swapclient.core.settings import ClientConfig
from swapclient.schemas.orders import BlockOrder, SymbolCapacity, TradingCapacities


# 1. Plain-HTTP config so no cert is ever read
@pytest.fixture
def config():
    return ClientConfig(RPC_ADDRESS="broker.test:27492", DISABLE_AUTH=True, POLL_INTERVAL_MS=1)


# 2. Order factory
@pytest.fixture
def make_order():
    def _make(status="ACTIVE", fill_amount="0", order_id="order-1", limit_price="10000", market="BTC/USD"):
        return BlockOrder(
            block_order_id=order_id,
            market=market,
            side="BID",
            amount="1",
            limit_price=limit_price,
            status=status,
            fill_amount=fill_amount,
        )

    return _make


# 3. Mock the Broker Services
@pytest.fixture
def mock_broker():
    """
    Stands in for the BrokerGateway (both order and wallet services).
    """
    mock = MagicMock()

    # Async methods must return Awaitables
    mock.get_orders = AsyncMock(return_value=[])
    mock.get_order = AsyncMock()
    mock.create_order = AsyncMock(return_value="order-1")
    mock.cancel_order = AsyncMock(return_value={})
    mock.get_trading_capacities = AsyncMock(
        return_value=TradingCapacities(
            base_symbol_capacities=SymbolCapacity(
                symbol="BTC",
                available_send_capacity=Decimal("3"),
                available_receive_capacity=Decimal("2.0"),
            ),
            counter_symbol_capacities=SymbolCapacity(
                symbol="USD",
                available_send_capacity=Decimal("10000"),
                available_receive_capacity=Decimal("20000"),
            ),
        )
    )

    return mock

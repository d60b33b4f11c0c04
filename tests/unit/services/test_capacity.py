from decimal import Decimal

import pytest

from swapclient.core.errors import InvalidArgument, RemoteUnavailable
from swapclient.schemas.orders import Side, SymbolCapacity, TradingCapacities
from swapclient.services.capacity import CapacityPlanner


@pytest.mark.asyncio
async def test_bid_is_limited_by_send_capacity(mock_broker):
    """counter send 10000 / 10000 = 1.0 BTC vs base receive 2.0 BTC, both less 5%."""
    planner = CapacityPlanner(mock_broker)

    result = await planner.max_order_size("BTC/USD", "BID", "10000")

    assert result == "0.95000000"
    mock_broker.get_trading_capacities.assert_awaited_once_with("BTC/USD", deadline=None)


@pytest.mark.asyncio
async def test_ask_uses_base_send_and_counter_receive(mock_broker):
    # receive = 20000 / 10000 = 2, send = 3 -> min(1.9, 2.85)
    planner = CapacityPlanner(mock_broker)

    result = await planner.max_order_size("BTC/USD", Side.ASK, Decimal("10000"))

    assert result == "1.90000000"


@pytest.mark.asyncio
async def test_bid_limited_by_receive_capacity(mock_broker):
    planner = CapacityPlanner(mock_broker)

    # counter send 10000 / 1000 = 10 BTC, base receive 2.0 wins
    result = await planner.max_order_size("BTC/USD", "BID", 1000)

    assert result == "1.90000000"


@pytest.mark.asyncio
async def test_result_is_truncated_not_rounded(mock_broker):
    mock_broker.get_trading_capacities.return_value = TradingCapacities(
        base_symbol_capacities=SymbolCapacity(available_send_capacity="0", available_receive_capacity="100"),
        counter_symbol_capacities=SymbolCapacity(available_send_capacity="1", available_receive_capacity="0"),
    )
    planner = CapacityPlanner(mock_broker)

    # 1 / 3 * 0.95 = 0.316666...
    result = await planner.max_order_size("BTC/USD", "BID", "3")

    assert result == "0.31666666"


@pytest.mark.asyncio
async def test_zero_capacity_formats_without_exponent(mock_broker):
    mock_broker.get_trading_capacities.return_value = TradingCapacities(
        base_symbol_capacities=SymbolCapacity(),
        counter_symbol_capacities=SymbolCapacity(),
    )
    planner = CapacityPlanner(mock_broker)

    assert await planner.max_order_size("BTC/USD", "ASK", "10000") == "0.00000000"


@pytest.mark.asyncio
@pytest.mark.parametrize("side", ["BUY", "bid", "", None])
async def test_invalid_side_rejected_before_remote_call(mock_broker, side):
    planner = CapacityPlanner(mock_broker)

    with pytest.raises(InvalidArgument):
        await planner.max_order_size("BTC/USD", side, "10000")

    mock_broker.get_trading_capacities.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["0", "-5", "abc", "NaN"])
async def test_invalid_price_rejected(mock_broker, price):
    planner = CapacityPlanner(mock_broker)

    with pytest.raises(InvalidArgument):
        await planner.max_order_size("BTC/USD", "BID", price)


@pytest.mark.asyncio
async def test_remote_failure_propagates(mock_broker):
    mock_broker.get_trading_capacities.side_effect = RemoteUnavailable("broker down")
    planner = CapacityPlanner(mock_broker)

    with pytest.raises(RemoteUnavailable):
        await planner.max_order_size("BTC/USD", "BID", "10000")

    assert mock_broker.get_trading_capacities.await_count == 1


@pytest.mark.asyncio
async def test_very_large_capacity_keeps_eight_decimals(mock_broker):
    huge = Decimal("1E+25")
    mock_broker.get_trading_capacities.return_value = TradingCapacities(
        base_symbol_capacities=SymbolCapacity(available_send_capacity=huge, available_receive_capacity=huge),
        counter_symbol_capacities=SymbolCapacity(available_send_capacity=huge, available_receive_capacity=huge),
    )
    planner = CapacityPlanner(mock_broker)

    result = await planner.max_order_size("BTC/USD", "BID", "1")

    assert result == "9500000000000000000000000.00000000"

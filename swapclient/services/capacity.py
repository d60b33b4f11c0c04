import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from swapclient.adapters.core import WalletService
from swapclient.core.errors import InvalidArgument
from swapclient.schemas.orders import Side

logger = logging.getLogger("CapacityPlanner")

# Buffer against fees and slippage while the order is in flight
CAPACITY_HAIRCUT = Decimal("0.05")
SIZE_QUANTUM = Decimal("0.00000001")


def parse_side(side: Union[str, Side]) -> Side:
    try:
        return Side(side)
    except ValueError:
        raise InvalidArgument(f"Invalid side: {side}") from None


def parse_price(price: Union[str, int, Decimal]) -> Decimal:
    try:
        value = Decimal(str(price))
    except InvalidOperation:
        raise InvalidArgument(f"Invalid price: {price}") from None
    if not value.is_finite() or value <= 0:
        raise InvalidArgument(f"Invalid price: {price}")
    return value


class CapacityPlanner:
    """
    Converts the broker's channel capacities into the largest order
    that can be placed right now, in base units.
    """

    def __init__(self, wallet: WalletService, deadline: Optional[float] = None):
        self.wallet = wallet
        self.deadline = deadline

    async def max_order_size(self, market: str, side: Union[str, Side], price: Union[str, int, Decimal]) -> str:
        side = parse_side(side)
        price = parse_price(price)

        capacities = await self.wallet.get_trading_capacities(market, deadline=self.deadline)
        base = capacities.base_symbol_capacities
        counter = capacities.counter_symbol_capacities

        # A bid receives base and pays with counter
        if side == Side.BID:
            receive_capacity = base.available_receive_capacity
            send_capacity = counter.available_send_capacity / price
        else:
            receive_capacity = counter.available_receive_capacity / price
            send_capacity = base.available_send_capacity

        factor = 1 - CAPACITY_HAIRCUT
        size = min(send_capacity * factor, receive_capacity * factor)

        with localcontext() as ctx:
            # quantize needs room for every integer digit plus the 8 decimals
            ctx.prec = max(ctx.prec, size.adjusted() + 10)
            result = format(size.quantize(SIZE_QUANTUM, rounding=ROUND_DOWN), "f")
        logger.debug(
            f"📐 {market} {side.value} @ {price}: send={send_capacity} receive={receive_capacity} -> {result}"
        )
        return result

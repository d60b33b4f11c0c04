from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Side(str, Enum):
    BID = "BID"  # Buys base, pays counter
    ASK = "ASK"  # Sells base, receives counter


class OrderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class TimeInForce(str, Enum):
    GTC = "GTC"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETE, OrderStatus.CANCELLED, OrderStatus.FAILED})


class BrokerModel(BaseModel):
    """Base for payloads exchanged with the broker (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BlockOrder(BrokerModel):
    """
    Transient copy of a broker order.

    `status` is kept as the raw broker string: values outside OrderStatus
    are legal and are treated as non-terminal.
    """

    block_order_id: Optional[str] = None
    market: Optional[str] = None
    side: Optional[Side] = None
    amount: Optional[Decimal] = None
    limit_price: Optional[Decimal] = None
    time_in_force: Optional[str] = None
    status: str
    fill_amount: Decimal = Field(default=Decimal("0"))

    @field_validator("fill_amount", mode="before")
    @classmethod
    def _zero_when_missing(cls, value):
        # Unset proto strings arrive as "" or null
        return value or "0"

    @field_validator("side", "amount", "limit_price", mode="before")
    @classmethod
    def _none_when_blank(cls, value):
        return value if value not in ("", None) else None

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}


class SymbolCapacity(BrokerModel):
    symbol: Optional[str] = None
    available_send_capacity: Decimal = Decimal("0")
    available_receive_capacity: Decimal = Decimal("0")


class TradingCapacities(BrokerModel):
    base_symbol_capacities: SymbolCapacity
    counter_symbol_capacities: SymbolCapacity


class BlockOrderList(BrokerModel):
    block_orders: List[BlockOrder] = []


class CreateBlockOrderRequest(BrokerModel):
    market: str
    side: Side
    amount: str
    limit_price: str
    time_in_force: TimeInForce = TimeInForce.GTC


class FillEvent(BaseModel):
    """Incremental fill observed between two polls of the same order."""

    order_id: str
    amount: Decimal
    price: Optional[Decimal] = None

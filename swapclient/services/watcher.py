import asyncio
import inspect
import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from swapclient.adapters.core import OrderService
from swapclient.core.errors import InvalidArgument, OrderFailed
from swapclient.schemas.orders import FillEvent, OrderStatus

logger = logging.getLogger("OrderWatcher")

DEFAULT_POLL_INTERVAL_MS = 5000

Listener = Callable[[Any], Union[None, Awaitable[None]]]


async def _notify(callback: Optional[Listener], payload: Any) -> None:
    if callback is None:
        return
    result = callback(payload)
    if inspect.isawaitable(result):
        await result


async def _sleep_or_stop(stop: asyncio.Event, seconds: float) -> bool:
    """Sleeps for `seconds`. Returns True if `stop` was set meanwhile."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


class WatchSubscription:
    """
    Handle over a running fill-amount watch.

    Notifications:
    - "fill":  FillEvent, once per observed fill increase
    - "done":  terminal OrderStatus (COMPLETE or CANCELLED)
    - "error": the exception that ended the watch (OrderFailed, remote errors)

    Listeners may be plain functions or coroutine functions. The handle can
    also be consumed with `async for fill in subscription`.
    """

    EVENTS = ("fill", "done", "error")

    def __init__(self, order_id: str):
        self.order_id = order_id
        self.status: Optional[OrderStatus] = None
        self.error: Optional[BaseException] = None

        self._listeners: Dict[str, List[Listener]] = {event: [] for event in self.EVENTS}
        self._stop = asyncio.Event()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._ended = False  # a done/error/stopped item is on the queue

    def on(self, event: str, callback: Listener) -> "WatchSubscription":
        if event not in self._listeners:
            raise InvalidArgument(f"Unknown watch event: {event}")
        self._listeners[event].append(callback)
        return self

    async def _emit(self, event: str, payload: Any) -> None:
        self._queue.put_nowait((event, payload))
        if event != "fill":
            self._ended = True
        for callback in list(self._listeners[event]):
            await _notify(callback, payload)

    async def _emit_fill(self, fill: FillEvent) -> None:
        await self._emit("fill", fill)

    def cancel(self) -> None:
        """Stops the watch before its next poll."""
        if not self._stop.is_set():
            logger.info(f"🛑 Watch on {self.order_id} cancelled")
            self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def wait(self) -> Optional[OrderStatus]:
        """Awaits the watch. Returns the terminal status, or None if cancelled or failed."""
        if self._task is not None:
            try:
                await asyncio.shield(self._task)
            except asyncio.CancelledError:
                # Only swallow the stream being torn down, not our own cancellation
                if not self._task.cancelled():
                    raise
        return self.status

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while True:
            event, payload = await self._queue.get()
            if event == "fill":
                yield payload
            elif event == "error":
                raise payload
            else:
                return


class OrderLifecycleWatcher:
    """
    Polls a block order until it reaches a terminal state.

    One polling core, two front ends: `watch` awaits the terminal status,
    `stream` runs in the background and notifies subscribers.
    """

    def __init__(self, orders: OrderService, deadline: Optional[float] = None):
        self.orders = orders
        self.deadline = deadline
        self._streams: Set[asyncio.Task] = set()

    async def _poll_until_terminal(
        self,
        order_id: str,
        poll_interval_ms: int,
        on_fill: Optional[Listener],
        stop: asyncio.Event,
    ) -> Optional[OrderStatus]:
        """
        The polling loop. Returns the terminal status, None once `stop` is set,
        and raises OrderFailed for a FAILED order.
        """
        fill_amount = Decimal("0")

        while not stop.is_set():
            order = await self.orders.get_order(order_id, deadline=self.deadline)
            new_fill_amount = order.fill_amount

            if new_fill_amount > fill_amount:
                fill = FillEvent(order_id=order_id, amount=new_fill_amount - fill_amount, price=order.limit_price)
                logger.info(f"🟢 Fill on {order_id}: {fill.amount} @ {fill.price} (total {new_fill_amount})")
                await _notify(on_fill, fill)
                fill_amount = new_fill_amount
            elif new_fill_amount < fill_amount:
                # Broker went backwards; keep the higher baseline
                logger.warning(
                    f"⚠️ Fill amount on {order_id} decreased from {fill_amount} to {new_fill_amount}. Ignoring."
                )

            if order.status == OrderStatus.FAILED.value:
                logger.error(f"❌ Order {order_id} FAILED")
                raise OrderFailed(order_id)

            if order.is_terminal:
                logger.info(f"🏁 Order {order_id} finished: {order.status}")
                return OrderStatus(order.status)

            if await _sleep_or_stop(stop, poll_interval_ms / 1000):
                break

        logger.info(f"⏹️ Stopped watching {order_id}")
        return None

    async def watch(
        self,
        order_id: str,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        on_fill: Optional[Listener] = None,
        stop: Optional[asyncio.Event] = None,
    ) -> Optional[OrderStatus]:
        """
        Awaits the order's terminal state.

        Returns COMPLETE or CANCELLED, raises OrderFailed for FAILED. Stop it
        by cancelling the awaiting task or by setting `stop`, in which case
        None is returned.
        """
        return await self._poll_until_terminal(order_id, poll_interval_ms, on_fill, stop or asyncio.Event())

    def stream(self, order_id: str, poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS) -> WatchSubscription:
        """
        Starts a background watch and returns its subscription handle.

        Must be called from a running event loop. The first poll happens on
        the loop's next iteration, so listeners attached right after this
        call see every notification.
        """
        subscription = WatchSubscription(order_id)
        task = asyncio.get_running_loop().create_task(self._run_stream(subscription, poll_interval_ms))
        subscription._task = task

        self._streams.add(task)
        task.add_done_callback(self._streams.discard)
        return subscription

    async def _run_stream(self, subscription: WatchSubscription, poll_interval_ms: int) -> None:
        try:
            try:
                status = await self._poll_until_terminal(
                    subscription.order_id, poll_interval_ms, subscription._emit_fill, subscription._stop
                )
            except Exception as e:
                subscription.error = e
                await subscription._emit("error", e)
                return

            subscription.status = status
            if status is not None:
                await subscription._emit("done", status)
        finally:
            # Stopped, or torn down by close(): end iteration without a terminal status
            if not subscription._ended:
                subscription._ended = True
                subscription._queue.put_nowait(("stopped", None))

    async def close(self) -> None:
        """Cancels every running stream."""
        tasks = list(self._streams)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

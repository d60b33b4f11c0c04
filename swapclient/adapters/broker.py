import asyncio
import logging
import ssl
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from swapclient.adapters.core import OrderService, WalletService
from swapclient.core.errors import AuthConfigMissing, DeadlineExceeded, RemoteUnavailable
from swapclient.core.settings import ClientConfig
from swapclient.schemas.orders import (
    BlockOrder,
    BlockOrderList,
    CreateBlockOrderRequest,
    Side,
    TimeInForce,
    TradingCapacities,
)

logger = logging.getLogger("Gateway")

ModelT = TypeVar("ModelT", bound=BaseModel)

BLOCK_ORDERS_PATH = "/v1/block_orders"
TRADING_CAPACITIES_PATH = "/v1/wallet/trading_capacities"


class BrokerGateway(OrderService, WalletService):
    """
    Adapter for the broker daemon's order and wallet services.
    Features: TLS with the broker's own cert, Basic Auth, hard per-call deadline.

    Nothing is retried here: every transport failure or malformed reply
    surfaces as RemoteUnavailable (or DeadlineExceeded) to the caller.
    """

    def __init__(self, config: ClientConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.deadline = config.RPC_DEADLINE_SECONDS

        auth = None
        if not config.DISABLE_AUTH:
            # Fail fast, before any cert is read or any call is made
            if not config.RPC_USER:
                raise AuthConfigMissing("No username is specified for authentication")
            if not config.RPC_PASS:
                raise AuthConfigMissing("No password is specified for authentication")
            auth = httpx.BasicAuth(config.RPC_USER, config.RPC_PASS)

        client_kwargs: Dict[str, Any] = {"base_url": config.base_url, "auth": auth, "timeout": self.deadline}
        if transport is not None:
            client_kwargs["transport"] = transport
        elif not config.DISABLE_AUTH:
            client_kwargs["verify"] = ssl.create_default_context(cafile=config.cert_file)

        self.client = httpx.AsyncClient(**client_kwargs)
        logger.info(f"🔌 Broker gateway ready at {config.base_url} (auth={'off' if config.DISABLE_AUTH else 'on'})")

    async def close(self):
        await self.client.aclose()

    async def _request(self, method: str, path: str, deadline: Optional[float] = None, **kwargs) -> Any:
        """
        Single HTTP round-trip bounded by `deadline` seconds end to end.
        Returns the decoded JSON body ({} for an empty body).
        """
        timeout = self.deadline if deadline is None else deadline

        try:
            response = await asyncio.wait_for(
                self.client.request(method, path, timeout=timeout, **kwargs),
                timeout=timeout,
            )
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"⏱️ {method} {path} exceeded {timeout}s deadline")
            raise DeadlineExceeded(f"{method} {path} exceeded {timeout}s deadline") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"❌ {method} {path} -> {status}: {e.response.text}")
            raise RemoteUnavailable(f"{method} {path} failed with {status}: {e.response.text}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {e}")
            raise RemoteUnavailable(f"{method} {path} failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"❌ {method} {path} returned a non-JSON body")
            raise RemoteUnavailable(f"{method} {path} returned a non-JSON body: {response.text[:200]}") from e

    @staticmethod
    def _parse(model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"❌ Malformed {model.__name__} payload from broker: {e}")
            raise RemoteUnavailable(f"Malformed {model.__name__} payload from broker: {e}") from e

    # --- Order Service ---

    async def get_orders(self, market: str, deadline: Optional[float] = None) -> List[BlockOrder]:
        payload = await self._request("GET", BLOCK_ORDERS_PATH, deadline, params={"market": market})
        return self._parse(BlockOrderList, payload).block_orders

    async def get_order(self, order_id: str, deadline: Optional[float] = None) -> BlockOrder:
        payload = await self._request("GET", f"{BLOCK_ORDERS_PATH}/{quote(order_id, safe='')}", deadline)
        order = self._parse(BlockOrder, payload)
        if order.block_order_id is None:
            # The single-order payload does not echo its own id
            order.block_order_id = order_id
        return order

    async def create_order(
        self,
        market: str,
        side: Side,
        amount: Union[str, Decimal],
        limit_price: Union[str, Decimal],
        time_in_force: TimeInForce = TimeInForce.GTC,
        deadline: Optional[float] = None,
    ) -> str:
        request = CreateBlockOrderRequest(
            market=market,
            side=side,
            amount=str(amount),
            limit_price=str(limit_price),
            time_in_force=time_in_force,
        )
        payload = await self._request(
            "POST", BLOCK_ORDERS_PATH, deadline, json=request.model_dump(mode="json", by_alias=True)
        )
        order_id = payload.get("blockOrderId") if isinstance(payload, dict) else None
        if not order_id:
            raise RemoteUnavailable(f"Broker accepted order on {market} but returned no blockOrderId")
        return order_id

    async def cancel_order(self, order_id: str, deadline: Optional[float] = None) -> Dict[str, Any]:
        return await self._request("DELETE", f"{BLOCK_ORDERS_PATH}/{quote(order_id, safe='')}", deadline)

    # --- Wallet Service ---

    async def get_trading_capacities(self, market: str, deadline: Optional[float] = None) -> TradingCapacities:
        payload = await self._request("GET", TRADING_CAPACITIES_PATH, deadline, params={"market": market})
        return self._parse(TradingCapacities, payload)

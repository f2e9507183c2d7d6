"""
Order backend client

Features:
1. Create order - POST {API_URL}/orders, bounded by a client-side timeout
2. Get order - GET {API_URL}/orders/{id}, unwraps {success, data}
3. List orders - GET {API_URL}/orders (admin listing)

No caching and no automatic retries; every call is a fresh request.
"""
import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from storefront.config import get_settings
from storefront.errors import (
    RemoteOrderError, RemoteOrderKind, RetrievalError, RetrievalErrorKind
)
from storefront.models import Order, OrderData

logger = logging.getLogger(__name__)

ORDER_ID_FIELDS = ("orderId", "id", "_id")


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None


def extract_order_id(body: Any) -> Optional[str]:
    """Find the order identifier in a creation response"""
    if not isinstance(body, dict):
        return None
    for key in ORDER_ID_FIELDS:
        if body.get(key):
            return str(body[key])
    data = body.get("data")
    if isinstance(data, dict):
        for key in ORDER_ID_FIELDS:
            if data.get(key):
                return str(data[key])
    return None


class OrderService:
    """Order backend client"""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = get_settings()
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.order_request_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def create_order(self, order_data: OrderData) -> dict:
        """Create an order, returns the backend's JSON body"""
        url = f"{self.api_url}/orders"
        payload = order_data.model_dump(by_alias=True)
        logger.info("[Order] POST %s total=%s items=%d", url, order_data.total_amount, len(order_data.items))

        try:
            async with self._client() as client:
                # httpx times each phase separately, wait_for bounds the whole call
                response = await asyncio.wait_for(client.post(url, json=payload), self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error("[Order] request timed out after %ss: %s", self.timeout, e)
            raise RemoteOrderError(
                "Request timeout. Please check your connection and try again.",
                RemoteOrderKind.TIMEOUT
            ) from e
        except httpx.InvalidURL as e:
            logger.error("[Order] invalid API URL %s: %s", self.api_url, e)
            raise RemoteOrderError(
                f"Invalid API URL: {self.api_url}. Check your environment configuration.",
                RemoteOrderKind.GENERIC
            ) from e
        except httpx.TransportError as e:
            logger.error("[Order] cannot reach %s: %s", url, e)
            raise RemoteOrderError(
                f"Cannot reach backend at {url}. Check if backend is running and URL is correct.",
                RemoteOrderKind.UNREACHABLE
            ) from e

        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = {}
            logger.info("[Order] created (status %d)", response.status_code)
            return body

        status = response.status_code
        message = _error_message(response)
        logger.error("[Order] backend returned %d: %s", status, message or response.reason_phrase)

        if status == 400:
            raise RemoteOrderError(
                message or "Invalid order data. Please check your information.",
                RemoteOrderKind.INVALID_INPUT, status
            )
        if status in (401, 403):
            raise RemoteOrderError("Authentication failed. Please try again.", RemoteOrderKind.AUTH, status)
        if status == 404:
            raise RemoteOrderError("Order service not found. Please contact support.", RemoteOrderKind.NOT_FOUND, status)
        if status == 500:
            raise RemoteOrderError(
                message or "Server error. Please try again later.",
                RemoteOrderKind.SERVER_ERROR, status
            )
        raise RemoteOrderError(
            f"Server error ({status}): {message or response.reason_phrase}",
            RemoteOrderKind.SERVER_ERROR if status >= 500 else RemoteOrderKind.GENERIC,
            status
        )

    async def _get(self, path: str) -> Any:
        """GET a backend resource, mapping failures to RetrievalError"""
        url = f"{self.api_url}{path}"
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.InvalidURL as e:
            logger.error("[Order] invalid API URL %s: %s", self.api_url, e)
            raise RetrievalError(RetrievalErrorKind.UNREACHABLE) from e
        except httpx.TransportError as e:
            logger.error("[Order] GET %s got no response: %s", url, e)
            raise RetrievalError(RetrievalErrorKind.UNREACHABLE) from e

        status = response.status_code
        if status == 404:
            raise RetrievalError(RetrievalErrorKind.NOT_FOUND)
        if status == 400:
            raise RetrievalError(RetrievalErrorKind.INVALID_INPUT)
        if status >= 500:
            raise RetrievalError(RetrievalErrorKind.SERVER_ERROR)
        if not response.is_success:
            raise RetrievalError(RetrievalErrorKind.UNKNOWN, _error_message(response))

        try:
            return response.json()
        except ValueError as e:
            logger.error("[Order] GET %s returned invalid JSON", url)
            raise RetrievalError(RetrievalErrorKind.UNKNOWN) from e

    async def get_order(self, order_id: str) -> Order:
        """Fetch one order by id"""
        if not order_id or not order_id.strip():
            raise RetrievalError(RetrievalErrorKind.INVALID_INPUT)

        logger.info("[Order] fetching %s", order_id)
        body = await self._get(f"/orders/{quote(order_id.strip(), safe='')}")

        if not isinstance(body, dict) or not body.get("success") or not isinstance(body.get("data"), dict):
            raise RetrievalError(RetrievalErrorKind.UNKNOWN)

        try:
            return Order.model_validate(body["data"])
        except ValueError as e:
            logger.error("[Order] malformed order %s: %s", order_id, e)
            raise RetrievalError(RetrievalErrorKind.UNKNOWN) from e

    async def list_orders(self) -> list[Order]:
        """Fetch all orders (admin view)"""
        body = await self._get("/orders")

        if isinstance(body, dict):
            if body.get("success") is False:
                raise RetrievalError(RetrievalErrorKind.UNKNOWN)
            rows = body.get("data") or []
        else:
            rows = body

        if not isinstance(rows, list):
            raise RetrievalError(RetrievalErrorKind.UNKNOWN)

        orders = []
        for row in rows:
            try:
                orders.append(Order.model_validate(row))
            except ValueError as e:
                logger.warning("[Order] skipping malformed order row: %s", e)
        return orders

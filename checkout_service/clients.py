"""
clients.py — HTTP client for the order persistence and query API

The checkout creates orders and reads them back for status display through a
single REST API. This module encapsulates the protocol details: base URL,
timeouts, idempotency header and response parsing.
"""

import logging
from typing import List

import httpx

from .config import ORDER_API_URL
from .models import CreateOrderRequest, Order

log = logging.getLogger(__name__)

ORDERS_PATH = "/api/education/orders"


class OrderApiClient:
    """
    Client for the order persistence API (REST).
    Creates orders and fetches persisted order records.
    """

    def __init__(self, base_url: str = ORDER_API_URL, transport: httpx.BaseTransport = None,
                 http_client: httpx.Client = None):
        """
        Initializes the HTTP client with the default timeout configuration.

        Args:
            base_url (str): Base URL of the order API.
            transport (httpx.BaseTransport): Optional transport override.
            http_client (httpx.Client): Ready-made client to use instead, e.g. a test client.
        """
        self.client = http_client or httpx.Client(base_url=base_url, transport=transport)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def create_order(self, payload: CreateOrderRequest) -> dict:
        """
        Creates a new order.

        Args:
            payload (CreateOrderRequest): The order to persist.

        Returns:
            dict: JSON response, usually containing `orderId`.

        Raises:
            httpx.HTTPStatusError: If the API answers with a non-2xx status.
            httpx.TransportError: If the API cannot be reached.
        """
        headers = {"Idempotency-Key": payload.idempotencyKey}
        body = payload.model_dump(mode="json", exclude_none=True)
        # shippingInfo is sent as an explicit null for digital-only orders
        body.setdefault("shippingInfo", None)

        try:
            response = self.client.post(ORDERS_PATH, json=body, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error(f"[User: {payload.userId}] Order API rejected order (HTTP {e.response.status_code}).")
            raise
        except httpx.TransportError as e:
            log.error(f"[User: {payload.userId}] Order API unreachable: {e!r}")
            raise

        try:
            return response.json()
        except ValueError:
            return {}

    def list_orders(self, user_id: str) -> List[Order]:
        """
        Fetches the order history of a user.

        Raises:
            httpx.HTTPError: If the order API is unreachable or answers with an error.
            pydantic.ValidationError: If a record does not match the Order schema.
        """
        response = self.client.get(ORDERS_PATH, params={"userId": user_id})
        response.raise_for_status()
        return [Order.model_validate(record) for record in response.json()]

    def get_order(self, order_id: str) -> Order:
        """
        Fetches a single persisted order.

        Raises:
            httpx.HTTPStatusError: 404 if the order does not exist.
        """
        response = self.client.get(f"{ORDERS_PATH}/{order_id}")
        response.raise_for_status()
        return Order.model_validate(response.json())

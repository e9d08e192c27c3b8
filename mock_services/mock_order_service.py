"""
mock_order_service.py — Mock Implementation of the Order Persistence API (REST)

This module provides a simulated order backend for testing the checkout flow.
It exposes a simple FastAPI application that stores orders in memory and
mimics the behavior of the real order API.

Simulation Scenarios:
    • Successful order creation
    • Server error (HTTP 500) for user ids starting with "fail_"
    • Idempotent replays: a repeated Idempotency-Key returns the first order

Endpoints:
    POST /api/education/orders — Creates an order.
    GET  /api/education/orders?userId= — Lists a user's orders.
    GET  /api/education/orders/{order_id} — Fetches one order.
    PATCH /api/education/orders/{order_id}/status — Back-office status change.

Port:
    Default: 8002 (HTTP)
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Mock Order Service")
logging.basicConfig(level=logging.INFO)

_orders: Dict[str, dict] = {}
_by_idempotency_key: Dict[str, str] = {}
_lock = threading.Lock()


class Status(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPING = "SHIPPING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CreateOrder(BaseModel):
    """
    Represents an order creation payload.

    Attributes:
        userId (str): Owner of the order.
        items (list): Line items as sent by the checkout.
        totalAmount (float): Payable amount in Baht.
        shippingInfo (dict | None): Recipient and address, or None for digital orders.
        paymentMethod (str): Payment method tag.
        slipUrl (str): Reference to the payment slip.
        status (Status | None): Initial status; PENDING when omitted.
        isTestMode (bool | None): Marks orders created through the test-mode bypass.
    """
    userId: str
    items: List[Dict[str, Any]]
    totalAmount: float
    shippingInfo: Optional[Dict[str, Any]] = None
    paymentMethod: str
    slipUrl: Optional[str] = None
    status: Optional[Status] = None
    isTestMode: Optional[bool] = None


class StatusChange(BaseModel):
    status: Status


def reset():
    """Drops all stored orders."""
    with _lock:
        _orders.clear()
        _by_idempotency_key.clear()


@app.post("/api/education/orders")
def create_order(
        request: CreateOrder,
        idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key")
):
    """
    Persists a new order.

    Returns:
        dict: {"success": True, "orderId": <id>}

    Raises:
        HTTPException(500): For user ids starting with "fail_".
    """
    logging.info(f"[OS] Order request for {request.userId} (Idempotency: {idempotency_key})")

    if request.userId.startswith("fail_"):
        logging.warning(f"[OS] Simulated failure for {request.userId}.")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error"})

    with _lock:
        if idempotency_key and idempotency_key in _by_idempotency_key:
            order_id = _by_idempotency_key[idempotency_key]
            logging.info(f"[OS] Replay of {idempotency_key}, returning {order_id}.")
            return {"success": True, "orderId": order_id}

        order_id = f"ORD-{uuid.uuid4().hex[:10].upper()}"
        now = datetime.now(timezone.utc).isoformat()
        _orders[order_id] = {
            "id": order_id,
            **request.model_dump(exclude={"status"}),
            "status": (request.status or Status.PENDING).value,
            "createdAt": now,
            "updatedAt": now,
        }
        if idempotency_key:
            _by_idempotency_key[idempotency_key] = order_id

    logging.info(f"[OS] Order {order_id} stored.")
    return {"success": True, "orderId": order_id}


@app.get("/api/education/orders")
def list_orders(userId: str):
    with _lock:
        return [order for order in _orders.values() if order["userId"] == userId]


@app.get("/api/education/orders/{order_id}")
def get_order(order_id: str):
    with _lock:
        order = _orders.get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@app.patch("/api/education/orders/{order_id}/status")
def change_status(order_id: str, change: StatusChange):
    with _lock:
        order = _orders.get(order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        order["status"] = change.status.value
        order["updatedAt"] = datetime.now(timezone.utc).isoformat()
    return order


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)

import json

import httpx
import pytest

from checkout_service.clients import OrderApiClient
from checkout_service.models import CreateOrderRequest, OrderStatus

from conftest import mk_item


def mk_payload(**overrides) -> CreateOrderRequest:
    fields = dict(
        userId="uid-1",
        items=[mk_item()],
        totalAmount=100,
        shippingInfo=None,
        paymentMethod="bank-transfer",
        slipUrl="https://placehold.co/400x600/png?text=Slip",
        idempotencyKey="key-1",
    )
    fields.update(overrides)
    return CreateOrderRequest(**fields)


def client_for(handler) -> OrderApiClient:
    return OrderApiClient("http://orders.test", transport=httpx.MockTransport(handler))


def test_create_order_posts_payload_with_idempotency_header():
    seen = {}

    def handler(request: httpx.Request):
        seen["path"] = request.url.path
        seen["key"] = request.headers.get("Idempotency-Key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "orderId": "ORD-9"})

    with client_for(handler) as client:
        response = client.create_order(mk_payload())

    assert response["orderId"] == "ORD-9"
    assert seen["path"] == "/api/education/orders"
    assert seen["key"] == "key-1"
    assert seen["body"]["status"] == "PAID"
    assert seen["body"]["shippingInfo"] is None
    assert seen["body"]["idempotencyKey"] == "key-1"
    assert "isTestMode" not in seen["body"]
    assert seen["body"]["items"][0]["unitPrice"] == 100


def test_any_2xx_is_accepted():
    with client_for(lambda request: httpx.Response(204)) as client:
        assert client.create_order(mk_payload()) == {}


def test_non_2xx_raises():
    with client_for(lambda request: httpx.Response(500, json={"error": "x"})) as client:
        with pytest.raises(httpx.HTTPStatusError):
            client.create_order(mk_payload())


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with client_for(handler) as client:
        with pytest.raises(httpx.TransportError):
            client.create_order(mk_payload())


def test_get_and_list_orders():
    record = {
        "id": "ORD-1",
        "userId": "uid-1",
        "items": [{"id": "b1", "title": "หนังสือ", "unitPrice": 450, "quantity": 1}],
        "totalAmount": 450,
        "status": "SHIPPING",
        "shippingInfo": {"name": "a", "phone": "b", "address": "c", "trackingNumber": "TH1"},
        "createdAt": "2026-01-08T10:30:00",
    }

    def handler(request: httpx.Request):
        if request.url.path.endswith("/ORD-1"):
            return httpx.Response(200, json=record)
        assert request.url.params["userId"] == "uid-1"
        return httpx.Response(200, json=[record])

    with client_for(handler) as client:
        order = client.get_order("ORD-1")
        orders = client.list_orders("uid-1")

    assert order.status == OrderStatus.SHIPPING
    assert order.shippingInfo.trackingNumber == "TH1"
    assert [o.id for o in orders] == ["ORD-1"]

"""Shared fixtures: an in-process fake of the Mercado Livre API."""
import asyncio
import copy
import re
from typing import Any, Optional

import httpx
import pytest

from src.fetch.client import MLClient
from src.fetch.tracker import EndpointTracker

BASE_URL = "https://api.ml.test"
TOKEN = "APP_USR-1234567890-101010-abcdefabcdefabcdef-999"

ORDER_ID = 2000001
ORDER_DETAIL_PATH = re.compile(r"^/orders/\d+$")
BUYER_ID = 111
SELLER_ID = 222


def make_order(order_id: int = ORDER_ID, **overrides) -> dict:
    """Order summary as returned by /orders/search."""
    order = {
        "id": order_id,
        "status": "paid",
        "status_detail": None,
        "date_created": "2024-05-01T10:00:00.000-03:00",
        "date_closed": "2024-05-01T10:01:00.000-03:00",
        "last_updated": "2024-05-02T09:00:00.000-03:00",
        "total_amount": 100.0,
        "paid_amount": 115.5,
        "currency_id": "BRL",
        "pack_id": None,
        "tags": ["paid", "not_delivered"],
        "fulfilled": None,
        "buyer": {"id": BUYER_ID},
        "seller": {"id": SELLER_ID},
        "payments": [{"id": 333}],
        "shipping": {"id": 444},
        "order_items": [
            {"item": {"id": "MLB1", "title": "Capa"}, "quantity": 2, "unit_price": 50.0}
        ],
    }
    order.update(overrides)
    return order


def default_routes(order_id: int = ORDER_ID) -> dict[str, Any]:
    """Responses for an order where every section succeeds."""
    return {
        f"/orders/{order_id}": {
            "id": order_id,
            "context": {"channel": "marketplace"},
            "mediations": [],
            "order_items": [
                {
                    "item": {
                        "id": "MLB1",
                        "variation_id": 987,
                        "seller_sku": "SKU-1",
                        "attributes": [{"id": "MANUFACTURING_TIME", "value_name": "5 dias"}],
                    },
                    "quantity": 2,
                    "unit_price": 50.0,
                    "full_unit_price": 60.0,
                    "sale_fee": 8.5,
                }
            ],
        },
        "/payments/333": {
            "id": 333,
            "status": "approved",
            "payment_method_id": "pix",
            "payment_type_id": "bank_transfer",
            "transaction_amount": 100.0,
            "card": {"id": None, "last_four_digits": None},
            "issuer": {"name": "Banco"},
        },
        "/shipments/444": {
            "id": 444,
            "status": "shipped",
            "mode": "me2",
            "tracking_number": "BR123",
            "logistic": {"type": "drop_off"},
            "shipping_option": {"cost": 15.5, "estimated_delivery_time": {"date": "2024-05-05"}},
        },
        "/post-purchase/v1/claims/search": {"data": []},
        f"/users/{BUYER_ID}": {"id": BUYER_ID, "nickname": "COMPRADOR", "buyer_reputation": {"tags": []}},
        f"/users/{SELLER_ID}": {"id": SELLER_ID, "nickname": "LOJA", "seller_reputation": {"level_id": "5_green"}},
        "/items/MLB1": {
            "id": "MLB1",
            "title": "Capa de Banco",
            "category_id": "MLB123",
            "condition": "new",
            "pictures": [{"url": "https://img.test/1.jpg"}, {"url": "https://img.test/2.jpg"}],
            "catalog_product_id": "MLBCAT1",
        },
        "/catalog_products/MLBCAT1": {"id": "MLBCAT1", "buy_box_winner": {"price": 99.9}},
        f"/orders/{order_id}/feedback": [
            {"id": 1, "role": "buyer", "rating": "positive", "message": "ok"},
            {"id": 2, "role": "seller", "rating": "positive"},
        ],
        f"/messages/orders/{order_id}": {
            "results": [
                {"id": "m2", "date_created": "2024-05-02", "read": False, "from": {"user_id": BUYER_ID}},
                {"id": "m1", "date_created": "2024-05-01", "read": True, "from": {"user_id": str(SELLER_ID)}},
            ]
        },
    }


class FakeMercadoLivre:
    """Routes by URL path; unknown paths answer 404."""

    def __init__(self):
        self.routes: dict[str, tuple[int, Any]] = {}
        self.network_errors: set[str] = set()
        self.calls: list[httpx.Request] = []
        # Seconds each response is held back, so overlapping requests can be observed
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.orders_in_flight = 0
        self.max_orders_in_flight = 0

    def set(self, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[path] = (status, copy.deepcopy(body))

    def fail(self, path: str, status: int = 500, message: str = "internal error") -> None:
        self.routes[path] = (status, {"message": message})

    def add_order(self, order_id: int) -> None:
        for path, body in default_routes(order_id).items():
            self.set(path, body)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.calls]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        is_order = bool(ORDER_DETAIL_PATH.match(request.url.path))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if is_order:
            self.orders_in_flight += 1
            self.max_orders_in_flight = max(self.max_orders_in_flight, self.orders_in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.respond(request)
        finally:
            self.in_flight -= 1
            if is_order:
                self.orders_in_flight -= 1

    def respond(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path in self.network_errors:
            raise httpx.ConnectError("connection refused", request=request)
        if path not in self.routes:
            return httpx.Response(404, json={"message": f"{path} not found"})
        status, body = self.routes[path]
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def client(self, tracker: Optional[EndpointTracker] = None, token: str = TOKEN, **kwargs) -> MLClient:
        kwargs.setdefault("max_retries", 0)
        kwargs.setdefault("rate_per_second", 0)
        return MLClient(
            token,
            tracker=tracker,
            base_url=BASE_URL,
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )

    def client_factory(self):
        def factory(access_token: str, tracker: EndpointTracker) -> MLClient:
            return self.client(tracker=tracker, token=access_token)
        return factory


@pytest.fixture
def fake_ml() -> FakeMercadoLivre:
    """Fake API where one order enriches fully."""
    fake = FakeMercadoLivre()
    fake.add_order(ORDER_ID)
    fake.set("/orders/search", {"results": [make_order()]})
    return fake


@pytest.fixture
def order_payload() -> dict:
    return make_order()

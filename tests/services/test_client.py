"""Interactive Client — HTTP wrapper and menu flow against a mocked server.

Tests cover:
    - request shapes sent for products, stock patch and orders
    - server errors become ClientError with the error code
    - the menu prints failures and keeps going
"""

import json
from decimal import Decimal

import httpx
import pytest

from storefront.client import (
    ClientError, StorefrontClient, format_order_total, menu,
)

ORDER = {
    "id": 7, "customer_id": 1, "created_at": "2024-01-01T00:00:00Z",
    "items": [
        {"id": 1, "order_id": 7, "product_id": 1, "qty": 2, "price_each": "10.00"},
        {"id": 2, "order_id": 7, "product_id": 2, "qty": 3, "price_each": "2.50"},
    ],
    "total": "27.50",
}


def _client(handler) -> StorefrontClient:
    http = httpx.Client(
        transport=httpx.MockTransport(handler), base_url="http://test",
    )
    return StorefrontClient("http://test", http=http)


def _feed(monkeypatch, answers: list[str]) -> None:
    it = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


def test_create_order_posts_items():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=ORDER)

    created = _client(handler).create_order(1, [{"product_id": 1, "qty": 2}])

    assert seen["path"] == "/orders"
    assert seen["body"] == {"customer_id": 1, "items": [{"product_id": 1, "qty": 2}]}
    assert created["id"] == 7


def test_create_product_sends_price_as_string():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 3})

    _client(handler).create_product("Widget", Decimal("9.99"), 4)

    assert seen["body"] == {"name": "Widget", "price": "9.99", "stock": 4}


def test_update_stock_uses_patch():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={"id": 3, "stock": 8})

    _client(handler).update_stock(3, 8)

    assert (seen["method"], seen["path"]) == ("PATCH", "/products/3/stock")


def test_error_response_raises_client_error():
    def handler(request):
        return httpx.Response(409, json={"error": {
            "code": "INSUFFICIENT_STOCK", "message": "not enough",
        }})

    with pytest.raises(ClientError, match="INSUFFICIENT_STOCK: not enough"):
        _client(handler).create_order(1, [{"product_id": 1, "qty": 99}])


def test_non_json_error_reports_status():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(ClientError, match="502"):
        _client(handler).list_orders()


def test_server_up_false_when_unreachable():
    def handler(request):
        raise httpx.ConnectError("refused")

    assert _client(handler).server_up() is False


def test_format_order_total():
    assert format_order_total(ORDER) == Decimal("27.50")


def test_menu_create_order_flow(monkeypatch, capsys):
    def handler(request):
        return httpx.Response(201, json=ORDER)

    _feed(monkeypatch, ["6", "1", "1", "2", "2", "3", "", "0"])
    menu(_client(handler))

    assert "Created order #7 with 2 items (total $27.50)" in capsys.readouterr().out


def test_menu_reports_error_and_continues(monkeypatch, capsys):
    def handler(request):
        return httpx.Response(404, json={"error": {
            "code": "PRODUCT_NOT_FOUND", "message": "Product '9' not found",
        }})

    _feed(monkeypatch, ["3", "9", "1", "x", "0"])
    menu(_client(handler))

    out = capsys.readouterr().out
    assert "Error: PRODUCT_NOT_FOUND" in out
    assert "Invalid choice" in out

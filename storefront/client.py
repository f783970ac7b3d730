"""Interactive Client — terminal menu over the storefront HTTP API.

Invariants:
    - Talks to the server only through HTTP (httpx); never opens the database
    - Server errors are printed and the menu continues

Usage: storefront-client  (SERVER_URL overrides the default http://localhost:8080)
"""

from decimal import Decimal, InvalidOperation

import httpx

from storefront.config import get_settings

MENU = """
--- MENU ---
1) List products
2) Add product
3) Update stock
4) List customers
5) Add customer
6) Create order
7) View orders
0) Exit"""


class ClientError(Exception):
    """Non-2xx response from the server."""


class StorefrontClient:
    """Thin JSON wrapper around the storefront endpoints."""

    def __init__(self, base_url: str, http: httpx.Client | None = None):
        self.http = http or httpx.Client(base_url=base_url, timeout=4.0)

    def server_up(self) -> bool:
        try:
            return self.http.get("/health", timeout=0.8).status_code == 200
        except httpx.HTTPError:
            return False

    def _send(self, method: str, path: str, body: dict | None = None):
        response = self.http.request(method, path, json=body)
        if response.status_code >= 300:
            raise ClientError(_error_message(response))
        return response.json()

    def list_products(self) -> list[dict]:
        return self._send("GET", "/products")

    def create_product(self, name: str, price: Decimal, stock: int) -> dict:
        return self._send(
            "POST", "/products",
            {"name": name, "price": str(price), "stock": stock},
        )

    def update_stock(self, product_id: int, stock: int) -> dict:
        return self._send(
            "PATCH", f"/products/{product_id}/stock", {"stock": stock},
        )

    def list_customers(self) -> list[dict]:
        return self._send("GET", "/customers")

    def create_customer(self, name: str, phone: str) -> dict:
        return self._send("POST", "/customers", {"name": name, "phone": phone})

    def create_order(self, customer_id: int, items: list[dict]) -> dict:
        return self._send(
            "POST", "/orders", {"customer_id": customer_id, "items": items},
        )

    def list_orders(self) -> list[dict]:
        return self._send("GET", "/orders")


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
        return f"{error.get('code', response.status_code)}: {error.get('message', '')}"
    except ValueError:
        return f"server error: {response.status_code}"


# ─── Input helpers ──────────────────────────────────────────────

def read_line(prompt: str) -> str:
    return input(prompt).strip()


def read_int(prompt: str) -> int:
    while True:
        try:
            return int(read_line(prompt))
        except ValueError:
            print("Please enter a valid integer.")


def read_decimal(prompt: str) -> Decimal:
    while True:
        try:
            return Decimal(read_line(prompt))
        except InvalidOperation:
            print("Please enter a valid number.")


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    widths = [
        max([len(h)] + [len(r[i]) for r in rows]) for i, h in enumerate(headers)
    ]
    for row in [headers] + rows:
        print("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))


def format_order_total(order: dict) -> Decimal:
    return sum(
        (Decimal(str(i["price_each"])) * i["qty"] for i in order["items"]),
        Decimal("0"),
    )


# ─── Menu actions ───────────────────────────────────────────────

def _list_products(client: StorefrontClient) -> None:
    print_table(
        ["ID", "NAME", "PRICE", "STOCK", "CREATED"],
        [
            [str(p["id"]), p["name"], p["price"], str(p["stock"]), p["created_at"]]
            for p in client.list_products()
        ],
    )


def _add_product(client: StorefrontClient) -> None:
    name = read_line("Product name: ")
    price = read_decimal("Price: ")
    stock = read_int("Stock: ")
    created = client.create_product(name, price, stock)
    print(f"Created product #{created['id']}")


def _update_stock(client: StorefrontClient) -> None:
    product_id = read_int("Product ID: ")
    stock = read_int("New stock: ")
    updated = client.update_stock(product_id, stock)
    print(f"Updated product #{updated['id']} stock={updated['stock']}")


def _list_customers(client: StorefrontClient) -> None:
    print_table(
        ["ID", "NAME", "PHONE", "CREATED"],
        [
            [str(c["id"]), c["name"], c["phone"], c["created_at"]]
            for c in client.list_customers()
        ],
    )


def _add_customer(client: StorefrontClient) -> None:
    name = read_line("Customer name: ")
    phone = read_line("Phone (optional): ")
    created = client.create_customer(name, phone)
    print(f"Created customer #{created['id']}")


def _create_order(client: StorefrontClient) -> None:
    customer_id = read_int("Customer ID: ")
    items = []
    while True:
        text = read_line("Product ID (blank to finish): ")
        if not text:
            break
        try:
            product_id = int(text)
        except ValueError:
            print("Invalid product id.")
            continue
        items.append({"product_id": product_id, "qty": read_int("Qty: ")})
    created = client.create_order(customer_id, items)
    print(
        f"Created order #{created['id']} with {len(created['items'])} items "
        f"(total ${format_order_total(created):.2f})",
    )


def _view_orders(client: StorefrontClient) -> None:
    for order in client.list_orders():
        print(
            f"Order #{order['id']} customer={order['customer_id']} "
            f"created={order['created_at']}",
        )
        for item in order["items"]:
            print(
                f"  item #{item['id']} product={item['product_id']} "
                f"qty={item['qty']} price={Decimal(str(item['price_each'])):.2f}",
            )


ACTIONS = {
    "1": _list_products,
    "2": _add_product,
    "3": _update_stock,
    "4": _list_customers,
    "5": _add_customer,
    "6": _create_order,
    "7": _view_orders,
}


def menu(client: StorefrontClient) -> None:
    while True:
        print(MENU)
        choice = read_line("> ")
        if choice == "0":
            return
        action = ACTIONS.get(choice)
        if action is None:
            print("Invalid choice")
            continue
        try:
            action(client)
        except (ClientError, httpx.HTTPError) as e:
            print("Error:", e)


def main() -> None:
    client = StorefrontClient(get_settings().server_url)
    if not client.server_up():
        print("Server not reachable.")
        return
    try:
        menu(client)
    except (EOFError, KeyboardInterrupt):
        print()
